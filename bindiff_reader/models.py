import dataclasses
import datetime

from .algorithms import BasicBlockAlgorithmVariant, FunctionAlgorithmVariant


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class FileRecord:
    id: int
    filename: str
    exe_filename: str
    hash: str
    functions: int
    lib_functions: int
    calls: int
    basic_blocks: int
    lib_basic_blocks: int
    edges: int
    lib_edges: int
    instructions: int
    lib_instructions: int


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class ComparisonMetadata:
    version: str
    file1: int
    file2: int
    description: str
    created: datetime.datetime
    modified: datetime.datetime
    similarity: float
    confidence: float


# --------------------------------------


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class FunctionMatch:
    id: int
    address1: int
    name1: str
    address2: int
    name2: str
    similarity: float
    confidence: float
    flags: int
    algorithm: FunctionAlgorithmVariant
    evaluate: bool
    comment_supported: bool
    basic_blocks: int
    edges: int
    instructions: int


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class BasicBlockMatch:
    id: int
    function_id: int
    address1: int
    address2: int
    algorithm: BasicBlockAlgorithmVariant
    evaluate: bool


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class InstructionMatch:
    id: int  # basicblockid column
    address1: int
    address2: int
