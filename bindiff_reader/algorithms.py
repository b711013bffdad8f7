import dataclasses
import enum
from typing import Union


@dataclasses.dataclass(frozen=True, slots=True)
class OtherAlgorithm:
    """Algorithm id outside the known table, kept as its decimal text."""

    code: str

    @property
    def name(self) -> str:
        return "OTHER"

    @property
    def label(self) -> str:
        return f"other({self.code})"

    def __str__(self) -> str:
        return self.label


class FunctionAlgorithm(enum.Enum):
    NONE = 0
    NAME_HASH_MATCHING = 1
    HASH_MATCHING = 2
    EDGES_FLOWGRAPH_MD_INDEX = 3
    EDGES_CALLGRAPH_MD_INDEX = 4
    MD_INDEX_MATCHING_FLOWGRAPH_TOP_DOWN = 5
    MD_INDEX_MATCHING_FLOWGRAPH_BOTTOM_UP = 6
    PRIME_SIGNATURE_MATCHING = 7
    MD_INDEX_MATCHING_CALLGRAPH_TOP_DOWN = 8
    MD_INDEX_MATCHING_CALLGRAPH_BOTTOM_UP = 9
    RELAXED_MD_INDEX_MATCHING = 10
    INSTRUCTION_COUNT = 11
    ADDRESS_SEQUENCE = 12
    STRING_REFERENCES = 13
    LOOP_COUNT_MATCHING = 14
    CALL_SEQUENCE_MATCHING_EXACT = 15
    CALL_SEQUENCE_MATCHING_TOPOLOGY = 16
    CALL_SEQUENCE_MATCHING_SEQUENCE = 17
    CALL_REFERENCE_MATCHING = 18
    MANUAL = 19

    @classmethod
    def from_code(cls, code: int) -> "FunctionAlgorithmVariant":
        try:
            return cls(code)
        except ValueError:
            return OtherAlgorithm(str(code))

    @property
    def label(self) -> str:
        return _function_algorithm_labels[self]

    def __str__(self) -> str:
        return self.label


class BasicBlockAlgorithm(enum.Enum):
    NONE = 0
    EDGES_PRIME_PRODUCT = 1
    HASH_MATCHING_FOUR_INST_MIN = 2
    PRIME_MATCHING_FOUR_INST_MIN = 3
    CALL_REFERENCE_MATCHING = 4
    STRING_REFERENCES_MATCHING = 5
    EDGES_MD_INDEX_TOP_DOWN = 6
    MD_INDEX_MATCHING_TOP_DOWN = 7
    EDGES_MD_INDEX_BOTTOM_UP = 8
    MD_INDEX_MATCHING_BOTTOM_UP = 9
    RELAXED_MD_INDEX_MATCHING = 10
    PRIME_MATCHING_NO_INST_MIN = 11
    EDGES_LENGAUER_TARJAN_DOMINATED = 12
    LOOP_ENTRY_MATCHING = 13
    SELF_LOOP_MATCHING = 14
    ENTRY_POINT_MATCHING = 15
    EXIT_POINT_MATCHING = 16
    INSTRUCTION_COUNT_MATCHING = 17
    JUMP_SEQUENCE_MATCHING = 18
    PROPAGATION_SIZE_ONE = 19
    MANUAL = 20

    @classmethod
    def from_code(cls, code: int) -> "BasicBlockAlgorithmVariant":
        try:
            return cls(code)
        except ValueError:
            return OtherAlgorithm(str(code))

    @property
    def label(self) -> str:
        return _basicblock_algorithm_labels[self]

    def __str__(self) -> str:
        return self.label


FunctionAlgorithmVariant = Union[FunctionAlgorithm, OtherAlgorithm]
BasicBlockAlgorithmVariant = Union[BasicBlockAlgorithm, OtherAlgorithm]


# labels are what BinDiff itself prints; never rename them
_function_algorithm_labels: dict[FunctionAlgorithm, str] = {
    FunctionAlgorithm.NONE: "none",
    FunctionAlgorithm.NAME_HASH_MATCHING: "name hash matching",
    FunctionAlgorithm.HASH_MATCHING: "hash matching",
    FunctionAlgorithm.EDGES_FLOWGRAPH_MD_INDEX: "edges flowgraph MD index",
    FunctionAlgorithm.EDGES_CALLGRAPH_MD_INDEX: "edges callgraph MD index",
    FunctionAlgorithm.MD_INDEX_MATCHING_FLOWGRAPH_TOP_DOWN: "MD index matching (flowgraph MD index, top down)",
    FunctionAlgorithm.MD_INDEX_MATCHING_FLOWGRAPH_BOTTOM_UP: "MD index matching (flowgraph MD index, bottom up)",
    FunctionAlgorithm.PRIME_SIGNATURE_MATCHING: "signature matching",
    FunctionAlgorithm.MD_INDEX_MATCHING_CALLGRAPH_TOP_DOWN: "MD index matching (callGraph MD index, top down)",
    FunctionAlgorithm.MD_INDEX_MATCHING_CALLGRAPH_BOTTOM_UP: "MD index matching (callGraph MD index, bottom up)",
    FunctionAlgorithm.RELAXED_MD_INDEX_MATCHING: "MD index matching",
    FunctionAlgorithm.INSTRUCTION_COUNT: "instruction count",
    FunctionAlgorithm.ADDRESS_SEQUENCE: "address sequence",
    FunctionAlgorithm.STRING_REFERENCES: "string references",
    FunctionAlgorithm.LOOP_COUNT_MATCHING: "loop count matching",
    FunctionAlgorithm.CALL_SEQUENCE_MATCHING_EXACT: "call sequence matching(exact)",
    FunctionAlgorithm.CALL_SEQUENCE_MATCHING_TOPOLOGY: "call sequence matching(topology)",
    FunctionAlgorithm.CALL_SEQUENCE_MATCHING_SEQUENCE: "call sequence matching(sequence)",
    FunctionAlgorithm.CALL_REFERENCE_MATCHING: "call references matching",
    FunctionAlgorithm.MANUAL: "manual",
}

_basicblock_algorithm_labels: dict[BasicBlockAlgorithm, str] = {
    BasicBlockAlgorithm.NONE: "none",
    BasicBlockAlgorithm.EDGES_PRIME_PRODUCT: "edges prime product",
    BasicBlockAlgorithm.HASH_MATCHING_FOUR_INST_MIN: "hash matching (4 instructions minimum)",
    BasicBlockAlgorithm.PRIME_MATCHING_FOUR_INST_MIN: "prime matching (4 instructions minimum)",
    BasicBlockAlgorithm.CALL_REFERENCE_MATCHING: "call reference matching",
    BasicBlockAlgorithm.STRING_REFERENCES_MATCHING: "string reference matching",
    BasicBlockAlgorithm.EDGES_MD_INDEX_TOP_DOWN: "edges MD index (top down)",
    BasicBlockAlgorithm.MD_INDEX_MATCHING_TOP_DOWN: "MD index matching (top down)",
    BasicBlockAlgorithm.EDGES_MD_INDEX_BOTTOM_UP: "edges MD index (bottom up)",
    BasicBlockAlgorithm.MD_INDEX_MATCHING_BOTTOM_UP: "MD index matching (bottom up)",
    BasicBlockAlgorithm.RELAXED_MD_INDEX_MATCHING: "relaxed MD index matching",
    BasicBlockAlgorithm.PRIME_MATCHING_NO_INST_MIN: "prime matching (0 instructions minimum)",
    BasicBlockAlgorithm.EDGES_LENGAUER_TARJAN_DOMINATED: "edges Lengauer Tarjan dominated",
    BasicBlockAlgorithm.LOOP_ENTRY_MATCHING: "loop entry matching",
    BasicBlockAlgorithm.SELF_LOOP_MATCHING: "self loop matching",
    BasicBlockAlgorithm.ENTRY_POINT_MATCHING: "entry point matching",
    BasicBlockAlgorithm.EXIT_POINT_MATCHING: "exit point matching",
    BasicBlockAlgorithm.INSTRUCTION_COUNT_MATCHING: "instruction count matching",
    BasicBlockAlgorithm.JUMP_SEQUENCE_MATCHING: "jump sequence matching",
    BasicBlockAlgorithm.PROPAGATION_SIZE_ONE: "propagation (size==1)",
    BasicBlockAlgorithm.MANUAL: "manual",
}
