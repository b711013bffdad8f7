import dataclasses
import functools
import logging
import os
from typing import Any, Optional

import networkx as nx  # type: ignore[import]
from google.protobuf.message import DecodeError as ProtobufDecodeError

from .binexport2 import BinExport2
from .errors import DecodeError, PathNotFoundError

logger = logging.getLogger(__name__)

UNKNOWN_EXECUTABLE_NAME = "unknown executable"

_vertex_descriptor = BinExport2.DESCRIPTOR.nested_types_by_name["CallGraph"].nested_types_by_name["Vertex"]
_vertex_type = _vertex_descriptor.enum_types_by_name["Type"]


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Section:
    address: int
    size: int
    flag_r: bool
    flag_w: bool
    flag_x: bool


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Library:
    name: Optional[str]
    is_static: bool
    load_address: int


def _text(message: Any, field: str) -> Optional[str]:
    if not message.HasField(field):
        return None
    try:
        value = getattr(message, field)
    except UnicodeDecodeError as e:
        raise DecodeError(f"{message.DESCRIPTOR.name}.{field} is not valid UTF-8") from e
    # some runtimes hand back bytes for a proto2 string that is not valid UTF-8
    if not isinstance(value, str):
        raise DecodeError(f"{message.DESCRIPTOR.name}.{field} is not valid UTF-8")
    return value


class BinExport:
    """A decoded BinExport2 file.

    Only the meta information is read eagerly; derived views such as the
    call graph are built on first access.
    """

    def __init__(self, message: Any) -> None:
        self.message = message

    @classmethod
    def decode(cls, data: bytes) -> "BinExport":
        message = BinExport2()
        try:
            message.ParseFromString(data)
        except (ProtobufDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"failed to decode BinExport2 message: {e}") from e
        return cls(message)

    @classmethod
    def open(cls, path: "str | os.PathLike[str]") -> "BinExport":
        filename = os.fspath(path)
        if not os.path.isfile(filename):
            raise PathNotFoundError(filename)
        try:
            with open(filename, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DecodeError(f"failed to read `{filename}`: {e.strerror}") from e
        logger.debug("read %d bytes from %s", len(data), filename)
        return cls.decode(data)

    def _meta(self) -> Any:
        if not self.message.HasField("meta_information"):
            raise DecodeError("no meta information available")
        return self.message.meta_information

    def executable_name(self) -> str:
        name = _text(self._meta(), "executable_name")
        return UNKNOWN_EXECUTABLE_NAME if name is None else name

    def executable_id(self) -> Optional[str]:
        return _text(self._meta(), "executable_id")

    def architecture_name(self) -> Optional[str]:
        return _text(self._meta(), "architecture_name")

    # --------------------------------------

    @functools.cached_property
    def sections(self) -> list[Section]:
        return [
            Section(address=s.address, size=s.size, flag_r=s.flag_r, flag_w=s.flag_w, flag_x=s.flag_x)
            for s in self.message.section
        ]

    @functools.cached_property
    def libraries(self) -> list[Library]:
        return [
            Library(name=_text(lib, "name"), is_static=lib.is_static, load_address=lib.load_address)
            for lib in self.message.library
        ]

    @functools.cached_property
    def call_graph(self) -> nx.DiGraph:
        g = nx.DiGraph()
        if not self.message.HasField("call_graph"):
            return g
        callgraph = self.message.call_graph
        for vertex in callgraph.vertex:
            name = _text(vertex, "demangled_name")
            if name is None:
                name = _text(vertex, "mangled_name")
            g.add_node(vertex.address, name=name, type=_vertex_type.values_by_number[vertex.type].name)
        vertex_count = len(callgraph.vertex)
        for edge in callgraph.edge:
            source = edge.source_vertex_index
            target = edge.target_vertex_index
            if not (0 <= source < vertex_count and 0 <= target < vertex_count):
                raise DecodeError(f"call graph edge {source} -> {target} refers to a missing vertex")
            g.add_edge(callgraph.vertex[source].address, callgraph.vertex[target].address)
        logger.debug("built call graph with %d vertices and %d edges", g.number_of_nodes(), g.number_of_edges())
        return g
