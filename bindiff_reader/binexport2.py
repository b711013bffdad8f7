"""BinExport2 message schema.

The message layout follows ``binexport2.proto`` from the BinExport project.
Instead of shipping generated code, the descriptor is assembled here and
registered in a private descriptor pool, so it never clashes with another
copy of the schema loaded into the default pool.
"""

from collections.abc import Iterable
from typing import Any, Optional

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto


def _field(
    name: str,
    number: int,
    type_: int,
    *,
    repeated: bool = False,
    type_name: Optional[str] = None,
    default: Optional[str] = None,
    packed: bool = False,
) -> descriptor_pb2.FieldDescriptorProto:
    field = _F(
        name=name,
        number=number,
        type=type_,  # type: ignore[arg-type]
        label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = type_name
    if default is not None:
        field.default_value = default
    if packed:
        field.options.packed = True
    return field


def _enum(name: str, values: Iterable[tuple[str, int]]) -> descriptor_pb2.EnumDescriptorProto:
    return descriptor_pb2.EnumDescriptorProto(
        name=name,
        value=[descriptor_pb2.EnumValueDescriptorProto(name=n, number=v) for n, v in values],
    )


def _message(
    name: str,
    fields: Iterable[descriptor_pb2.FieldDescriptorProto],
    *,
    nested: Iterable[descriptor_pb2.DescriptorProto] = (),
    enums: Iterable[descriptor_pb2.EnumDescriptorProto] = (),
) -> descriptor_pb2.DescriptorProto:
    return descriptor_pb2.DescriptorProto(
        name=name, field=list(fields), nested_type=list(nested), enum_type=list(enums)
    )


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    meta = _message(
        "Meta",
        [
            _field("executable_name", 1, _F.TYPE_STRING),
            _field("executable_id", 2, _F.TYPE_STRING),
            _field("architecture_name", 3, _F.TYPE_STRING),
            _field("timestamp", 4, _F.TYPE_INT64),
        ],
    )
    callgraph = _message(
        "CallGraph",
        [
            _field("vertex", 1, _F.TYPE_MESSAGE, repeated=True, type_name=".BinExport2.CallGraph.Vertex"),
            _field("edge", 2, _F.TYPE_MESSAGE, repeated=True, type_name=".BinExport2.CallGraph.Edge"),
        ],
        nested=[
            _message(
                "Vertex",
                [
                    _field("address", 1, _F.TYPE_UINT64),
                    _field(
                        "type",
                        2,
                        _F.TYPE_ENUM,
                        type_name=".BinExport2.CallGraph.Vertex.Type",
                        default="NORMAL",
                    ),
                    _field("mangled_name", 3, _F.TYPE_STRING),
                    _field("demangled_name", 4, _F.TYPE_STRING),
                    _field("library_index", 5, _F.TYPE_INT32),
                    _field("module_index", 6, _F.TYPE_INT32),
                ],
                enums=[_enum("Type", [("NORMAL", 0), ("LIBRARY", 1), ("IMPORTED", 2), ("THUNK", 3), ("INVALID", 4)])],
            ),
            _message(
                "Edge",
                [
                    _field("source_vertex_index", 1, _F.TYPE_INT32),
                    _field("target_vertex_index", 2, _F.TYPE_INT32),
                ],
            ),
        ],
    )
    expression = _message(
        "Expression",
        [
            _field("type", 1, _F.TYPE_ENUM, type_name=".BinExport2.Expression.Type", default="IMMEDIATE_INT"),
            _field("symbol", 2, _F.TYPE_STRING),
            _field("immediate", 3, _F.TYPE_UINT64),
            _field("parent_index", 4, _F.TYPE_INT32),
            _field("is_relocation", 5, _F.TYPE_BOOL),
        ],
        enums=[
            _enum(
                "Type",
                [
                    ("SYMBOL", 1),
                    ("IMMEDIATE_INT", 2),
                    ("IMMEDIATE_FLOAT", 3),
                    ("OPERATOR", 4),
                    ("REGISTER", 5),
                    ("SIZE_PREFIX", 6),
                    ("DEREFERENCE", 7),
                ],
            )
        ],
    )
    operand = _message("Operand", [_field("expression_index", 1, _F.TYPE_INT32, repeated=True, packed=True)])
    mnemonic = _message("Mnemonic", [_field("name", 1, _F.TYPE_STRING)])
    instruction = _message(
        "Instruction",
        [
            _field("address", 1, _F.TYPE_UINT64),
            _field("call_target", 2, _F.TYPE_UINT64, repeated=True, packed=True),
            _field("mnemonic_index", 3, _F.TYPE_INT32, default="0"),
            _field("operand_index", 4, _F.TYPE_INT32, repeated=True, packed=True),
            _field("raw_bytes", 5, _F.TYPE_BYTES),
            _field("comment_index", 6, _F.TYPE_INT32, repeated=True, packed=True),
        ],
    )
    basicblock = _message(
        "BasicBlock",
        [
            _field(
                "instruction_index",
                1,
                _F.TYPE_MESSAGE,
                repeated=True,
                type_name=".BinExport2.BasicBlock.IndexRange",
            )
        ],
        nested=[
            _message(
                "IndexRange",
                [_field("begin_index", 1, _F.TYPE_INT32), _field("end_index", 2, _F.TYPE_INT32)],
            )
        ],
    )
    flowgraph = _message(
        "FlowGraph",
        [
            _field("basic_block_index", 1, _F.TYPE_INT32, repeated=True, packed=True),
            _field("edge", 2, _F.TYPE_MESSAGE, repeated=True, type_name=".BinExport2.FlowGraph.Edge"),
            _field("entry_basic_block_index", 3, _F.TYPE_INT32),
        ],
        nested=[
            _message(
                "Edge",
                [
                    _field("source_basic_block_index", 1, _F.TYPE_INT32),
                    _field("target_basic_block_index", 2, _F.TYPE_INT32),
                    _field(
                        "type",
                        3,
                        _F.TYPE_ENUM,
                        type_name=".BinExport2.FlowGraph.Edge.Type",
                        default="UNCONDITIONAL",
                    ),
                    _field("is_back_edge", 4, _F.TYPE_BOOL, default="false"),
                ],
                enums=[
                    _enum(
                        "Type",
                        [("CONDITION_TRUE", 1), ("CONDITION_FALSE", 2), ("UNCONDITIONAL", 3), ("SWITCH", 4)],
                    )
                ],
            )
        ],
    )
    reference = _message(
        "Reference",
        [
            _field("instruction_index", 1, _F.TYPE_INT32),
            _field("instruction_operand_index", 2, _F.TYPE_INT32, default="0"),
            _field("operand_expression_index", 3, _F.TYPE_INT32, default="0"),
            _field("string_table_index", 4, _F.TYPE_INT32),
        ],
    )
    datareference = _message(
        "DataReference",
        [_field("instruction_index", 1, _F.TYPE_INT32), _field("address", 2, _F.TYPE_UINT64)],
    )
    comment = _message(
        "Comment",
        [
            _field("instruction_index", 1, _F.TYPE_INT32),
            _field("instruction_operand_index", 2, _F.TYPE_INT32, default="0"),
            _field("operand_expression_index", 3, _F.TYPE_INT32, default="0"),
            _field("string_table_index", 4, _F.TYPE_INT32),
            _field("repeatable", 5, _F.TYPE_BOOL),
            _field("type", 6, _F.TYPE_ENUM, type_name=".BinExport2.Comment.Type", default="DEFAULT"),
        ],
        enums=[
            _enum(
                "Type",
                [
                    ("DEFAULT", 0),
                    ("ANTERIOR", 1),
                    ("POSTERIOR", 2),
                    ("FUNCTION", 3),
                    ("ENUM", 4),
                    ("LOCATION", 5),
                    ("GLOBAL_REFERENCE", 6),
                    ("LOCAL_REFERENCE", 7),
                ],
            )
        ],
    )
    section = _message(
        "Section",
        [
            _field("address", 1, _F.TYPE_UINT64),
            _field("size", 2, _F.TYPE_UINT64),
            _field("flag_r", 3, _F.TYPE_BOOL),
            _field("flag_w", 4, _F.TYPE_BOOL),
            _field("flag_x", 5, _F.TYPE_BOOL),
        ],
    )
    library = _message(
        "Library",
        [
            _field("is_static", 1, _F.TYPE_BOOL),
            _field("load_address", 2, _F.TYPE_UINT64, default="0"),
            _field("name", 3, _F.TYPE_STRING),
        ],
    )
    module = _message("Module", [_field("name", 1, _F.TYPE_STRING)])

    def _ref(name: str) -> str:
        return f".BinExport2.{name}"

    binexport2 = _message(
        "BinExport2",
        [
            _field("meta_information", 1, _F.TYPE_MESSAGE, type_name=_ref("Meta")),
            _field("expression", 2, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Expression")),
            _field("operand", 3, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Operand")),
            _field("mnemonic", 4, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Mnemonic")),
            _field("instruction", 5, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Instruction")),
            _field("basic_block", 6, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("BasicBlock")),
            _field("flow_graph", 7, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("FlowGraph")),
            _field("call_graph", 8, _F.TYPE_MESSAGE, type_name=_ref("CallGraph")),
            _field("string_table", 9, _F.TYPE_STRING, repeated=True),
            _field("address_comment", 10, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Reference")),
            _field("string_reference", 11, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Reference")),
            _field("expression_substitution", 12, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Reference")),
            _field("section", 13, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Section")),
            _field("library", 14, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Library")),
            _field("data_reference", 15, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("DataReference")),
            _field("module", 16, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Module")),
            _field("comment", 17, _F.TYPE_MESSAGE, repeated=True, type_name=_ref("Comment")),
        ],
        nested=[
            meta,
            callgraph,
            expression,
            operand,
            mnemonic,
            instruction,
            basicblock,
            flowgraph,
            reference,
            datareference,
            comment,
            section,
            library,
            module,
        ],
    )
    return descriptor_pb2.FileDescriptorProto(name="binexport2.proto", syntax="proto2", message_type=[binexport2])


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())

BinExport2: Any = message_factory.GetMessageClass(_pool.FindMessageTypeByName("BinExport2"))
