import dataclasses
import datetime
import logging
import os
import sqlite3
from collections.abc import Callable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Any, Optional

from .algorithms import BasicBlockAlgorithm, FunctionAlgorithm
from .errors import CardinalityError, DecodeError, PathNotFoundError, ResourceAlreadyClosedError, SchemaMismatchError
from .models import BasicBlockMatch, ComparisonMetadata, FileRecord, FunctionMatch, InstructionMatch

logger = logging.getLogger(__name__)


def _as_int(value: Any) -> int:
    if type(value) is not int:
        raise TypeError(f"expected integer, got {type(value).__name__}")
    return value


def _as_count(value: Any) -> int:
    count = _as_int(value)
    if count < 0:
        raise ValueError(f"negative counter {count}")
    return count


def _as_str(value: Any) -> str:
    if type(value) is not str:
        raise TypeError(f"expected text, got {type(value).__name__}")
    return value


def _as_float(value: Any) -> float:
    if type(value) not in (int, float):
        raise TypeError(f"expected real, got {type(value).__name__}")
    return float(value)


def _as_bool(value: Any) -> bool:
    return _as_int(value) != 0


def _as_timestamp(value: Any) -> datetime.datetime:
    if type(value) in (int, float):
        return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    text = _as_str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    t = datetime.datetime.fromisoformat(text)
    if t.tzinfo is None:  # BinDiff writes naive UTC timestamps
        t = t.replace(tzinfo=datetime.timezone.utc)
    return t.astimezone(datetime.timezone.utc)


def _as_function_algorithm(value: Any) -> Any:
    return FunctionAlgorithm.from_code(_as_int(value))


def _as_basicblock_algorithm(value: Any) -> Any:
    return BasicBlockAlgorithm.from_code(_as_int(value))


@dataclasses.dataclass(frozen=True, slots=True)
class _Column:
    name: str
    field: str
    convert: Callable[[Any], Any]


@dataclasses.dataclass(frozen=True, slots=True)
class _Table:
    name: str
    record_type: type
    columns: tuple[_Column, ...]

    def select_sql(self) -> str:
        return f'SELECT {", ".join(c.name for c in self.columns)} FROM "{self.name}"'

    def count_sql(self) -> str:
        return f'SELECT COUNT(*) FROM "{self.name}"'

    def decode_row(self, row: Sequence[Any], rowindex: int) -> Any:
        if len(row) != len(self.columns):
            raise SchemaMismatchError(self.name, f"expected {len(self.columns)} columns, got {len(row)}")
        fields = {}
        for column, value in zip(self.columns, row):
            if value is None:
                raise DecodeError(f"table `{self.name}`, row {rowindex}, column `{column.name}`: NULL value")
            try:
                fields[column.field] = column.convert(value)
            except (TypeError, ValueError, OverflowError, OSError) as e:
                raise DecodeError(f"table `{self.name}`, row {rowindex}, column `{column.name}`: {e}") from e
        return self.record_type(**fields)


# column order is fixed by the BinDiff schema
FILE_TABLE = _Table(
    "file",
    FileRecord,
    (
        _Column("id", "id", _as_int),
        _Column("filename", "filename", _as_str),
        _Column("exefilename", "exe_filename", _as_str),
        _Column("hash", "hash", _as_str),
        _Column("functions", "functions", _as_count),
        _Column("libfunctions", "lib_functions", _as_count),
        _Column("calls", "calls", _as_count),
        _Column("basicblocks", "basic_blocks", _as_count),
        _Column("libbasicblocks", "lib_basic_blocks", _as_count),
        _Column("edges", "edges", _as_count),
        _Column("libedges", "lib_edges", _as_count),
        _Column("instructions", "instructions", _as_count),
        _Column("libinstructions", "lib_instructions", _as_count),
    ),
)

METADATA_TABLE = _Table(
    "metadata",
    ComparisonMetadata,
    (
        _Column("version", "version", _as_str),
        _Column("file1", "file1", _as_int),
        _Column("file2", "file2", _as_int),
        _Column("description", "description", _as_str),
        _Column("created", "created", _as_timestamp),
        _Column("modified", "modified", _as_timestamp),
        _Column("similarity", "similarity", _as_float),
        _Column("confidence", "confidence", _as_float),
    ),
)

FUNCTION_TABLE = _Table(
    "function",
    FunctionMatch,
    (
        _Column("id", "id", _as_int),
        _Column("address1", "address1", _as_int),
        _Column("name1", "name1", _as_str),
        _Column("address2", "address2", _as_int),
        _Column("name2", "name2", _as_str),
        _Column("similarity", "similarity", _as_float),
        _Column("confidence", "confidence", _as_float),
        _Column("flags", "flags", _as_int),
        _Column("algorithm", "algorithm", _as_function_algorithm),
        _Column("evaluate", "evaluate", _as_bool),
        _Column("commentsported", "comment_supported", _as_bool),
        _Column("basicblocks", "basic_blocks", _as_count),
        _Column("edges", "edges", _as_count),
        _Column("instructions", "instructions", _as_count),
    ),
)

BASICBLOCK_TABLE = _Table(
    "basicblock",
    BasicBlockMatch,
    (
        _Column("id", "id", _as_int),
        _Column("functionid", "function_id", _as_int),
        _Column("address1", "address1", _as_int),
        _Column("address2", "address2", _as_int),
        _Column("algorithm", "algorithm", _as_basicblock_algorithm),
        _Column("evaluate", "evaluate", _as_bool),
    ),
)

INSTRUCTION_TABLE = _Table(
    "instruction",
    InstructionMatch,
    (
        _Column("basicblockid", "id", _as_int),
        _Column("address1", "address1", _as_int),
        _Column("address2", "address2", _as_int),
    ),
)

REQUIRED_TABLES = (FILE_TABLE, METADATA_TABLE, FUNCTION_TABLE, BASICBLOCK_TABLE, INSTRUCTION_TABLE)


def check_schema(connection: sqlite3.Connection) -> None:
    try:
        names = {
            row[0].lower() for row in connection.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        for table in REQUIRED_TABLES:
            if table.name not in names:
                raise SchemaMismatchError(table.name, "table missing")
            columns = [row[1].lower() for row in connection.execute(f'PRAGMA table_info("{table.name}")')]
            expected = [c.name for c in table.columns]
            # extra trailing columns are tolerated, the positional prefix is not
            if columns[: len(expected)] != expected:
                raise SchemaMismatchError(table.name, f"expected columns {expected}, got {columns}")
    except sqlite3.Error as e:
        raise DecodeError(f"not a BinDiff result store: {e}") from e


class BinDiff:
    """Read-only view over a BinDiff result store (an SQLite file).

    Every accessor materializes its result fully; records do not keep a
    reference to the connection, so they stay valid after :meth:`close`.
    """

    __slots__ = ["_connection", "_filename"]

    def __init__(self, connection: sqlite3.Connection, filename: str) -> None:
        self._connection: Optional[sqlite3.Connection] = connection
        self._filename = filename

    @classmethod
    def open(cls, path: "str | os.PathLike[str]") -> "BinDiff":
        filename = os.fspath(path)
        if not os.path.isfile(filename):
            raise PathNotFoundError(filename)
        uri = Path(filename).resolve().as_uri() + "?mode=ro"
        try:
            connection = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as e:
            raise DecodeError(f"failed to open `{filename}`: {e}") from e
        try:
            check_schema(connection)
        except DecodeError:
            connection.close()
            raise
        logger.debug("opened result store %s", filename)
        return cls(connection, filename)

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def closed(self) -> bool:
        return self._connection is None

    def close(self) -> None:
        if self._connection is None:
            raise ResourceAlreadyClosedError()
        connection, self._connection = self._connection, None
        try:
            connection.close()
        except sqlite3.Error as e:
            raise DecodeError(f"failed to close `{self._filename}`: {e}") from e
        logger.debug("closed result store %s", self._filename)

    def __enter__(self) -> "BinDiff":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        if self._connection is not None:
            self.close()

    # --------------------------------------

    def _execute(self, table: _Table, sql: str, parameters: Sequence[Any] = ()) -> sqlite3.Cursor:
        if self._connection is None:
            raise ResourceAlreadyClosedError()
        try:
            return self._connection.execute(sql, parameters)
        except sqlite3.Error as e:
            raise DecodeError(f"table `{table.name}`: {e}") from e

    def _query_one(self, table: _Table, where: str = "", parameters: Sequence[Any] = ()) -> Any:
        sql = table.select_sql() + (f" WHERE {where}" if where else "")
        cursor = self._execute(table, sql, parameters)
        try:
            rows = cursor.fetchmany(2)
        except sqlite3.Error as e:
            raise DecodeError(f"table `{table.name}`: {e}") from e
        if len(rows) != 1:
            raise CardinalityError(table.name, len(rows))
        return table.decode_row(rows[0], 0)

    def _query_all(self, table: _Table) -> list[Any]:
        cursor = self._execute(table, table.select_sql())
        try:
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise DecodeError(f"table `{table.name}`: {e}") from e
        records = [table.decode_row(row, i) for i, row in enumerate(rows)]
        logger.debug("read %d rows from table %s", len(records), table.name)
        return records

    def _count(self, table: _Table) -> int:
        cursor = self._execute(table, table.count_sql())
        try:
            (count,) = cursor.fetchone()
        except sqlite3.Error as e:
            raise DecodeError(f"table `{table.name}`: {e}") from e
        return int(count)

    # --------------------------------------

    def read_file_record(self, file_id: Optional[int] = None) -> FileRecord:
        if file_id is None:
            record: FileRecord = self._query_one(FILE_TABLE)
        else:
            record = self._query_one(FILE_TABLE, "id = ?", (file_id,))
        return record

    def read_file_records(self) -> list[FileRecord]:
        return self._query_all(FILE_TABLE)

    def read_comparison_metadata(self) -> ComparisonMetadata:
        metadata: ComparisonMetadata = self._query_one(METADATA_TABLE)
        return metadata

    def count_function_matches(self) -> int:
        return self._count(FUNCTION_TABLE)

    def read_function_matches(self) -> list[FunctionMatch]:
        return self._query_all(FUNCTION_TABLE)

    def count_basic_block_matches(self) -> int:
        return self._count(BASICBLOCK_TABLE)

    def read_basic_block_matches(self) -> list[BasicBlockMatch]:
        return self._query_all(BASICBLOCK_TABLE)

    def count_instruction_matches(self) -> int:
        return self._count(INSTRUCTION_TABLE)

    def read_instruction_matches(self) -> list[InstructionMatch]:
        return self._query_all(INSTRUCTION_TABLE)
