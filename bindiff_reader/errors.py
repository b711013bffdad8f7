class BinDiffReaderError(Exception):
    def __init__(self, msg: str) -> None:
        Exception.__init__(self, msg)
        self.msg = msg


class PathNotFoundError(BinDiffReaderError):
    def __init__(self, path: str) -> None:
        BinDiffReaderError.__init__(self, f"file `{path}` not found")
        self.path = path


class DecodeError(BinDiffReaderError):
    pass


class SchemaMismatchError(DecodeError):
    def __init__(self, table: str, msg: str) -> None:
        DecodeError.__init__(self, f"table `{table}`: {msg}")
        self.table = table


class CardinalityError(BinDiffReaderError):
    def __init__(self, table: str, count: int) -> None:
        if count == 0:
            reason = "no such row"
        else:
            reason = "expected exactly one row, got more"
        BinDiffReaderError.__init__(self, f"table `{table}`: {reason}")
        self.table = table
        self.count = count


class ResourceAlreadyClosedError(BinDiffReaderError):
    def __init__(self) -> None:
        BinDiffReaderError.__init__(self, "connection already closed")
