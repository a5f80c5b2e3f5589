"""Error kinds raised by the codec and the store."""


class FDDIError(Exception):
    """Base class for all record errors."""


class CodecError(FDDIError):
    """Conversion between records and JSON text failed."""


class EncodeError(CodecError):
    """A record could not be rendered as JSON."""


class DecodeError(CodecError):
    """JSON text could not be turned into a record."""


class SchemaError(FDDIError):
    """A table registration conflicts with the existing layout."""

    def __init__(self, message: str, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


class StorageError(FDDIError):
    """The backing database rejected or failed an operation."""

    def __init__(self, message: str, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table
