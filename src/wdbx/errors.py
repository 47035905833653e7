"""
Exception hierarchy for the WDBX codec.

Every fatal condition raised by a read or write derives from WDBXError.
Unresolved string offsets are not exceptions; see
models.StringResolutionWarning.
"""


class WDBXError(Exception):
    """Base class for all codec errors."""
    pass


class UnknownFormat(WDBXError):
    """Raised when the signature is blank or not a supported variant."""

    def __init__(self, signature=b""):
        self.signature = signature
        super().__init__(f"Unknown file type (signature: {signature!r})")


class InvalidFile(WDBXError):
    """Raised when the header or data cannot describe a usable table."""
    pass


class EmptyFile(InvalidFile):
    """Raised when the header reports zero records or a zero record size."""

    def __init__(self, record_count=0, record_size=0):
        self.record_count = record_count
        self.record_size = record_size
        super().__init__(
            f"File contains no records (count={record_count}, size={record_size})"
        )


class TruncatedDataError(InvalidFile):
    """Raised when a read runs past the end of the buffer."""

    def __init__(self, offset=0, length=0, limit=0):
        self.offset = offset
        self.length = length
        self.limit = limit
        super().__init__(
            f"Read of {length} bytes at offset {offset} exceeds buffer size {limit}"
        )


class MissingSchema(WDBXError):
    """Raised when no column definition exists for a table."""

    def __init__(self, name=""):
        self.name = name
        super().__init__(f"Definition missing for '{name}'")


class SchemaOverflow(WDBXError):
    """Raised when a decoded row consumes more bytes than its record."""

    def __init__(self, row_index=0, consumed=0, expected=0):
        self.row_index = row_index
        self.consumed = consumed
        self.expected = expected
        super().__init__(
            f"Definition exceeds record size (row {row_index}: "
            f"read {consumed} bytes, record is {expected})"
        )


class UnsupportedColumnType(WDBXError):
    """Raised when the encoder meets a column type it cannot serialise."""
    pass


class DefinitionError(WDBXError):
    """Raised when a definitions file cannot be parsed."""
    pass
