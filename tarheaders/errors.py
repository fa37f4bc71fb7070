class TarHeadersError(Exception):
    """Base class for tarheaders errors."""


# Decoding
class UnknownEntryTypeError(TarHeadersError):
    """Raised when a header carries a type code outside the entry type registry."""

    def __init__(self, type_code):
        self.type_code = type_code
        super().__init__(f"invalid type flag: {type_code!r}")


class UnderlyingDecodeError(TarHeadersError):
    pass


# Output
class SerializationError(TarHeadersError):
    pass


class WriteError(TarHeadersError):
    pass


class CancellationError(TarHeadersError):
    pass
