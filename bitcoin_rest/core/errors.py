"""Error types raised by the REST client and the response decoders."""

from typing import Optional


class BitcoinRESTError(Exception):
    """Base class for every error raised by bitcoin_rest."""
    pass


class TransportError(BitcoinRESTError):
    """The HTTP request failed or the node answered with an error status."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class DecodeError(BitcoinRESTError):
    """A payload was received but could not be turned into a domain object."""

    stage = "decode"


class MalformedEncoding(DecodeError):
    """Binary payload does not match the consensus layout."""

    stage = "binary"

    def __init__(self, message: str, record: Optional[int] = None):
        self.record = record
        if record is not None:
            message = f"record {record}: {message}"
        super().__init__(message)


class TruncatedStream(DecodeError):
    """Multi-record payload is not an exact multiple of the record size."""

    stage = "binary"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"expected {expected} bytes of header records, got {actual}"
        )


class InvalidHexEncoding(DecodeError):
    """Odd-length string or non-hex characters."""

    stage = "hex"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)


class FieldConversionError(DecodeError):
    """A JSON field could not be mapped to its typed representation."""

    stage = "json"

    def __init__(self, field: str, message: str):
        self.field = field
        self.reason = message
        super().__init__(f"{field}: {message}")
