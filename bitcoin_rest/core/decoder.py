"""Response decoding for the node's ``.bin``, ``.hex`` and ``.json`` payloads."""

import json
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, List, Optional, Union

import structlog
from bitcoin.core import CBlock, CBlockHeader, CTransaction
from bitcoin.core.serialize import (
    DeserializationExtraDataError,
    SerializationError,
    SerializationTruncationError,
)

from bitcoin_rest.core.errors import FieldConversionError, MalformedEncoding, TruncatedStream
from bitcoin_rest.core import json_decoder
from bitcoin_rest.models.blockchain import BLOCK_HEADER_SIZE, HASH_SIZE
from bitcoin_rest.utils.bitcoin import hex_to_hash, parse_hex

logger = structlog.get_logger(__name__)

Payload = Union[bytes, str]

_BYTES_TYPES = (bytes, bytearray, memoryview)


class RestFormat(str, Enum):
    """Response encodings, selected by the URL suffix."""
    JSON = "json"
    BINARY = "bin"
    HEX = "hex"

    @property
    def suffix(self) -> str:
        return "." + self.value


class Resource(str, Enum):
    """REST resources with a dedicated decoder."""
    TX = "tx"
    BLOCK = "block"
    BLOCK_NOTXDETAILS = "block/notxdetails"
    HEADERS = "headers"
    BLOCK_HASH = "blockhashbyheight"
    CHAIN_INFO = "chaininfo"
    UTXOS = "getutxos"


def _consensus_decode(cls, data: bytes, record: Optional[int] = None):
    """Decode exactly one object from ``data``; leftover bytes are an error."""
    if not isinstance(data, _BYTES_TYPES):
        raise MalformedEncoding(f"expected bytes, got {type(data).__name__}", record)
    try:
        return cls.deserialize(bytes(data))
    except DeserializationExtraDataError as e:
        raise MalformedEncoding(f"{cls.__name__}: {len(e.padding)} trailing bytes", record) from e
    except SerializationTruncationError as e:
        raise MalformedEncoding(f"{cls.__name__}: truncated ({e})", record) from e
    except SerializationError as e:
        raise MalformedEncoding(f"{cls.__name__}: {e}", record) from e


def decode_transaction(data: bytes) -> CTransaction:
    return _consensus_decode(CTransaction, data)


def decode_block(data: bytes) -> CBlock:
    return _consensus_decode(CBlock, data)


def decode_block_header(data: bytes) -> CBlockHeader:
    if isinstance(data, _BYTES_TYPES) and len(data) != BLOCK_HEADER_SIZE:
        raise MalformedEncoding(f"block header must be {BLOCK_HEADER_SIZE} bytes, got {len(data)}")
    return _consensus_decode(CBlockHeader, data)


def decode_block_hash(data: bytes) -> bytes:
    """Block hash as sent by the node, wire byte order, no reversal."""
    if not isinstance(data, _BYTES_TYPES):
        raise MalformedEncoding(f"expected bytes, got {type(data).__name__}")
    if len(data) != HASH_SIZE:
        raise MalformedEncoding(f"block hash must be {HASH_SIZE} bytes, got {len(data)}")
    return bytes(data)


def decode_header_stream(data: bytes, count: int) -> List[CBlockHeader]:
    """
    Split ``count`` concatenated 80-byte header records and decode each.

    Records are returned in the order received. A payload whose length is
    not exactly ``count * 80`` is rejected before anything is decoded, and
    the first bad record aborts the whole call.
    """
    expected = count * BLOCK_HEADER_SIZE
    if count < 0 or len(data) != expected:
        raise TruncatedStream(expected=expected, actual=len(data))

    headers = []
    for index in range(count):
        offset = index * BLOCK_HEADER_SIZE
        window = data[offset:offset + BLOCK_HEADER_SIZE]
        headers.append(_consensus_decode(CBlockHeader, window, record=index))

    logger.debug("Decoded header stream", count=count)
    return headers


def strip_hex_payload(text: str) -> str:
    """Remove the single line terminator that ends every ``.hex`` response."""
    if not isinstance(text, str):
        raise MalformedEncoding(f"expected text, got {type(text).__name__}")
    if not text.endswith("\n"):
        raise MalformedEncoding("hex payload is missing its trailing newline")
    if text.endswith("\n\n"):
        raise MalformedEncoding("hex payload ends with more than one newline")
    return text[:-1]


def decode_hex_payload(text: str) -> bytes:
    return parse_hex(strip_hex_payload(text), field="(payload)")


def parse_json_payload(text: Payload) -> Any:
    """Parse JSON text, keeping every non-integer number as a Decimal."""
    try:
        return json.loads(text, parse_float=Decimal)
    except ValueError as e:
        raise FieldConversionError("(payload)", f"invalid JSON: {e}") from e


def _from_hex(decode: Callable[[bytes], Any]) -> Callable[[str], Any]:
    return lambda text: decode(decode_hex_payload(text))


def _from_json(shape: Callable[[Any], Any]) -> Callable[[Payload], Any]:
    return lambda text: shape(parse_json_payload(text))


def _block_hash_from_json(obj: Any) -> bytes:
    if not isinstance(obj, dict) or "blockhash" not in obj:
        raise FieldConversionError("blockhash", "missing")
    return hex_to_hash(obj["blockhash"], field="blockhash")


_DECODERS = {
    (Resource.TX, RestFormat.BINARY): decode_transaction,
    (Resource.TX, RestFormat.HEX): _from_hex(decode_transaction),
    (Resource.TX, RestFormat.JSON): _from_json(json_decoder.transaction_from_json),
    (Resource.BLOCK, RestFormat.BINARY): decode_block,
    (Resource.BLOCK, RestFormat.HEX): _from_hex(decode_block),
    (Resource.BLOCK, RestFormat.JSON): _from_json(json_decoder.block_from_json),
    # notxdetails only trims the JSON form; bin and hex still carry the whole block.
    (Resource.BLOCK_NOTXDETAILS, RestFormat.BINARY): lambda data: decode_block(data).get_header(),
    (Resource.BLOCK_NOTXDETAILS, RestFormat.HEX): _from_hex(lambda data: decode_block(data).get_header()),
    (Resource.BLOCK_NOTXDETAILS, RestFormat.JSON): _from_json(json_decoder.block_header_from_json),
    (Resource.HEADERS, RestFormat.JSON): _from_json(json_decoder.headers_from_json),
    (Resource.BLOCK_HASH, RestFormat.BINARY): decode_block_hash,
    (Resource.BLOCK_HASH, RestFormat.HEX): lambda text: hex_to_hash(strip_hex_payload(text), field="(payload)"),
    (Resource.BLOCK_HASH, RestFormat.JSON): _from_json(_block_hash_from_json),
    (Resource.CHAIN_INFO, RestFormat.JSON): _from_json(json_decoder.chain_info_from_json),
    (Resource.UTXOS, RestFormat.JSON): _from_json(json_decoder.utxos_from_json),
}


def decode_payload(resource: Resource, fmt: RestFormat, payload: Payload,
                   count: Optional[int] = None) -> Any:
    """
    Hand a raw payload to the decoder for ``resource`` in encoding ``fmt``.

    Args:
        resource: Which endpoint produced the payload
        fmt: Encoding the payload was requested in
        payload: ``bytes`` for BINARY, ``str`` for HEX and JSON
        count: Number of header records, required for binary/hex HEADERS
    """
    resource = Resource(resource)
    fmt = RestFormat(fmt)

    if resource is Resource.HEADERS and fmt is not RestFormat.JSON:
        if count is None:
            raise ValueError("count is required to decode a binary header stream")
        data = payload if fmt is RestFormat.BINARY else decode_hex_payload(payload)
        return decode_header_stream(data, count)

    try:
        decode = _DECODERS[(resource, fmt)]
    except KeyError:
        raise ValueError(f"{resource.value} is not available as {fmt.suffix}") from None
    return decode(payload)
