"""Transport, decoding and error handling."""

from bitcoin_rest.core.errors import (
    BitcoinRESTError,
    TransportError,
    DecodeError,
    MalformedEncoding,
    TruncatedStream,
    InvalidHexEncoding,
    FieldConversionError,
)
from bitcoin_rest.core.decoder import (
    RestFormat,
    Resource,
    decode_transaction,
    decode_block,
    decode_block_header,
    decode_block_hash,
    decode_header_stream,
    decode_payload,
)
from bitcoin_rest.core.json_decoder import (
    transaction_from_json,
    block_from_json,
    block_header_from_json,
    chain_info_from_json,
    utxos_from_json,
)
from bitcoin_rest.core.rest_client import BitcoinRESTClient

__all__ = [
    "BitcoinRESTError",
    "TransportError",
    "DecodeError",
    "MalformedEncoding",
    "TruncatedStream",
    "InvalidHexEncoding",
    "FieldConversionError",
    "RestFormat",
    "Resource",
    "decode_transaction",
    "decode_block",
    "decode_block_header",
    "decode_block_hash",
    "decode_header_stream",
    "decode_payload",
    "transaction_from_json",
    "block_from_json",
    "block_header_from_json",
    "chain_info_from_json",
    "utxos_from_json",
    "BitcoinRESTClient",
]
