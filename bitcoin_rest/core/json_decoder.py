"""Rebuild domain objects from the node's verbose JSON descriptions.

The JSON path yields the same ``CTransaction``/``CBlock``/``CBlockHeader``
values as the binary path. Every field is converted on its own; the first
failure aborts the containing object and names the field by its path, e.g.
``tx[2].vin[0].txinwitness[1]``.
"""

from typing import Any, Dict, List

import structlog
from pydantic import ValidationError

from bitcoin_rest.core.errors import FieldConversionError
from bitcoin_rest.models.blockchain import (
    NULL_HASH,
    CBlock,
    CBlockHeader,
    COutPoint,
    CScript,
    CTransaction,
    CTxIn,
    CTxOut,
    build_block,
    build_transaction,
)
from bitcoin_rest.models.chain import ChainInfo, UtxoQueryResult
from bitcoin_rest.utils.bitcoin import btc_to_satoshi, hex_to_hash, parse_hex

logger = structlog.get_logger(__name__)

INT32_MIN, INT32_MAX = -2 ** 31, 2 ** 31 - 1
UINT32_MAX = 2 ** 32 - 1

_MISSING = object()


def _path(parent: str, key) -> str:
    if isinstance(key, int):
        return f"{parent}[{key}]"
    return f"{parent}.{key}" if parent else key


def _get(obj: Dict[str, Any], key: str, parent: str, default=_MISSING) -> Any:
    if key in obj:
        return obj[key]
    if default is _MISSING:
        raise FieldConversionError(_path(parent, key), "missing")
    return default


def _as_dict(value: Any, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise FieldConversionError(path or "(payload)", f"expected an object, got {type(value).__name__}")
    return value


def _as_list(value: Any, path: str) -> List[Any]:
    if not isinstance(value, list):
        raise FieldConversionError(path or "(payload)", f"expected an array, got {type(value).__name__}")
    return value


def _get_int(obj: Dict[str, Any], key: str, parent: str, lo: int, hi: int) -> int:
    path = _path(parent, key)
    value = _get(obj, key, parent)
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldConversionError(path, f"expected an integer, got {value!r}")
    if not lo <= value <= hi:
        raise FieldConversionError(path, f"{value} out of range [{lo}, {hi}]")
    return value


def _get_hash(obj: Dict[str, Any], key: str, parent: str, default=_MISSING) -> bytes:
    value = _get(obj, key, parent, default)
    if value is default:
        return value
    return hex_to_hash(value, field=_path(parent, key))


def _parse_bits(obj: Dict[str, Any], parent: str) -> int:
    """Compact target, 8 hex characters read big-endian."""
    path = _path(parent, "bits")
    bits = parse_hex(_get(obj, "bits", parent), field=path)
    if len(bits) != 4:
        raise FieldConversionError(path, f"expected 8 hex characters, got {len(bits) * 2}")
    return int.from_bytes(bits, "big")


def _parse_witness(vin: Dict[str, Any], parent: str) -> tuple:
    # An absent field and an empty list both mean no witness data.
    path = _path(parent, "txinwitness")
    items = _as_list(vin.get("txinwitness", []), path)
    return tuple(parse_hex(item, field=_path(path, i)) for i, item in enumerate(items))


def txin_from_json(vin: Any, parent: str) -> CTxIn:
    """Input without its witness; see ``_parse_witness``."""
    vin = _as_dict(vin, parent)

    if "coinbase" in vin:
        prevout = COutPoint()
        script_sig = parse_hex(vin["coinbase"], field=_path(parent, "coinbase"))
    else:
        prevout = COutPoint(
            _get_hash(vin, "txid", parent),
            _get_int(vin, "vout", parent, 0, UINT32_MAX),
        )
        script_path = _path(parent, "scriptSig")
        script = _as_dict(_get(vin, "scriptSig", parent), script_path)
        script_sig = parse_hex(_get(script, "hex", script_path), field=_path(script_path, "hex"))

    return CTxIn(prevout, CScript(script_sig), _get_int(vin, "sequence", parent, 0, UINT32_MAX))


def txout_from_json(vout: Any, parent: str) -> CTxOut:
    vout = _as_dict(vout, parent)
    script_path = _path(parent, "scriptPubKey")
    script = _as_dict(_get(vout, "scriptPubKey", parent), script_path)
    return CTxOut(
        btc_to_satoshi(_get(vout, "value", parent), field=_path(parent, "value")),
        CScript(parse_hex(_get(script, "hex", script_path), field=_path(script_path, "hex"))),
    )


def transaction_from_json(obj: Any, parent: str = "") -> CTransaction:
    """
    Rebuild a transaction from its verbose JSON form.

    Args:
        obj: Decoded JSON object as returned by ``tx/<txid>.json``
        parent: Path prefix used in error messages

    Raises:
        FieldConversionError, InvalidHexEncoding: naming the failing field
    """
    obj = _as_dict(obj, parent)
    vin = _as_list(_get(obj, "vin", parent), _path(parent, "vin"))
    vout = _as_list(_get(obj, "vout", parent), _path(parent, "vout"))
    version = _get_int(obj, "version", parent, INT32_MIN, INT32_MAX)

    inputs, witnesses = [], []
    for i, item in enumerate(vin):
        path = _path(_path(parent, "vin"), i)
        inputs.append(txin_from_json(item, path))
        witnesses.append(_parse_witness(item, path))
    outputs = [txout_from_json(item, _path(_path(parent, "vout"), i))
               for i, item in enumerate(vout)]

    tx = build_transaction(
        version,
        inputs,
        outputs,
        _get_int(obj, "locktime", parent, 0, UINT32_MAX),
        witnesses,
    )

    logger.debug("Rebuilt transaction from JSON",
                 inputs=len(tx.vin),
                 outputs=len(tx.vout))
    return tx


def block_header_from_json(obj: Any, parent: str = "") -> CBlockHeader:
    """Header fields of a block or headers JSON object; extra keys are ignored."""
    obj = _as_dict(obj, parent)
    return CBlockHeader(
        nVersion=_get_int(obj, "version", parent, INT32_MIN, INT32_MAX),
        # The genesis block has no previousblockhash.
        hashPrevBlock=_get_hash(obj, "previousblockhash", parent, default=NULL_HASH),
        hashMerkleRoot=_get_hash(obj, "merkleroot", parent),
        nTime=_get_int(obj, "time", parent, 0, UINT32_MAX),
        nBits=_parse_bits(obj, parent),
        nNonce=_get_int(obj, "nonce", parent, 0, UINT32_MAX),
    )


def headers_from_json(obj: Any) -> List[CBlockHeader]:
    items = _as_list(obj, "")
    return [block_header_from_json(item, _path("", i)) for i, item in enumerate(items)]


def block_from_json(obj: Any) -> CBlock:
    """Rebuild a block from ``block/<hash>.json`` (full transaction details)."""
    obj = _as_dict(obj, "")
    header = block_header_from_json(obj)

    transactions = []
    for i, tx in enumerate(_as_list(_get(obj, "tx", ""), "tx")):
        path = _path("tx", i)
        if isinstance(tx, str):
            raise FieldConversionError(path, "got a txid instead of a transaction (notxdetails response?)")
        transactions.append(transaction_from_json(tx, path))

    logger.debug("Rebuilt block from JSON", tx_count=len(transactions))
    return build_block(header, transactions)


def _validation_error(e: ValidationError) -> FieldConversionError:
    error = e.errors()[0]
    path = ""
    for key in error["loc"]:
        path = _path(path, key)
    return FieldConversionError(path or "(payload)", error["msg"])


def chain_info_from_json(obj: Any) -> ChainInfo:
    try:
        return ChainInfo.model_validate(_as_dict(obj, ""))
    except ValidationError as e:
        raise _validation_error(e) from e


def utxos_from_json(obj: Any) -> UtxoQueryResult:
    try:
        return UtxoQueryResult.model_validate(_as_dict(obj, ""))
    except ValidationError as e:
        raise _validation_error(e) from e
