"""Bitcoin-specific conversion helpers."""

import binascii
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Any, Optional, Union

from bitcoin.core import b2lx

from bitcoin_rest.core.errors import FieldConversionError, InvalidHexEncoding

# Satoshis per Bitcoin
SATOSHIS_PER_BTC = Decimal('100000000')
# Amounts are signed 64-bit on the wire
MAX_SATOSHIS = 2 ** 63 - 1
MAX_BTC = Decimal(MAX_SATOSHIS) / SATOSHIS_PER_BTC


def satoshi_to_btc(satoshis: int) -> Decimal:
    """Convert satoshis to BTC."""
    return Decimal(satoshis) / SATOSHIS_PER_BTC


def btc_to_satoshi(btc: Union[Decimal, float, int, str], field: str = "value") -> int:
    """
    Convert a BTC amount to integer satoshis.

    The amount is scaled by 1e8 in decimal arithmetic and rounded to the
    nearest satoshi, so float inputs such as ``0.1 + 0.2`` still land on the
    intended value.

    Raises:
        FieldConversionError: amount is not numeric, not finite, negative or
            does not fit in a 64-bit amount.
    """
    if isinstance(btc, bool) or not isinstance(btc, (Decimal, float, int, str)):
        raise FieldConversionError(field, f"expected a numeric amount, got {type(btc).__name__}")

    try:
        # str() of a float is its shortest round-tripping repr
        amount = btc if isinstance(btc, Decimal) else Decimal(str(btc))
    except InvalidOperation:
        raise FieldConversionError(field, f"not a number: {btc!r}")

    if not amount.is_finite():
        raise FieldConversionError(field, f"not a finite amount: {btc!r}")
    if amount < 0:
        raise FieldConversionError(field, f"negative amount: {btc!r}")
    # Checked before scaling: a huge exponent would overflow the decimal context.
    if amount > MAX_BTC:
        raise FieldConversionError(field, f"amount out of range: {btc!r}")

    satoshis = int((amount * SATOSHIS_PER_BTC).to_integral_value(rounding=ROUND_HALF_EVEN))
    if satoshis > MAX_SATOSHIS:
        raise FieldConversionError(field, f"amount out of range: {btc!r}")
    return satoshis


def parse_hex(value: Any, field: Optional[str] = None) -> bytes:
    """Strictly decode a hex string: even length, hex digits only."""
    if not isinstance(value, str):
        raise InvalidHexEncoding(f"expected a hex string, got {type(value).__name__}", field)
    if len(value) % 2:
        raise InvalidHexEncoding(f"odd-length hex string ({len(value)} characters)", field)
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, ValueError):
        raise InvalidHexEncoding(f"invalid hex digits in {value[:16]!r}", field)


def hash_to_hex(h: bytes) -> str:
    """Wire-order hash to the reversed hex the node displays."""
    return b2lx(h)


def hex_to_hash(value: Any, field: Optional[str] = None) -> bytes:
    """Display hex (as in JSON and URLs) to a wire-order 32-byte hash."""
    raw = parse_hex(value, field)
    if len(raw) != 32:
        raise FieldConversionError(field or "hash", f"expected 32 bytes, got {len(raw)}")
    return raw[::-1]
