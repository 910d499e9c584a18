"""Utility functions and helpers."""

from bitcoin_rest.utils.bitcoin import (
    btc_to_satoshi,
    satoshi_to_btc,
    parse_hex,
    hash_to_hex,
    hex_to_hash,
)

__all__ = [
    "btc_to_satoshi",
    "satoshi_to_btc",
    "parse_hex",
    "hash_to_hex",
    "hex_to_hash",
]
