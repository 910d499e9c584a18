"""Pydantic models for the node's structured JSON responses."""

from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, validator

from bitcoin_rest.core.errors import DecodeError, FieldConversionError
from bitcoin_rest.models.blockchain import HASH_SIZE, COutPoint
from bitcoin_rest.utils.bitcoin import btc_to_satoshi, hash_to_hex, hex_to_hash


def _wire_hash(v):
    """Display hex from the node to wire-order bytes."""
    if isinstance(v, (bytes, bytearray)) and len(v) == HASH_SIZE:
        return bytes(v)
    try:
        return hex_to_hash(v)
    except DecodeError as e:
        raise ValueError(str(e))


class _NodeModel(BaseModel):
    """Base for node JSON: immutable, unknown keys ignored."""

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"
        json_encoders = {
            bytes: hash_to_hex
        }


class Softfork(_NodeModel):
    """Deployment status of one softfork."""

    kind: str = Field(..., alias="type", description="Deployment kind (buried, bip9)")
    active: bool = Field(..., description="Whether the rules are enforced")
    height: int = Field(default=0, ge=0, description="Activation height, 0 when not active")


class ChainInfo(_NodeModel):
    """Result of the ``chaininfo`` endpoint."""

    chain: str = Field(..., description="Network name (main, test, regtest, ...)")
    blocks: int = Field(..., ge=0, description="Height of the active chain tip")
    headers: int = Field(..., ge=0, description="Height of the best known header")
    bestblockhash: bytes = Field(..., description="Tip hash, wire byte order")
    difficulty: float
    mediantime: int
    verificationprogress: float
    chainwork: str
    pruned: bool
    pruneheight: int = Field(default=0, ge=0, description="Lowest stored block, 0 when not pruned")
    softforks: Dict[str, Softfork] = Field(default_factory=dict)
    warnings: str = ""

    @validator('bestblockhash', pre=True)
    def bestblockhash_to_wire(cls, v):
        return _wire_hash(v)

    @validator('difficulty', 'verificationprogress', pre=True)
    def decimal_to_float(cls, v):
        if isinstance(v, Decimal):
            return float(v)
        return v

    @validator('warnings', pre=True)
    def join_warnings(cls, v):
        """Newer nodes send a list of warnings instead of one string."""
        if isinstance(v, list):
            return "\n".join(str(w) for w in v)
        return v


class ScriptPubKey(_NodeModel):
    """Locking script descriptor."""

    asm: str
    hex: str
    kind: str = Field(..., alias="type")
    req_sigs: int = Field(default=0, alias="reqSigs")
    addresses: List[str] = Field(default_factory=list)
    address: Optional[str] = None

    @property
    def all_addresses(self) -> List[str]:
        if self.address and self.address not in self.addresses:
            return [self.address] + list(self.addresses)
        return list(self.addresses)


class Utxo(_NodeModel):
    """Unspent output; ``value`` is in satoshis."""

    height: int = Field(..., ge=0)
    value: int
    script_pubkey: ScriptPubKey = Field(..., alias="scriptPubKey")

    @validator('value', pre=True)
    def value_to_satoshi(cls, v):
        try:
            return btc_to_satoshi(v)
        except FieldConversionError as e:
            raise ValueError(e.reason)


class UtxoQueryResult(_NodeModel):
    """
    Result of the ``getutxos`` endpoint.

    ``bitmap`` holds one character per queried outpoint, ``1`` when it is
    unspent. ``utxos`` lists only the unspent ones, so use ``match`` to line
    them up with the query.
    """

    chain_height: int = Field(..., ge=0, alias="chainHeight")
    chaintip_hash: bytes = Field(..., alias="chaintipHash", description="Tip hash, wire byte order")
    bitmap: str
    utxos: List[Utxo]

    @validator('chaintip_hash', pre=True)
    def chaintip_to_wire(cls, v):
        return _wire_hash(v)

    @validator('bitmap')
    def validate_bitmap(cls, v):
        if set(v) - {"0", "1"}:
            raise ValueError(f"bitmap must contain only 0 and 1, got {v!r}")
        return v

    @validator('utxos')
    def validate_utxo_count(cls, v, values):
        bitmap = values.get('bitmap')
        if bitmap is not None and bitmap.count("1") != len(v):
            raise ValueError(
                f"bitmap marks {bitmap.count('1')} unspent outputs but {len(v)} were returned"
            )
        return v

    def is_unspent(self, index: int) -> bool:
        return self.bitmap[index] == "1"

    def match(self, outpoints: Sequence[COutPoint]) -> List[Tuple[COutPoint, Optional[Utxo]]]:
        """Pair each queried outpoint with its Utxo, or None when spent."""
        if len(outpoints) != len(self.bitmap):
            raise ValueError(
                f"{len(outpoints)} outpoints given for a bitmap of {len(self.bitmap)}"
            )
        unspent = iter(self.utxos)
        return [
            (outpoint, next(unspent) if bit == "1" else None)
            for outpoint, bit in zip(outpoints, self.bitmap)
        ]
