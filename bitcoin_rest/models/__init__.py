"""Data models and configuration."""

from bitcoin_rest.models.config import RestClientConfig
from bitcoin_rest.models.blockchain import (
    CBlock, CBlockHeader, COutPoint, CTransaction, CTxIn, CTxOut
)
from bitcoin_rest.models.chain import (
    ChainInfo, ScriptPubKey, Softfork, Utxo, UtxoQueryResult
)

__all__ = [
    "RestClientConfig",
    "CBlock",
    "CBlockHeader",
    "COutPoint",
    "CTransaction",
    "CTxIn",
    "CTxOut",
    "ChainInfo",
    "ScriptPubKey",
    "Softfork",
    "Utxo",
    "UtxoQueryResult",
]
