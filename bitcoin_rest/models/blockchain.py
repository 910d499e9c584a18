"""Consensus data structures for Bitcoin blocks and transactions.

The types are python-bitcoinlib's immutable ``CTransaction``, ``CBlock``
and ``CBlockHeader``. The binary and JSON decoders both build these same
objects, so equality (which compares serializations) holds across paths.
Hashes are 32 raw bytes in wire order; use
``bitcoin_rest.utils.bitcoin.hash_to_hex`` for display.
"""

from typing import Sequence, Tuple

from bitcoin.core import (
    CBlock,
    CBlockHeader,
    COutPoint,
    CTransaction,
    CTxIn,
    CTxInWitness,
    CTxOut,
    CTxWitness,
)
from bitcoin.core.script import CScript, CScriptWitness

BLOCK_HEADER_SIZE = 80
HASH_SIZE = 32
NULL_HASH = b"\x00" * HASH_SIZE
NULL_INDEX = 0xFFFFFFFF


def build_transaction(version: int, inputs: Sequence[CTxIn], outputs: Sequence[CTxOut],
                      lock_time: int, witnesses: Sequence[Sequence[bytes]] = ()) -> CTransaction:
    """
    Assemble a transaction from its parts.

    ``witnesses`` holds one stack per input; missing trailing stacks are
    empty. When every stack is empty the transaction gets no witness
    section, matching the legacy encoding.
    """
    if len(witnesses) > len(inputs):
        raise ValueError(f"{len(witnesses)} witness stacks for {len(inputs)} inputs")
    witness = CTxWitness()
    if any(witnesses):
        stacks = list(witnesses) + [()] * (len(inputs) - len(witnesses))
        witness = CTxWitness(tuple(
            CTxInWitness(CScriptWitness(tuple(stack))) for stack in stacks
        ))
    return CTransaction(tuple(inputs), tuple(outputs), lock_time, version, witness)


def build_block(header: CBlockHeader, transactions: Sequence[CTransaction]) -> CBlock:
    return CBlock(
        nVersion=header.nVersion,
        hashPrevBlock=header.hashPrevBlock,
        hashMerkleRoot=header.hashMerkleRoot,
        nTime=header.nTime,
        nBits=header.nBits,
        nNonce=header.nNonce,
        vtx=tuple(transactions),
    )


def witness_stack(tx: CTransaction, index: int) -> Tuple[bytes, ...]:
    """Witness items of input ``index``; empty when it has none."""
    if index < len(tx.wit.vtxinwit):
        return tuple(tx.wit.vtxinwit[index].scriptWitness.stack)
    return ()


__all__ = [
    "BLOCK_HEADER_SIZE",
    "HASH_SIZE",
    "NULL_HASH",
    "NULL_INDEX",
    "CBlock",
    "CBlockHeader",
    "COutPoint",
    "CScript",
    "CTransaction",
    "CTxIn",
    "CTxOut",
    "build_block",
    "build_transaction",
    "witness_stack",
]
