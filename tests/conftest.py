"""Pytest configuration and fixtures for bitcoin_rest tests."""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from bitcoin_rest.models.blockchain import COutPoint, CScript, CTxIn, CTxOut, build_transaction


# ============================================================================
# GENESIS BLOCK VECTORS
# ============================================================================

GENESIS_HASH = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
GENESIS_MERKLE_ROOT = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"
BLOCK1_HASH = "00000000839a8e6886ab5951d76f411475428afc90947ee320161bbf18eb6048"

GENESIS_MESSAGE = b"The Times 03/Jan/2009 Chancellor on brink of second bailout for banks"
GENESIS_PUBKEY = (
    "04678afdb0fe5548271967f1a67130b7105cd6a828e03909a67962e0ea1f61de"
    "b649f6bc3f4cef38c4f35504e51ec112de5c384df7ba0b8d578a4c702b6bf11d5f"
)
GENESIS_COINBASE_SCRIPT = "04ffff001d0104" + "45" + GENESIS_MESSAGE.hex()
GENESIS_OUTPUT_SCRIPT = "41" + GENESIS_PUBKEY + "ac"

GENESIS_HEADER_HEX = (
    "01000000"                                   # version
    + "00" * 32                                  # previous block
    + bytes.fromhex(GENESIS_MERKLE_ROOT)[::-1].hex()
    + "29ab5f49"                                 # time 1231006505
    + "ffff001d"                                 # bits 0x1d00ffff
    + "1dac2b7c"                                 # nonce 2083236893
)

GENESIS_COINBASE_HEX = (
    "01000000"                                   # version
    + "01"                                       # one input
    + "00" * 32 + "ffffffff"                     # null outpoint
    + "4d" + GENESIS_COINBASE_SCRIPT
    + "ffffffff"                                 # sequence
    + "01"                                       # one output
    + "00f2052a01000000"                         # 50 BTC
    + "43" + GENESIS_OUTPUT_SCRIPT
    + "00000000"                                 # lock time
)


@pytest.fixture
def genesis_header_bytes():
    """Canonical 80-byte genesis block header."""
    return bytes.fromhex(GENESIS_HEADER_HEX)


@pytest.fixture
def genesis_coinbase_bytes():
    """Genesis coinbase transaction in consensus encoding."""
    return bytes.fromhex(GENESIS_COINBASE_HEX)


@pytest.fixture
def genesis_block_bytes(genesis_header_bytes, genesis_coinbase_bytes):
    """Full genesis block: header, tx count, coinbase."""
    return genesis_header_bytes + b"\x01" + genesis_coinbase_bytes


@pytest.fixture
def genesis_coinbase_json():
    """Genesis coinbase as ``tx/<txid>.json`` describes it."""
    return {
        "txid": GENESIS_MERKLE_ROOT,
        "hash": GENESIS_MERKLE_ROOT,
        "version": 1,
        "size": 204,
        "vsize": 204,
        "weight": 816,
        "locktime": 0,
        "vin": [
            {
                "coinbase": GENESIS_COINBASE_SCRIPT,
                "sequence": 4294967295,
            }
        ],
        "vout": [
            {
                "value": Decimal("50.00000000"),
                "n": 0,
                "scriptPubKey": {
                    "asm": GENESIS_PUBKEY + " OP_CHECKSIG",
                    "hex": GENESIS_OUTPUT_SCRIPT,
                    "type": "pubkey",
                },
            }
        ],
    }


@pytest.fixture
def genesis_block_json(genesis_coinbase_json):
    """Genesis block as ``block/<hash>.json`` describes it."""
    return {
        "hash": GENESIS_HASH,
        "confirmations": 800000,
        "height": 0,
        "version": 1,
        "versionHex": "00000001",
        "merkleroot": GENESIS_MERKLE_ROOT,
        "time": 1231006505,
        "mediantime": 1231006505,
        "nonce": 2083236893,
        "bits": "1d00ffff",
        "difficulty": 1,
        "chainwork": "0000000000000000000000000000000000000000000000000000000100010001",
        "nTx": 1,
        "nextblockhash": BLOCK1_HASH,
        "tx": [genesis_coinbase_json],
    }


# ============================================================================
# SEGWIT FIXTURES
# ============================================================================

@pytest.fixture
def segwit_transaction():
    """Two-input transaction, one input spending a witness output."""
    return build_transaction(
        version=2,
        inputs=[
            CTxIn(COutPoint(bytes(range(32)), 1), CScript(b""), 0xFFFFFFFD),
            CTxIn(
                COutPoint(bytes(range(32, 64)), 0),
                CScript(bytes.fromhex("160014" + "33" * 20)),
                0xFFFFFFFF,
            ),
        ],
        outputs=[
            CTxOut(150000, CScript(bytes.fromhex("0014" + "44" * 20))),
            CTxOut(1, CScript(bytes.fromhex("a914" + "55" * 20 + "87"))),
        ],
        lock_time=840000,
        witnesses=[
            (bytes.fromhex("3044" + "11" * 68), bytes.fromhex("02" + "22" * 32)),
            (),
        ],
    )


# ============================================================================
# STRUCTURED RESPONSE FIXTURES
# ============================================================================

@pytest.fixture
def sample_chain_info():
    """``chaininfo`` from a non-pruned node that still reports softforks."""
    return {
        "chain": "main",
        "blocks": 650000,
        "headers": 650000,
        "bestblockhash": "0000000000000000000d7e5e9e2bdbe0e3f3f6e2f6eb4b8f1f7c2c9a4a0e5f1c",
        "difficulty": Decimal("19997335994446.11"),
        "mediantime": 1602659498,
        "verificationprogress": Decimal("0.9999983763567033"),
        "initialblockdownload": False,
        "chainwork": "000000000000000000000000000000000000000013a7f3f1d4a5d5d6a7bd3c4e",
        "size_on_disk": 352000000000,
        "pruned": False,
        "softforks": {
            "bip34": {"type": "buried", "active": True, "height": 227931},
            "segwit": {"type": "buried", "active": True, "height": 481824},
            "taproot": {
                "type": "bip9",
                "bip9": {"status": "defined", "start_time": 1619222400},
                "active": False,
            },
        },
        "warnings": "",
    }


@pytest.fixture
def sample_utxo_response():
    """``getutxos`` answer for two outpoints, the second one spent."""
    return {
        "chainHeight": 650000,
        "chaintipHash": "0000000000000000000d7e5e9e2bdbe0e3f3f6e2f6eb4b8f1f7c2c9a4a0e5f1c",
        "bitmap": "10",
        "utxos": [
            {
                "height": 170,
                "value": Decimal("0.00000001"),
                "scriptPubKey": {
                    "asm": "OP_DUP OP_HASH160 " + "66" * 20 + " OP_EQUALVERIFY OP_CHECKSIG",
                    "hex": "76a914" + "66" * 20 + "88ac",
                    "reqSigs": 1,
                    "type": "pubkeyhash",
                    "addresses": ["1AGNa15ZQXAZUgFiqJ2i7Z2DPU2J6hW62i"],
                },
            }
        ],
    }


# ============================================================================
# TRANSPORT FIXTURES
# ============================================================================

def make_response(content=b"", text=None, status_code=200):
    """Mock ``requests.Response`` carrying ``content`` / ``text``."""
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.text = text if text is not None else content.decode("latin-1")
    return response


@pytest.fixture
def mock_session():
    """Mock ``requests.Session`` whose ``get`` returns queued responses."""
    session = MagicMock()
    session.headers = {}
    return session
