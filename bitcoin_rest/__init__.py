"""
Bitcoin Core REST client

Fetches blocks, headers, transactions, chain state and UTXO queries from a
node's read-only REST interface and decodes the binary, hex and JSON
responses into typed objects.
"""

__version__ = "1.0.0"
__author__ = "Bitcoin Data Engineering Team"
__description__ = "Typed client for the Bitcoin Core REST interface"

from bitcoin_rest.core.rest_client import BitcoinRESTClient
from bitcoin_rest.core.decoder import RestFormat
from bitcoin_rest.models.config import RestClientConfig

__all__ = [
    "BitcoinRESTClient",
    "RestFormat",
    "RestClientConfig",
]
