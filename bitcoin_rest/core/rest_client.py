"""Bitcoin Core REST client for read-only blockchain data access."""

from typing import List, Optional, Sequence, Union

import requests
import structlog

from bitcoin_rest.core.decoder import (
    Payload,
    Resource,
    RestFormat,
    decode_hex_payload,
    decode_payload,
    parse_json_payload,
    strip_hex_payload,
)
from bitcoin_rest.core.errors import DecodeError, TransportError
from bitcoin_rest.models.blockchain import (
    BLOCK_HEADER_SIZE, CBlock, CBlockHeader, COutPoint, CTransaction
)
from bitcoin_rest.models.chain import ChainInfo, UtxoQueryResult
from bitcoin_rest.models.config import RestClientConfig
from bitcoin_rest.utils.bitcoin import hash_to_hex

logger = structlog.get_logger(__name__)

HashLike = Union[bytes, str]


def _hash_str(h: HashLike) -> str:
    """URL form of a hash: display hex; raw bytes are taken as wire order."""
    if isinstance(h, (bytes, bytearray)):
        return hash_to_hex(bytes(h))
    return h


class BitcoinRESTClient:
    """
    Client for the node's REST interface (``-rest``).

    Each resource method fetches one endpoint and decodes it into domain
    objects. Failures surface as ``TransportError`` or a ``DecodeError``
    subclass; nothing is retried.
    """

    def __init__(self, config: Optional[RestClientConfig] = None):
        self.config = config or RestClientConfig()
        self.base_url = self.config.base_url
        self.logger = logger.bind(component="rest_client")
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.user_agent
        })

        self.logger.info("Bitcoin REST client initialized", endpoint=self.base_url)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _fetch(self, path: str, fmt: RestFormat) -> Payload:
        """GET ``<endpoint><path>.<fmt>``; bytes for BINARY, text otherwise."""
        url = f"{self.base_url}{path}{fmt.suffix}"
        try:
            response = self.session.get(url, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            body = e.response.text.strip() if e.response is not None else ""
            self.logger.warning("REST request rejected", url=url, status=status, body=body)
            raise TransportError(f"HTTP {status} for {url}: {body}", url=url, status_code=status) from e
        except requests.RequestException as e:
            self.logger.warning("REST request failed", url=url, error=str(e))
            raise TransportError(f"request to {url} failed: {e}", url=url) from e

        if fmt is RestFormat.BINARY:
            return response.content
        return response.text

    def _call(self, resource: Resource, path: str, fmt: RestFormat):
        fmt = RestFormat(fmt)
        payload = self._fetch(path, fmt)
        try:
            return decode_payload(resource, fmt, payload)
        except DecodeError as e:
            self.logger.warning("Failed to decode response",
                                path=path,
                                format=fmt.value,
                                stage=e.stage,
                                error=str(e))
            raise

    def call_json(self, path: str):
        """Call the REST endpoint and parse it as JSON."""
        return parse_json_payload(self._fetch(path, RestFormat.JSON))

    def call_bin(self, path: str) -> bytes:
        """Call the REST endpoint (binary)."""
        return self._fetch(path, RestFormat.BINARY)

    def call_hex(self, path: str) -> str:
        """Call the REST endpoint (hex), without the trailing newline."""
        return strip_hex_payload(self._fetch(path, RestFormat.HEX))

    def tx(self, txid: HashLike, fmt: RestFormat = RestFormat.BINARY) -> CTransaction:
        """Get a transaction by id (``tx/<txid>``)."""
        return self._call(Resource.TX, f"tx/{_hash_str(txid)}", fmt)

    def block(self, block_hash: HashLike, fmt: RestFormat = RestFormat.BINARY) -> CBlock:
        """Get a block with all its transactions (``block/<hash>``)."""
        return self._call(Resource.BLOCK, f"block/{_hash_str(block_hash)}", fmt)

    def block_notxdetails(self, block_hash: HashLike,
                          fmt: RestFormat = RestFormat.BINARY) -> CBlockHeader:
        """Get only the header of a block (``block/notxdetails/<hash>``)."""
        return self._call(Resource.BLOCK_NOTXDETAILS,
                          f"block/notxdetails/{_hash_str(block_hash)}", fmt)

    def headers(self, count: int, block_hash: HashLike,
                fmt: RestFormat = RestFormat.BINARY) -> List[CBlockHeader]:
        """
        Get up to ``count`` headers starting at ``block_hash``.

        The node sends fewer headers when the chain tip is reached, so
        ``count`` is an upper bound; a payload that is not a whole number
        of records, or holds more than ``count``, is a TruncatedStream.
        """
        fmt = RestFormat(fmt)
        path = f"headers/{count}/{_hash_str(block_hash)}"
        if fmt is RestFormat.JSON:
            return self._call(Resource.HEADERS, path, fmt)

        payload = self._fetch(path, fmt)
        try:
            data = payload if fmt is RestFormat.BINARY else decode_hex_payload(payload)
            received = min(count, len(data) // BLOCK_HEADER_SIZE)
            return decode_payload(Resource.HEADERS, RestFormat.BINARY, data, count=received)
        except DecodeError as e:
            self.logger.warning("Failed to decode header stream",
                                path=path,
                                stage=e.stage,
                                error=str(e))
            raise

    def blockhashbyheight(self, height: int, fmt: RestFormat = RestFormat.BINARY) -> bytes:
        """Get the hash (wire byte order) of the active-chain block at ``height``."""
        return self._call(Resource.BLOCK_HASH, f"blockhashbyheight/{height}", fmt)

    def chaininfo(self) -> ChainInfo:
        """Get chain state (``chaininfo``)."""
        return self._call(Resource.CHAIN_INFO, "chaininfo", RestFormat.JSON)

    def getutxos(self, outpoints: Sequence[COutPoint],
                 check_mempool: bool = False) -> UtxoQueryResult:
        """
        Query the UTXO set for ``outpoints``.

        Args:
            outpoints: Outputs to look up, in query order
            check_mempool: Also consider spends and outputs in the mempool
        """
        path = "getutxos"
        if check_mempool:
            path += "/checkmempool"
        for outpoint in outpoints:
            path += f"/{hash_to_hex(outpoint.hash)}-{outpoint.n}"

        result = self._call(Resource.UTXOS, path, RestFormat.JSON)
        self.logger.debug("UTXO query completed",
                          queried=len(outpoints),
                          unspent=len(result.utxos))
        return result

    def test_connection(self) -> bool:
        """Test the REST connection."""
        try:
            info = self.chaininfo()
            self.logger.info("REST connection successful",
                             chain=info.chain,
                             blocks=info.blocks)
            return True
        except (TransportError, DecodeError) as e:
            self.logger.error("REST connection failed", error=str(e))
            return False

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        self.logger.info("REST client session closed")
