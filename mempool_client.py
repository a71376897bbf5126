"""
Client for the esplora / mempool.space REST API

API documentation: https://mempool.space/docs/api/rest

The client is constructed explicitly and handed to whoever needs it; there
is no shared module-level instance. Errors raised by requests are logged
and propagated unchanged so the caller decides what to show.
"""

import logging

import requests

import config
from bitcoin_utils import validate_block_height

logger = logging.getLogger(__name__)


class MempoolAPI:
    """Thin wrapper around the remote block explorer API"""

    def __init__(self, base_url=None, timeout=None, session=None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})

    def _get(self, path, description):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Error fetching {description}: {e}")
            raise

    def _get_json(self, path, description):
        return self._get(path, description).json()

    def get_latest_blocks(self, start_height=None):
        """Latest blocks, or the blocks ending at start_height"""
        path = f"/blocks/{start_height}" if start_height is not None else '/blocks'
        return self._get_json(path, 'latest blocks')

    def get_block(self, hash_or_height):
        """
        Block by hash or height

        A height is first resolved to its hash through /block-height.
        """
        block_id = str(hash_or_height)
        if validate_block_height(block_id):
            block_id = self.get_block_hash(int(block_id))
        return self._get_json(f"/block/{block_id}", 'block')

    def get_block_transactions(self, block_hash):
        """Transaction ids of a block"""
        return self._get_json(f"/block/{block_hash}/txids", 'block transactions')

    def get_transaction(self, txid):
        return self._get_json(f"/tx/{txid}", 'transaction')

    def get_address(self, address):
        """Address details including funded/spent totals and tx count"""
        return self._get_json(f"/address/{address}", 'address')

    def get_address_transactions(self, address):
        return self._get_json(f"/address/{address}/txs", 'address transactions')

    def get_mempool_stats(self):
        """Mempool size, total fee and fee histogram"""
        return self._get_json('/mempool', 'mempool stats')

    def get_mempool_recent(self):
        return self._get_json('/mempool/recent', 'recent mempool transactions')

    def get_fee_estimates(self):
        """Recommended fee rates in sat/vB"""
        return self._get_json('/v1/fees/recommended', 'fee estimates')

    def get_block_height(self):
        """Current chain tip height"""
        return int(self._get('/blocks/tip/height', 'block height').text.strip())

    def get_block_hash(self, height):
        """Block hash at a height (returned as plain text)"""
        return self._get(f"/block-height/{height}", 'block hash').text.strip()
