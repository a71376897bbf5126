"""
Shared fixtures: sample API records, a mocked remote API and an in-memory
stand-in for the redis client used by ResponseCache.
"""

from unittest.mock import MagicMock

import pytest
import redis

from app import create_app
from cache import ResponseCache
from mempool_client import MempoolAPI

GENESIS_HASH = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
SAMPLE_TXID = "4a5e1e4baab89f3a32518a88c31bc87f618f76673e2cc77ab2127b7afdeda33b"
SAMPLE_ADDRESS = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"


class InMemoryRedis:
    """Just enough of the redis client API for ResponseCache"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def ping(self):
        return True

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def keys(self, pattern):
        prefix = pattern.rstrip('*')
        return [key for key in self.store if key.startswith(prefix)]

    def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)
            self.ttls.pop(key, None)

    def dbsize(self):
        return len(self.store)

    def info(self):
        return {'used_memory_human': '1.00M', 'keyspace_hits': 3, 'keyspace_misses': 1}


@pytest.fixture
def sample_block():
    return {
        'id': GENESIS_HASH,
        'height': 840000,
        'version': 536870912,
        'timestamp': 1713571767,
        'tx_count': 3050,
        'size': 2325617,
        'weight': 3993281,
        'merkle_root': '031b417c3a1828ddf3d6527fc210daafcc9218e81f98257f88d4d43bd7a5894f',
        'previousblockhash': '0000000000000000000172014ba58d66455762add0512355ad651207918494ab',
        'mediantime': 1713568570,
        'nonce': 3932395645,
        'bits': 386089497,
        'difficulty': 86388558925171.02,
    }


@pytest.fixture
def sample_tx():
    """Two inputs summing to 100,000 sats, outputs summing to 99,500 sats"""
    return {
        'txid': SAMPLE_TXID,
        'version': 2,
        'locktime': 0,
        'vin': [
            {
                'txid': 'aa' * 32,
                'vout': 0,
                'prevout': {
                    'scriptpubkey_type': 'v0_p2wpkh',
                    'scriptpubkey_address': SAMPLE_ADDRESS,
                    'value': 60000,
                },
                'is_coinbase': False,
            },
            {
                'txid': 'bb' * 32,
                'vout': 1,
                'prevout': {
                    'scriptpubkey_type': 'p2pkh',
                    'scriptpubkey_address': '1BoatSLRHtKNngkdXEeobR76b53LETtpyT',
                    'value': 40000,
                },
                'is_coinbase': False,
            },
        ],
        'vout': [
            {
                'scriptpubkey_type': 'v1_p2tr',
                'scriptpubkey_address': 'bc1p5d7rjq7g6rdk2yhzks9smlaqtedr4dekq08ge8ztwac72sfr9rusxg3297',
                'value': 90000,
            },
            {
                'scriptpubkey_type': 'v0_p2wpkh',
                'scriptpubkey_address': SAMPLE_ADDRESS,
                'value': 9500,
            },
        ],
        'size': 370,
        'weight': 2000,
        'status': {
            'confirmed': True,
            'block_height': 840000,
            'block_hash': GENESIS_HASH,
            'block_time': 1713571767,
        },
    }


@pytest.fixture
def sample_address():
    return {
        'address': SAMPLE_ADDRESS,
        'chain_stats': {
            'funded_txo_count': 4,
            'funded_txo_sum': 250000,
            'spent_txo_count': 2,
            'spent_txo_sum': 100000,
            'tx_count': 5,
        },
        'mempool_stats': {
            'funded_txo_count': 0,
            'funded_txo_sum': 0,
            'spent_txo_count': 0,
            'spent_txo_sum': 0,
            'tx_count': 1,
        },
    }


@pytest.fixture
def api():
    """Remote API double"""
    mock_api = MagicMock(spec=MempoolAPI)
    mock_api.base_url = 'https://mempool.example/api'
    return mock_api


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def response_cache(redis_client):
    return ResponseCache(client=redis_client, ttl=300)


@pytest.fixture
def disabled_cache():
    unreachable = MagicMock()
    unreachable.ping.side_effect = redis.exceptions.ConnectionError('Connection refused')
    return ResponseCache(client=unreachable)


@pytest.fixture
def client(api, response_cache):
    """Flask test client backed by the mocked API and the in-memory cache"""
    app = create_app(api=api, cache=response_cache)
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def uncached_client(api, disabled_cache):
    app = create_app(api=api, cache=disabled_cache)
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client
