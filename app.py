import logging
from datetime import datetime

import redis
import requests
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

import config
from bitcoin_utils import (
    detect_search_type,
    validate_address,
    validate_block_hash,
    validate_block_height,
    validate_txid,
)
from cache import ResponseCache, get_cache_key
from mempool_client import MempoolAPI
from views import (
    address_path,
    address_view,
    block_path,
    block_summary,
    block_view,
    fee_view,
    mempool_view,
    transaction_view,
    tx_path,
)

logger = logging.getLogger(__name__)

INVALID_QUERY_MESSAGE = 'Invalid search query. Enter a block height, block hash, transaction ID, or address.'


def _is_not_found(error):
    return error.response is not None and error.response.status_code == 404


def _force_refresh():
    return request.args.get('force_refresh', 'false').lower() == 'true'


def _bad_request(error, message):
    return jsonify({'error': error, 'message': message}), 400


def register_error_handlers(app):
    """Map failures of the remote API to JSON error responses"""

    @app.errorhandler(requests.exceptions.Timeout)
    def handle_timeout(e):
        return jsonify({
            'error': 'Request timeout',
            'message': 'The external API took too long to respond'
        }), 504

    @app.errorhandler(requests.exceptions.ConnectionError)
    def handle_connection_error(e):
        return jsonify({
            'error': 'Connection error',
            'message': 'Could not connect to the external API. Please check if the API is accessible.'
        }), 503

    @app.errorhandler(requests.exceptions.HTTPError)
    def handle_http_error(e):
        status_code = e.response.status_code if e.response is not None else 502
        return jsonify({
            'error': 'HTTP error',
            'message': f'External API returned error: {status_code}',
            'details': str(e)
        }), status_code

    @app.errorhandler(requests.exceptions.RequestException)
    def handle_request_exception(e):
        return jsonify({
            'error': 'Request failed',
            'message': 'An error occurred while fetching data',
            'details': str(e)
        }), 500

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error")
        return jsonify({
            'error': 'Internal server error',
            'message': 'An unexpected error occurred',
            'details': str(e)
        }), 500


def create_app(api=None, cache=None):
    """
    Build the explorer backend

    The remote API client and the response cache are passed in; defaults
    are built from config when they are not given.
    """
    api = api or MempoolAPI()
    cache = cache if cache is not None else ResponseCache()

    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes
    register_error_handlers(app)

    def cached(api_type, identifier, build, ttl=None):
        """Serve from cache unless force_refresh is set, otherwise build and store"""
        cache_key = get_cache_key(api_type, identifier)

        if not _force_refresh():
            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"✅ Cache hit for {api_type}: {identifier}")
                return cached_data

        data = build()
        if cache.set(cache_key, data, ttl):
            logger.debug(f"💾 Cached {api_type}: {identifier}")
        return data

    @app.route('/api/search', methods=['GET'])
    def search():
        """
        Resolve a search box query to the page it should open

        A 64 hex character query is probed as a block first and as a
        transaction when no such block exists.
        """
        query = request.args.get('q', '').strip()
        search_type = detect_search_type(query)

        if search_type is None:
            return _bad_request('Invalid search query', INVALID_QUERY_MESSAGE)

        if search_type == 'address':
            return jsonify({'type': 'address', 'query': query, 'path': address_path(query)}), 200

        if validate_block_height(query):
            return jsonify({'type': 'block', 'query': query, 'path': block_path(query)}), 200

        try:
            api.get_block(query)
            return jsonify({'type': 'block', 'query': query, 'path': block_path(query)}), 200
        except requests.exceptions.HTTPError as e:
            if not _is_not_found(e):
                raise

        try:
            api.get_transaction(query)
            return jsonify({'type': 'transaction', 'query': query, 'path': tx_path(query)}), 200
        except requests.exceptions.HTTPError as e:
            if not _is_not_found(e):
                raise

        return jsonify({
            'error': 'Not found',
            'message': 'No block or transaction matches this hash'
        }), 404

    @app.route('/api/block/<block_id>', methods=['GET'])
    def get_block(block_id):
        """Block details by hash or height, with its transaction ids"""
        if not (validate_block_height(block_id) or validate_block_hash(block_id)):
            return _bad_request('Invalid block identifier',
                                'Please provide a valid block hash or height (positive integer)')

        cache_key = get_cache_key('block', block_id)
        if not _force_refresh():
            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"✅ Cache hit for block: {block_id}")
                return jsonify(cached_data), 200

        block = api.get_block(block_id)
        txids = api.get_block_transactions(block['id'])
        data = block_view(block, txids, tip_height=api.get_block_height())

        # The tip gains a successor within minutes
        ttl = config.CACHE_TTL if data['next_height'] is not None else config.MEMPOOL_CACHE_TTL
        cache.set(cache_key, data, ttl)
        return jsonify(data), 200

    @app.route('/api/blocks/latest', methods=['GET'])
    def get_latest_blocks():
        """Latest blocks, optionally ending at start_height"""
        start_height = request.args.get('start_height')
        if start_height is not None and not validate_block_height(start_height):
            return _bad_request('Invalid block height format',
                                'Please provide a valid block height (positive integer)')

        def build():
            blocks = api.get_latest_blocks(int(start_height) if start_height is not None else None)
            return [block_summary(block) for block in blocks]

        if start_height is None:
            return jsonify(cached('latest_blocks', 'latest', build, config.MEMPOOL_CACHE_TTL)), 200
        return jsonify(cached('latest_blocks', start_height, build)), 200

    @app.route('/api/blocks/tip', methods=['GET'])
    def get_tip():
        """Current chain tip height"""
        data = cached('tip', 'height', lambda: {'height': api.get_block_height()}, config.MEMPOOL_CACHE_TTL)
        return jsonify(data), 200

    @app.route('/api/tx/<txid>', methods=['GET'])
    def get_transaction(txid):
        """Transaction details with fee, fee rate and per input/output amounts"""
        if not validate_txid(txid):
            return _bad_request('Invalid transaction ID format', 'Please provide a valid transaction ID')

        cache_key = get_cache_key('transaction', txid)
        if not _force_refresh():
            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"✅ Cache hit for transaction: {txid}")
                return jsonify(cached_data), 200

        data = transaction_view(api.get_transaction(txid))

        # Unconfirmed transactions can confirm any moment
        ttl = config.CACHE_TTL if data['confirmed'] else config.MEMPOOL_CACHE_TTL
        cache.set(cache_key, data, ttl)
        return jsonify(data), 200

    @app.route('/api/address/<address>', methods=['GET'])
    def get_address(address):
        """Address balance and transaction history"""
        if not validate_address(address):
            return _bad_request('Invalid address format', 'Please provide a valid blockchain address')

        def build():
            details = api.get_address(address)
            txs = api.get_address_transactions(address)
            return address_view(details, txs)

        return jsonify(cached('address', address, build)), 200

    @app.route('/api/mempool', methods=['GET'])
    def get_mempool():
        """Mempool statistics, fee histogram and recent transactions"""

        def build():
            return mempool_view(api.get_mempool_stats(), api.get_mempool_recent())

        return jsonify(cached('mempool', 'status', build, config.MEMPOOL_CACHE_TTL)), 200

    @app.route('/api/fees', methods=['GET'])
    def get_fees():
        """Recommended fee rates"""
        data = cached('fees', 'recommended', lambda: fee_view(api.get_fee_estimates()), config.FEES_CACHE_TTL)
        return jsonify(data), 200

    @app.route('/api/cache/stats', methods=['GET'])
    def cache_stats():
        """Get cache statistics"""
        return jsonify(cache.stats()), 200

    @app.route('/api/cache/clear', methods=['POST'])
    def clear_cache():
        """Clear all cache entries"""
        if not cache.available:
            return jsonify({
                'error': 'Cache not available',
                'message': 'Redis is not available'
            }), 503

        try:
            cleared = cache.clear()
        except redis.exceptions.RedisError as e:
            return jsonify({
                'error': 'Failed to clear cache',
                'message': str(e)
            }), 500

        if cleared:
            message = f'Cleared {cleared} cache entries'
        else:
            message = 'No cache entries to clear'
        return jsonify({'message': message, 'cleared_keys': cleared}), 200

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now().isoformat(),
            'api_url': api.base_url,
            'cache': cache.stats()
        }), 200

    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    logger.info("=" * 60)
    logger.info("🚀 Block Explorer Backend Server")
    logger.info("=" * 60)
    logger.info(f"📡 Explorer API: {config.API_BASE_URL}")
    logger.info("🌐 Server starting at: http://localhost:5000")
    logger.info("🏥 Health check: http://localhost:5000/health")

    create_app().run(debug=True, host='0.0.0.0', port=5000)
