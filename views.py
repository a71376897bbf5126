"""
View models for the explorer front end

Each builder takes raw records as returned by the remote API and adds the
display values the pages need. Raw fields are passed through untouched.
"""

from bitcoin_utils import (
    calculate_fee,
    calculate_fee_rate,
    calculate_input_total,
    calculate_output_total,
    calculate_vsize,
    estimate_hashrate,
    format_btc,
    format_hash,
    format_satoshis,
    get_script_type,
)
from formatting import (
    format_bytes,
    format_date,
    format_difficulty,
    format_hashrate,
    format_number,
    format_plain_number,
    format_time_ago,
)

MEMPOOL_HISTOGRAM_BUCKETS = 10
MEMPOOL_RECENT_LIMIT = 20

FEE_PRIORITIES = [
    ('high', 'High Priority', 'Next block (~10 minutes)', 'fastestFee'),
    ('medium', 'Medium Priority', '~30 minutes', 'halfHourFee'),
    ('low', 'Low Priority', '~1 hour', 'hourFee'),
    ('economy', 'Economy', 'No time guarantee', 'economyFee'),
    ('minimum', 'Minimum Fee', 'Network minimum relay fee', 'minimumFee'),
]


def block_path(value):
    return f"/block/{value}"


def tx_path(value):
    return f"/tx/{value}"


def address_path(value):
    return f"/address/{value}"


def block_summary(block, now=None):
    """Card shown in the latest blocks list"""
    return {
        'id': block['id'],
        'height': block.get('height'),
        'short_hash': format_hash(block['id']),
        'path': block_path(block['id']),
        'timestamp': block.get('timestamp'),
        'time_ago': format_time_ago(block['timestamp'], now=now) if block.get('timestamp') else None,
        'tx_count': block.get('tx_count', 0),
        'size': block.get('size', 0),
        'size_formatted': format_bytes(block.get('size', 0)),
    }


def block_view(block, txids, tip_height=None):
    """Block details page, with navigation to the neighbouring heights"""
    height = block.get('height', 0)
    hashrate = estimate_hashrate(block.get('difficulty'))

    next_height = height + 1
    if tip_height is not None and height >= tip_height:
        next_height = None

    view = dict(block)
    view.update({
        'short_hash': format_hash(block['id']),
        'date': format_date(block['timestamp']) if block.get('timestamp') else None,
        'size_formatted': format_bytes(block.get('size', 0)),
        'difficulty_formatted': format_difficulty(block.get('difficulty') or 0),
        'hashrate': hashrate,
        'hashrate_formatted': format_hashrate(hashrate),
        'previous_height': height - 1 if height > 0 else None,
        'next_height': next_height,
        'transactions': [
            {'txid': txid, 'short_txid': format_hash(txid), 'path': tx_path(txid)}
            for txid in txids
        ],
    })
    return view


def _input_view(tx_input):
    if tx_input.get('is_coinbase', False):
        return {
            'txid': tx_input.get('txid'),
            'vout': tx_input.get('vout'),
            'is_coinbase': True,
            'address': None,
            'value': None,
            'value_btc': None,
            'script_type': None,
        }

    prevout = tx_input.get('prevout') or {}
    value = prevout.get('value') or 0
    return {
        'txid': tx_input.get('txid'),
        'vout': tx_input.get('vout'),
        'is_coinbase': False,
        'address': prevout.get('scriptpubkey_address'),
        'value': value,
        'value_btc': format_btc(value),
        'script_type': get_script_type(prevout.get('scriptpubkey_type'))['name'] if prevout else None,
    }


def _output_view(output):
    address = output.get('scriptpubkey_address')
    return {
        'address': address,
        'path': address_path(address) if address else None,
        'value': output.get('value', 0),
        'value_btc': format_btc(output.get('value', 0)),
        'script_type': get_script_type(output.get('scriptpubkey_type'))['name'],
    }


def transaction_view(tx):
    """Transaction details page"""
    status = tx.get('status') or {}
    fee = calculate_fee(tx)
    total_input = calculate_input_total(tx)
    total_output = calculate_output_total(tx)

    view = dict(tx)
    view.update({
        'fee': fee,
        'fee_satoshis': format_satoshis(fee),
        'fee_btc': format_btc(fee),
        'fee_rate': round(calculate_fee_rate(tx), 2),
        'vsize': calculate_vsize(tx),
        'size_formatted': format_bytes(tx.get('size', 0)),
        'confirmed': status.get('confirmed', False),
        'block_height': status.get('block_height'),
        'date': format_date(status['block_time']) if status.get('block_time') else None,
        'total_input': total_input,
        'total_input_btc': format_btc(total_input),
        'total_output': total_output,
        'total_output_btc': format_btc(total_output),
        'inputs': [_input_view(tx_input) for tx_input in tx.get('vin', [])],
        'outputs': [_output_view(output) for output in tx.get('vout', [])],
    })
    return view


def address_transaction_entry(address, tx):
    """One row of an address history: what this tx did to the address"""
    received = sum(
        output.get('value', 0)
        for output in tx.get('vout', [])
        if output.get('scriptpubkey_address') == address
    )
    sent = sum(
        (tx_input.get('prevout') or {}).get('value') or 0
        for tx_input in tx.get('vin', [])
        if (tx_input.get('prevout') or {}).get('scriptpubkey_address') == address
    )
    net = received - sent
    status = tx.get('status') or {}

    return {
        'txid': tx['txid'],
        'short_txid': format_hash(tx['txid']),
        'path': tx_path(tx['txid']),
        'confirmed': status.get('confirmed', False),
        'date': format_date(status['block_time']) if status.get('block_time') else None,
        'received': received,
        'sent': sent,
        'net': net,
        'net_btc': f"{'+' if net > 0 else ''}{format_btc(net)}",
        'direction': 'received' if net > 0 else 'sent',
    }


def address_view(address, txs):
    """Address page: balance totals plus transaction history"""
    chain_stats = address.get('chain_stats') or {}
    total_received = chain_stats.get('funded_txo_sum', 0)
    total_sent = chain_stats.get('spent_txo_sum', 0)
    balance = total_received - total_sent

    return {
        'address': address['address'],
        'balance': balance,
        'balance_btc': format_btc(balance),
        'balance_satoshis': format_satoshis(balance),
        'total_received': total_received,
        'total_received_btc': format_btc(total_received),
        'total_sent': total_sent,
        'total_sent_btc': format_btc(total_sent),
        'tx_count': chain_stats.get('tx_count', 0),
        'unconfirmed_tx_count': (address.get('mempool_stats') or {}).get('tx_count', 0),
        'transactions': [address_transaction_entry(address['address'], tx) for tx in txs],
    }


def _recent_fee_rate(tx):
    # /mempool/recent entries carry vsize instead of weight
    if tx.get('vsize'):
        return tx.get('fee', 0) / tx['vsize']
    return calculate_fee_rate(tx)


def mempool_view(stats, recent):
    """Mempool dashboard"""
    histogram = [
        {'fee_rate': f"{format_plain_number(fee_rate)}+", 'count': count}
        for fee_rate, count in (stats.get('fee_histogram') or [])
    ][:MEMPOOL_HISTOGRAM_BUCKETS]

    return {
        'count': stats.get('count', 0),
        'count_formatted': format_number(stats.get('count', 0)),
        'vsize': stats.get('vsize', 0),
        'vsize_formatted': format_bytes(stats.get('vsize', 0)),
        'total_fee': stats.get('total_fee', 0),
        'total_fee_satoshis': format_satoshis(stats.get('total_fee', 0)),
        'fee_histogram': histogram,
        'recent': [
            {
                'txid': tx['txid'],
                'short_txid': format_hash(tx['txid']),
                'path': tx_path(tx['txid']),
                'value': tx.get('value', 0),
                'value_satoshis': format_satoshis(tx.get('value', 0)),
                'fee_rate': round(_recent_fee_rate(tx), 2),
            }
            for tx in recent[:MEMPOOL_RECENT_LIMIT]
        ],
    }


def _fee_rate_text(fee_rate):
    if fee_rate is None:
        return 'Unavailable'
    return f"{format_plain_number(fee_rate)} sat/vB"


def fee_view(fees):
    """
    Recommended fee rates ordered from fastest to cheapest

    A priority missing from the upstream record keeps its slot with a
    fee_rate of None.
    """
    return {
        'options': [
            {
                'priority': priority,
                'title': title,
                'description': description,
                'fee_rate': fees.get(field),
                'fee_rate_formatted': _fee_rate_text(fees.get(field)),
            }
            for priority, title, description, field in FEE_PRIORITIES
        ],
    }
