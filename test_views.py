"""Tests for the view model builders."""

from conftest import GENESIS_HASH, SAMPLE_ADDRESS, SAMPLE_TXID
from formatting import format_date
from views import (
    address_view,
    block_summary,
    block_view,
    fee_view,
    mempool_view,
    transaction_view,
)


def test_block_summary(sample_block):
    summary = block_summary(sample_block, now=sample_block['timestamp'] + 120)

    assert summary['short_hash'] == "00000000...0a8ce26f"
    assert summary['path'] == f"/block/{GENESIS_HASH}"
    assert summary['time_ago'] == "2 minutes ago"
    assert summary['size_formatted'] == "2.22 MB"
    assert summary['tx_count'] == 3050


def test_block_view(sample_block):
    view = block_view(sample_block, [SAMPLE_TXID])

    assert view['height'] == 840000
    assert view['difficulty_formatted'] == "86.39T"
    assert view['hashrate_formatted'].endswith("EH/s")
    assert view['previous_height'] == 839999
    assert view['next_height'] == 840001
    assert view['date'] == format_date(sample_block['timestamp'])
    assert view['transactions'] == [{
        'txid': SAMPLE_TXID,
        'short_txid': "4a5e1e4b...fdeda33b",
        'path': f"/tx/{SAMPLE_TXID}",
    }]


def test_block_view_navigation_edges(sample_block):
    sample_block['height'] = 0
    assert block_view(sample_block, [])['previous_height'] is None

    sample_block['height'] = 100
    assert block_view(sample_block, [], tip_height=100)['next_height'] is None


def test_transaction_view(sample_tx):
    view = transaction_view(sample_tx)

    assert view['fee'] == 500
    assert view['fee_btc'] == "0.00000500"
    assert view['fee_rate'] == 1.0
    assert view['vsize'] == 500
    assert view['confirmed'] is True
    assert view['total_input'] == 100000
    assert view['total_output'] == 99500
    assert view['total_output_btc'] == "0.00099500"
    assert [i['script_type'] for i in view['inputs']] == ['P2WPKH', 'P2PKH']
    assert [o['script_type'] for o in view['outputs']] == ['P2TR', 'P2WPKH']
    assert view['outputs'][1]['path'] == f"/address/{SAMPLE_ADDRESS}"


def test_transaction_view_coinbase_and_unconfirmed():
    tx = {
        'txid': SAMPLE_TXID,
        'vin': [{'txid': '00' * 32, 'vout': 4294967295, 'is_coinbase': True}],
        'vout': [{'scriptpubkey_type': 'op_return', 'value': 0}],
        'size': 200,
        'weight': 0,
        'fee': 0,
        'status': {'confirmed': False},
    }
    view = transaction_view(tx)

    assert view['inputs'][0]['is_coinbase'] is True
    assert view['inputs'][0]['value'] is None
    assert view['outputs'][0]['script_type'] == 'OP_RETURN'
    assert view['outputs'][0]['path'] is None
    assert view['fee_rate'] == 0.0
    assert view['confirmed'] is False
    assert view['date'] is None


def test_address_view(sample_address, sample_tx):
    view = address_view(sample_address, [sample_tx])

    assert view['balance'] == 150000
    assert view['balance_btc'] == "0.00150000"
    assert view['total_received'] == 250000
    assert view['unconfirmed_tx_count'] == 1

    entry = view['transactions'][0]
    # spent 60000 from this address and got 9500 back as change
    assert entry['received'] == 9500
    assert entry['sent'] == 60000
    assert entry['net'] == -50500
    assert entry['direction'] == 'sent'
    assert entry['net_btc'] == "-0.00050500"


def test_address_view_received(sample_tx):
    address = sample_tx['vout'][0]['scriptpubkey_address']
    entry = address_view({'address': address, 'chain_stats': {}}, [sample_tx])['transactions'][0]

    assert entry['direction'] == 'received'
    assert entry['net_btc'] == "+0.00090000"


def test_mempool_view():
    stats = {
        'count': 12345,
        'vsize': 1572864,
        'total_fee': 9876543,
        'fee_histogram': [[rate, 1000] for rate in range(20, 0, -1)],
    }
    recent = [{'txid': SAMPLE_TXID, 'fee': 1410, 'vsize': 141, 'value': 5000}] * 25

    view = mempool_view(stats, recent)

    assert view['count_formatted'] == "12,345"
    assert view['vsize_formatted'] == "1.5 MB"
    assert view['total_fee_satoshis'] == "9,876,543"
    assert len(view['fee_histogram']) == 10
    assert view['fee_histogram'][0] == {'fee_rate': "20+", 'count': 1000}
    assert len(view['recent']) == 20
    assert view['recent'][0]['fee_rate'] == 10.0


def test_fee_view():
    fees = {'fastestFee': 25, 'halfHourFee': 20, 'hourFee': 15, 'economyFee': 8, 'minimumFee': 1}
    options = fee_view(fees)['options']

    assert [o['priority'] for o in options] == ['high', 'medium', 'low', 'economy', 'minimum']
    assert options[0]['fee_rate_formatted'] == "25 sat/vB"
    assert options[-1]['fee_rate'] == 1


def test_histogram_labels_drop_trailing_zero():
    stats = {'fee_histogram': [[2.0, 5], [1.5, 7], [1, 9]]}

    labels = [bucket['fee_rate'] for bucket in mempool_view(stats, [])['fee_histogram']]

    assert labels == ["2+", "1.5+", "1+"]


def test_fee_view_missing_priority():
    options = fee_view({'fastestFee': 12.0, 'hourFee': 4})['options']
    by_priority = {o['priority']: o for o in options}

    assert by_priority['high']['fee_rate_formatted'] == "12 sat/vB"
    assert by_priority['low']['fee_rate_formatted'] == "4 sat/vB"
    assert by_priority['medium']['fee_rate'] is None
    assert by_priority['medium']['fee_rate_formatted'] == "Unavailable"
    assert len(options) == 5
