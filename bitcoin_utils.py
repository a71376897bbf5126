"""
Bitcoin helpers used by the explorer views and the search endpoint.

Everything here is pure: satoshi/BTC conversion, fee and fee-rate
arithmetic, scriptpubkey type lookup, hash shortening and the syntactic
classification of a search query. Nothing in this module talks to the
network.
"""

import re

SATOSHIS_PER_BTC = 100000000

# Average block interval in minutes
BLOCK_INTERVAL_MINUTES = 10

MAINNET_ADDRESS_RE = re.compile(r"^(1|3|bc1)[a-zA-HJ-NP-Z0-9]{25,62}$")
TESTNET_ADDRESS_RE = re.compile(r"^(m|n|tb1|2)[a-zA-HJ-NP-Z0-9]{25,62}$")
HEX_64_RE = re.compile(r"^[a-fA-F0-9]{64}$")
BLOCK_HEIGHT_RE = re.compile(r"^[0-9]+$")

SCRIPT_TYPES = {
    'p2pkh': {
        'type': 'p2pkh',
        'name': 'P2PKH',
        'description': 'Pay to Public Key Hash (Legacy)',
    },
    'p2sh': {
        'type': 'p2sh',
        'name': 'P2SH',
        'description': 'Pay to Script Hash (Multisig/SegWit)',
    },
    'v0_p2wpkh': {
        'type': 'p2wpkh',
        'name': 'P2WPKH',
        'description': 'Pay to Witness Public Key Hash (SegWit)',
    },
    'v0_p2wsh': {
        'type': 'p2wsh',
        'name': 'P2WSH',
        'description': 'Pay to Witness Script Hash (SegWit Multisig)',
    },
    'v1_p2tr': {
        'type': 'p2tr',
        'name': 'P2TR',
        'description': 'Pay to Taproot (Taproot)',
    },
    'multisig': {
        'type': 'multisig',
        'name': 'Multisig',
        'description': 'Bare Multisig',
    },
    'op_return': {
        'type': 'nulldata',
        'name': 'OP_RETURN',
        'description': 'Null Data (Unspendable)',
    },
}

NONSTANDARD_SCRIPT = {
    'type': 'nonstandard',
    'name': 'Non-standard',
    'description': 'Non-standard script',
}


def satoshis_to_btc(satoshis):
    """Convert satoshis to BTC"""
    return satoshis / SATOSHIS_PER_BTC


def btc_to_satoshis(btc):
    """Convert BTC to satoshis, rounded to the nearest whole satoshi"""
    return int(round(btc * SATOSHIS_PER_BTC))


def format_hash(hash_value, start_chars=8, end_chars=8):
    """
    Shorten a hash for display by cutting out the middle

    Strings no longer than start_chars + end_chars are returned unchanged.
    """
    if len(hash_value) <= start_chars + end_chars:
        return hash_value
    return f"{hash_value[:start_chars]}...{hash_value[-end_chars:]}"


def get_script_type(script_type):
    """
    Identify a Bitcoin script type from the API's scriptpubkey_type code

    - P2PKH: legacy addresses starting with 1
    - P2SH: multisig/wrapped segwit addresses starting with 3
    - P2WPKH / P2WSH: native segwit v0 (bc1q...)
    - P2TR: taproot (bc1p...)

    Unknown codes, including an empty or missing one, resolve to the
    non-standard entry. A new dict is returned on every call.
    """
    return dict(SCRIPT_TYPES.get(script_type, NONSTANDARD_SCRIPT))


def _prevout_value(tx_input):
    prevout = tx_input.get('prevout') or {}
    return prevout.get('value') or 0


def calculate_input_total(tx):
    """Sum of the prevout values of all inputs whose prevout is known"""
    return sum(_prevout_value(tx_input) for tx_input in tx.get('vin', []))


def calculate_output_total(tx):
    """Sum of all output values"""
    return sum(output.get('value', 0) for output in tx.get('vout', []))


def calculate_fee(tx):
    """
    Calculate the transaction fee in satoshis

    A fee reported by the API is returned as is. Otherwise the fee is
    inputs minus outputs, where inputs without prevout data (pruned, or
    coinbase) count as zero. That can under-report the fee of a
    transaction with missing prevouts; callers show it as a best effort.
    """
    fee = tx.get('fee')
    if fee is not None:
        return fee
    return calculate_input_total(tx) - calculate_output_total(tx)


def calculate_vsize(tx):
    """Virtual size in vbytes (weight / 4)"""
    return (tx.get('weight') or 0) / 4


def calculate_fee_rate(tx):
    """
    Calculate the fee rate in sat/vB

    Returns 0.0 for a transaction without weight instead of dividing by zero.
    """
    vsize = calculate_vsize(tx)
    if vsize <= 0:
        return 0.0
    return calculate_fee(tx) / vsize


def get_confirmation_time(confirmations):
    """Rough age of a transaction from its number of confirmations"""
    if confirmations == 0:
        return 'Unconfirmed'

    minutes = confirmations * BLOCK_INTERVAL_MINUTES

    if minutes < 60:
        return f"~{minutes} minutes ago"

    hours = minutes // 60
    if hours < 24:
        return f"~{hours} hour{'s' if hours > 1 else ''} ago"

    days = hours // 24
    return f"~{days} day{'s' if days > 1 else ''} ago"


def estimate_hashrate(difficulty):
    """
    Estimate the network hashrate in H/s from a block difficulty

    Formula: H/s = Difficulty × 2^32 / 600
    Where 2^32 is the expected number of hashes per unit of difficulty
    and 600 seconds is the target block time.
    """
    try:
        if difficulty is None or difficulty == 0:
            return 0

        # Some backends return difficulty as a string
        if isinstance(difficulty, str):
            difficulty = float(difficulty)

        return (difficulty * (2**32)) / 600
    except (ValueError, TypeError):
        return 0


def validate_address(address):
    """Check that a string looks like a mainnet or testnet address"""
    return bool(MAINNET_ADDRESS_RE.match(address) or TESTNET_ADDRESS_RE.match(address))


def validate_txid(txid):
    """Check that a string is a 64 character hex transaction id"""
    return bool(HEX_64_RE.match(txid))


def validate_block_hash(block_hash):
    """Check that a string is a 64 character hex block hash"""
    return bool(HEX_64_RE.match(block_hash))


def validate_block_height(height):
    """Check that a value is a non-negative base-10 integer height"""
    if isinstance(height, bool):
        return False
    if isinstance(height, int):
        return height >= 0
    if isinstance(height, str):
        return bool(BLOCK_HEIGHT_RE.match(height))
    return False


def detect_search_type(query):
    """
    Classify a search box query

    Returns 'block', 'transaction', 'address' or None. A 64 character hex
    string could be either a block hash or a txid; it is reported as
    'block' and the caller is expected to fall back to a transaction
    lookup when no such block exists.
    """
    trimmed = query.strip()
    if not trimmed:
        return None

    # Block height
    if validate_block_height(trimmed):
        return 'block'

    # Block hash or txid
    if validate_txid(trimmed) or validate_block_hash(trimmed):
        return 'block'

    if validate_address(trimmed):
        return 'address'

    return None


def format_btc(satoshis, decimals=8):
    """Format a satoshi amount as a fixed-point BTC string"""
    return f"{satoshis_to_btc(satoshis):.{decimals}f}"


def format_satoshis(satoshis):
    """Format a satoshi amount with thousand separators"""
    return f"{satoshis:,}"
