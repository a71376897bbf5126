"""
Display formatting for numbers, sizes, dates and rates shown by the explorer
"""

import math
import time
from datetime import datetime

BYTE_UNITS = ['Bytes', 'KB', 'MB', 'GB', 'TB']
HASHRATE_UNITS = ['H/s', 'KH/s', 'MH/s', 'GH/s', 'TH/s', 'PH/s', 'EH/s']
DIFFICULTY_SCALES = [
    (1e12, 'T'),
    (1e9, 'B'),
    (1e6, 'M'),
    (1e3, 'K'),
]


def _trim_fixed(value, decimals):
    # "1.50" -> "1.5", "2.00" -> "2"
    text = f"{value:.{decimals}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def format_number(num):
    """Format a number with thousand separators"""
    return f"{num:,}"


def format_plain_number(num):
    """Number as plain text, whole floats without ".0" (2.0 -> "2")"""
    if isinstance(num, float) and num.is_integer():
        num = int(num)
    return str(num)


def format_bytes(num_bytes, decimals=2):
    """Format a byte count as a human readable size, e.g. "1.5 MB" """
    if num_bytes == 0:
        return '0 Bytes'

    k = 1024
    i = int(math.floor(math.log(num_bytes) / math.log(k)))
    i = max(0, min(i, len(BYTE_UNITS) - 1))

    return f"{_trim_fixed(num_bytes / k ** i, decimals)} {BYTE_UNITS[i]}"


def format_date(timestamp):
    """Format a unix timestamp (seconds) as a local date and time"""
    dt = datetime.fromtimestamp(timestamp)
    return f"{dt:%b} {dt.day}, {dt:%Y, %I:%M:%S %p}"


def format_time_ago(timestamp, now=None):
    """
    Format a unix timestamp as a relative time, e.g. "5 minutes ago"

    Anything 30 days or older is shown as an absolute date instead.
    """
    if now is None:
        now = time.time()

    diff_sec = int(math.floor(now - timestamp))
    diff_min = diff_sec // 60
    diff_hour = diff_min // 60
    diff_day = diff_hour // 24

    if diff_sec < 60:
        return f"{diff_sec} second{'s' if diff_sec != 1 else ''} ago"
    elif diff_min < 60:
        return f"{diff_min} minute{'s' if diff_min != 1 else ''} ago"
    elif diff_hour < 24:
        return f"{diff_hour} hour{'s' if diff_hour != 1 else ''} ago"
    elif diff_day < 30:
        return f"{diff_day} day{'s' if diff_day != 1 else ''} ago"
    return format_date(timestamp)


def format_difficulty(difficulty):
    """Format mining difficulty with a T/B/M/K suffix"""
    for scale, suffix in DIFFICULTY_SCALES:
        if difficulty >= scale:
            return f"{difficulty / scale:.2f}{suffix}"
    return format_plain_number(difficulty)


def format_hashrate(hashrate):
    """Format a hash rate given in H/s"""
    unit_index = 0
    value = hashrate

    while value >= 1000 and unit_index < len(HASHRATE_UNITS) - 1:
        value /= 1000
        unit_index += 1

    return f"{value:.2f} {HASHRATE_UNITS[unit_index]}"


def truncate_text(text, max_length):
    """Truncate text with an ellipsis"""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


def format_percentage(value, decimals=2):
    """Format a fraction (0.25) as a percentage ("25.00%")"""
    return f"{value * 100:.{decimals}f}%"
