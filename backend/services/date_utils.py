# backend/services/date_utils.py
import os
import logging
from datetime import datetime, date

import pytz

logger = logging.getLogger(__name__)

# Configure server timezone
SERVER_TIMEZONE = pytz.timezone(os.environ.get('TIMEZONE', 'Europe/Madrid'))


def now_millis():
    """Creation timestamp in epoch milliseconds, the default ordering key of every collection"""
    return int(datetime.now(pytz.utc).timestamp() * 1000)


def parse_sheet_date(date_str):
    """
    Parse a calendar date as submitted by the forms (YYYY-MM-DD).

    Dates carry no time component, so nothing is converted between timezones.

    Args:
        date_str (str or date): Date to parse

    Returns:
        date: Parsed date, or None for blank input
    """
    if not date_str:
        return None
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str

    value = str(date_str).strip()
    try:
        # ISO strings with a time part: keep only the calendar date
        if 'T' in value:
            value = value.split('T')[0]
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError as e:
        logger.warning(f"Unparsable sheet date '{date_str}': {e}")
        return None


def format_date_display(date_str):
    """05/03/2024 style, as printed on the reports. Blank or invalid input gives ''"""
    parsed = parse_sheet_date(date_str)
    if not parsed:
        return ''
    return parsed.strftime('%d/%m/%Y')


def format_date_filename(date_str):
    """05-03-2024 style, safe for download filenames"""
    return format_date_display(date_str).replace('/', '-')
