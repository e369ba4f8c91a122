"""Conversion of raw extracted values to their declared semantic type.

Every function here is pure: the same input always yields the same output
or the same failure.
"""

import math
import re
from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import Any

from dateutil import parser as date_parser

from quoteflow.enums import DataType
from quoteflow.exceptions import InvalidDate, InvalidNumber

# Base-10 decimal with optional sign and at most one decimal point
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")

# Date parts missing from a free-form string are taken from here
_DATE_DEFAULT = datetime(1970, 1, 1)


def coerce(raw: Any, data_type: DataType | str) -> Any:
    """
    Convert a raw cell or text value to the declared data type.

    Args:
        raw: Value as found in the document (None when absent)
        data_type: Target type (string, number or date)

    Returns:
        The coerced value, or None when raw is None

    Raises:
        InvalidNumber: If a number was requested and raw is not a finite number
        InvalidDate: If a date was requested and raw is not a parseable date
        ValueError: If data_type is not a known type
    """
    if raw is None:
        return None

    kind = DataType(data_type)
    if kind == DataType.NUMBER:
        return to_number(raw)
    if kind == DataType.DATE:
        return to_iso_timestamp(raw)
    return to_text(raw)


def to_number(raw: Any) -> int | float:
    """Parse a finite number; integral values come back as int."""
    if isinstance(raw, bool):
        raise InvalidNumber(raw)
    if isinstance(raw, int):
        return raw

    if isinstance(raw, (float, Decimal)):
        value = float(raw)
    elif isinstance(raw, str):
        cleaned = raw.strip()
        if not _NUMBER_PATTERN.match(cleaned):
            raise InvalidNumber(raw)
        if "." not in cleaned:
            try:
                return int(cleaned)
            except ValueError:
                raise InvalidNumber(raw) from None
        value = float(cleaned)
    else:
        raise InvalidNumber(raw)

    if not math.isfinite(value):
        raise InvalidNumber(raw)
    if value.is_integer():
        return int(value)
    return value


def to_iso_timestamp(raw: Any) -> str:
    """Parse a calendar date/time and render it as an ISO-8601 UTC timestamp.

    Naive values are taken to be UTC. The output always has millisecond
    precision and a trailing ``Z`` so stored dates sort lexically.
    """
    if isinstance(raw, datetime):
        moment = raw
    elif isinstance(raw, date):
        moment = datetime.combine(raw, time.min)
    elif isinstance(raw, str) and raw.strip():
        try:
            moment = date_parser.parse(raw.strip(), default=_DATE_DEFAULT)
        except (ValueError, OverflowError):
            raise InvalidDate(raw) from None
    else:
        raise InvalidDate(raw)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    else:
        try:
            moment = moment.astimezone(UTC)
        except (ValueError, OverflowError):
            raise InvalidDate(raw) from None

    return moment.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def to_text(raw: Any) -> str:
    """Render a value in its canonical textual form. Never fails."""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (datetime, date)):
        return raw.isoformat()
    return str(raw)
