"""Aggregate analytics over stored quote records."""

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from quoteflow.enums import AggregateOperation, DatePeriod
from quoteflow.exceptions import InvalidNumber
from quoteflow.services.mapping.coercion import to_number

PERIOD_FORMATS = {
    DatePeriod.DAY: "%Y-%m-%d",
    DatePeriod.WEEK: "%Y-%W",
    DatePeriod.MONTH: "%Y-%m",
}


@dataclass(frozen=True)
class AggregateResult:
    result: float | int | None
    sample_size: int


def resolve_field(data: Mapping[str, Any], path: str) -> Any:
    """Look up a dotted field path such as "customer.name"; None if missing."""
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


def numeric_values(records: Iterable[Mapping[str, Any]], path: str) -> list[int | float]:
    """Numeric values of a field across records; non-numeric values are skipped."""
    values = []
    for record in records:
        value = resolve_field(record, path)
        if value is None:
            continue
        try:
            values.append(to_number(value))
        except InvalidNumber:
            continue
    return values


def aggregate(
    records: Iterable[Mapping[str, Any]],
    path: str,
    operation: AggregateOperation | str,
) -> AggregateResult:
    """
    Apply an aggregate operation to a field across records.

    Args:
        records: Quote data mappings
        path: Dotted field path
        operation: sum, average, min, max or count

    Returns:
        AggregateResult with the result and the number of numeric samples
    """
    op = AggregateOperation(operation)
    values = numeric_values(records, path)

    if op == AggregateOperation.SUM:
        result = sum(values)
    elif op == AggregateOperation.AVERAGE:
        result = sum(values) / len(values) if values else 0
    elif op == AggregateOperation.MIN:
        result = min(values) if values else None
    elif op == AggregateOperation.MAX:
        result = max(values) if values else None
    else:
        result = len(values)

    return AggregateResult(result=result, sample_size=len(values))


def field_distribution(
    records: Iterable[Mapping[str, Any]], path: str
) -> list[tuple[str, int]]:
    """Count distinct values of a field, most frequent first (ties by value)."""
    counts = Counter(
        str(value)
        for value in (resolve_field(record, path) for record in records)
        if value is not None
    )
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def bucket_by_date(
    timestamps: Iterable[datetime], period: DatePeriod | str = DatePeriod.DAY
) -> list[tuple[str, int]]:
    """Count timestamps per day, week or month bucket, in chronological order."""
    fmt = PERIOD_FORMATS[DatePeriod(period)]
    counts = Counter(ts.strftime(fmt) for ts in timestamps)
    return sorted(counts.items())
