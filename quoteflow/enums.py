"""Enums for status and kind values used throughout the application."""

from enum import StrEnum


class SourceKind(StrEnum):
    """Shape of a parsed document, and of the documents a template expects."""

    SPREADSHEET = "spreadsheet"
    DELIMITED_TEXT = "delimited-text"
    FREE_TEXT = "free-text"


class DataType(StrEnum):
    """Semantic type a mapped field is coerced to."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class FileStatus(StrEnum):
    """Status of an uploaded file's mapping process."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ExportFormat(StrEnum):
    """File formats the export adapter can write."""

    SPREADSHEET = "spreadsheet"
    DELIMITED_TEXT = "delimited-text"


class AggregateOperation(StrEnum):
    """Operations supported by field analytics."""

    SUM = "sum"
    AVERAGE = "average"
    MIN = "min"
    MAX = "max"
    COUNT = "count"


class DatePeriod(StrEnum):
    """Bucket sizes for quote registration trends."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
