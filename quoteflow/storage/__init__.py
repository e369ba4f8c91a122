"""Storage layer: the QuoteStore protocol and its implementations."""

from quoteflow.storage.memory import InMemoryQuoteStore
from quoteflow.storage.models import (
    ColumnRecord,
    FileRecord,
    QuoteFilter,
    QuoteRecord,
    TemplateRecord,
)
from quoteflow.storage.protocol import QuoteStore
from quoteflow.storage.sql import SqlQuoteStore, get_store

__all__ = [
    "ColumnRecord",
    "FileRecord",
    "InMemoryQuoteStore",
    "QuoteFilter",
    "QuoteRecord",
    "QuoteStore",
    "SqlQuoteStore",
    "TemplateRecord",
    "get_store",
]
