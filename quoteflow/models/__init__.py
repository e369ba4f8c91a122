"""Models package - re-exports all models for convenient imports."""

from quoteflow.models.column import ColumnDefinition
from quoteflow.models.quote import Quote
from quoteflow.models.template import Template
from quoteflow.models.uploaded_file import UploadedFile

__all__ = [
    "ColumnDefinition",
    "Quote",
    "Template",
    "UploadedFile",
]
