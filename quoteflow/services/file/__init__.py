"""File services (parsing uploads, exporting stored records)."""

from quoteflow.services.file.export import export_records, file_extension_for, media_type_for
from quoteflow.services.file.parsing import (
    DocumentParser,
    NormalizedDocument,
)

__all__ = [
    # Parsing
    "DocumentParser",
    "NormalizedDocument",
    # Export
    "export_records",
    "file_extension_for",
    "media_type_for",
]
