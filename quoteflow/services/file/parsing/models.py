"""Data models for parsed documents."""

from dataclasses import dataclass, field
from typing import Any

from quoteflow.enums import SourceKind

# Key under which free-text documents carry their full text
FREE_TEXT_KEY = "content"

Cell = Any
SpreadsheetRow = tuple[Cell, ...]
DelimitedRow = dict[str, str]


@dataclass(frozen=True)
class NormalizedDocument:
    """Uniform in-memory representation of a parsed file, tagged by source kind.

    Row shape depends on ``source_kind``:

    - spreadsheet: tuples of raw cell values, position indexed
    - delimited-text: dicts keyed by header name
    - free-text: a single ``{FREE_TEXT_KEY: text}`` pseudo-row
    """

    source_kind: SourceKind
    headers: tuple[str, ...]
    rows: tuple[Any, ...]
    metadata: dict = field(default_factory=dict, compare=False)

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def text(self) -> str:
        """Full text of a free-text document."""
        if self.source_kind != SourceKind.FREE_TEXT:
            raise TypeError(f"{self.source_kind} documents have no free text")
        if not self.rows:
            return ""
        return self.rows[0].get(FREE_TEXT_KEY, "")

    @classmethod
    def spreadsheet(cls, grid: list[list[Cell]], **metadata: Any) -> "NormalizedDocument":
        """Build a spreadsheet document from a raw cell grid."""
        # Import here to avoid circular import (mapping imports parsing models)
        from quoteflow.services.mapping.columns import index_to_column_letter

        width = max((len(row) for row in grid), default=0)
        return cls(
            source_kind=SourceKind.SPREADSHEET,
            headers=tuple(index_to_column_letter(i) for i in range(width)),
            rows=tuple(tuple(row) for row in grid),
            metadata=metadata,
        )

    @classmethod
    def delimited(
        cls, headers: list[str], records: list[DelimitedRow], **metadata: Any
    ) -> "NormalizedDocument":
        """Build a delimited-text document from header-keyed records."""
        return cls(
            source_kind=SourceKind.DELIMITED_TEXT,
            headers=tuple(headers),
            rows=tuple(dict(record) for record in records),
            metadata=metadata,
        )

    @classmethod
    def free_text(cls, text: str, **metadata: Any) -> "NormalizedDocument":
        """Build a single-row free-text document."""
        return cls(
            source_kind=SourceKind.FREE_TEXT,
            headers=(FREE_TEXT_KEY,),
            rows=({FREE_TEXT_KEY: text},),
            metadata=metadata,
        )
