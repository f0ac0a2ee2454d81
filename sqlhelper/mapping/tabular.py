# ==============================================
# TabularResult
# ==============================================
#
# PURPOSE:
#   Fully materialized query result: ordered column names and
#   one dict per row. Handed to callers of select() and consumed
#   by the row mapper.
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


@dataclass
class TabularResult:
    """Ordered columns plus rows as {column: value} dicts (None = SQL NULL)."""

    columns: Tuple[str, ...] = ()
    rows: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_cursor(cls, description: Optional[Sequence[Sequence[Any]]], records: Sequence[Sequence[Any]]) -> "TabularResult":
        """
        Build from a DB-API cursor.description and fetchall() output.

        A cursor without a description (no result set) gives an empty result.
        """
        if not description:
            return cls()
        columns = tuple(str(col[0]) for col in description)
        rows = [dict(zip(columns, record)) for record in records]
        return cls(columns=columns, rows=rows)

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.rows)

    def __getitem__(self, index: int) -> Dict[str, Any]:
        return self.rows[index]
