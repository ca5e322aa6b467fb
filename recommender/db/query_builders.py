"""Immutable SELECT builder for the collaborator queries.

Usage:
    query, params = (SelectQuery("users_liked_songs")
        .columns("song_id AS id")
        .where("user_id = $1", user_id)
        .where("event_time >= $1", since)
        .order_by("event_time DESC")
        .limit(50)
        .build())

    rows = await fetch_all(query, *params)

Notes:
    - Each where() numbers its placeholders from $1; they are renumbered
      across clauses at build time
    - The source may be a join expression ("a JOIN b ON ...")
"""

import re
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

_PLACEHOLDER = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class SelectQuery:
    """Fluent builder for SELECT queries. Each method returns a new instance."""

    source: str
    _columns: Tuple[str, ...] = ()
    _where_clauses: Tuple[str, ...] = ()
    _params: Tuple[Any, ...] = ()
    _order_by_clause: Optional[str] = None
    _limit_value: Optional[int] = None

    def columns(self, *cols: str) -> "SelectQuery":
        return replace(self, _columns=cols)

    def where(self, condition: str, *params: Any) -> "SelectQuery":
        """
        Add a WHERE condition (combined with AND).

        Example:
            .where("user_id = $1", 10001)
            .where("event_time >= $1", since)   # becomes $2
        """
        offset = len(self._params)
        renumbered = _PLACEHOLDER.sub(lambda m: f"${int(m.group(1)) + offset}", condition)
        return replace(
            self,
            _where_clauses=self._where_clauses + (renumbered,),
            _params=self._params + params,
        )

    def where_if(self, value: Any, condition: str) -> "SelectQuery":
        """Add ``condition`` with ``value`` as $1 only when value is not None."""
        if value is None:
            return self
        return self.where(condition, value)

    def order_by(self, order: str) -> "SelectQuery":
        return replace(self, _order_by_clause=order)

    def limit(self, n: Optional[int]) -> "SelectQuery":
        if n is not None and n < 0:
            raise ValueError(f"LIMIT must be non-negative, got {n}")
        return replace(self, _limit_value=n)

    def build(self) -> Tuple[str, Tuple[Any, ...]]:
        """Build the final SQL query and parameters."""
        columns = ", ".join(self._columns) if self._columns else "*"
        query_parts = [f"SELECT {columns} FROM {self.source}"]

        if self._where_clauses:
            where_str = " AND ".join(f"({clause})" for clause in self._where_clauses)
            query_parts.append(f"WHERE {where_str}")

        if self._order_by_clause:
            query_parts.append(f"ORDER BY {self._order_by_clause}")

        if self._limit_value is not None:
            query_parts.append(f"LIMIT {int(self._limit_value)}")

        return " ".join(query_parts), self._params
