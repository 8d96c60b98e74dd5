import logging
import uuid
from typing import Dict, Iterable, Iterator, List, Optional

from table_errors import DuplicateRowError

logger = logging.getLogger("rowdesk.rows")


def new_row_id(prefix: str = "row") -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


class RowStore:
    """Canonical row collection, kept in insertion order and keyed by id."""

    def __init__(self, rows: Optional[Iterable[dict]] = None):
        self._rows: List[dict] = []
        self._index: Dict[str, int] = {}
        if rows is not None:
            self.set_all(rows)

    def __len__(self):
        return len(self._rows)

    def __iter__(self) -> Iterator[dict]:
        return iter(self.all())

    def __contains__(self, row_id):
        return row_id in self._index

    def all(self) -> List[dict]:
        return [dict(row) for row in self._rows]

    def ids(self) -> List[str]:
        return [row["id"] for row in self._rows]

    def get(self, row_id: str) -> Optional[dict]:
        idx = self._index.get(row_id)
        return dict(self._rows[idx]) if idx is not None else None

    def set_all(self, rows: Iterable[dict]) -> None:
        cleaned: List[dict] = []
        index: Dict[str, int] = {}
        for row in rows:
            row = self._normalize(row)
            if row["id"] in index:
                raise DuplicateRowError(row["id"])
            index[row["id"]] = len(cleaned)
            cleaned.append(row)
        self._rows = cleaned
        self._index = index

    def add(self, row: dict) -> dict:
        row = self._normalize(row)
        if row["id"] in self._index:
            raise DuplicateRowError(row["id"])
        self._index[row["id"]] = len(self._rows)
        self._rows.append(row)
        return dict(row)

    def update(self, row_id: str, fields: dict) -> bool:
        idx = self._index.get(row_id)
        if idx is None:
            logger.debug("update ignored unknown row %r", row_id)
            return False
        # id is immutable
        changes = {k: v for k, v in fields.items() if k != "id"}
        self._rows[idx] = {**self._rows[idx], **changes}
        return True

    def delete(self, row_id: str) -> bool:
        idx = self._index.get(row_id)
        if idx is None:
            logger.debug("delete ignored unknown row %r", row_id)
            return False
        del self._rows[idx]
        self._index = {row["id"]: i for i, row in enumerate(self._rows)}
        return True

    def _normalize(self, row: dict) -> dict:
        row = dict(row)
        row_id = row.pop("id", None)
        row_id = new_row_id() if row_id is None or row_id == "" else str(row_id)
        return {"id": row_id, **row}
