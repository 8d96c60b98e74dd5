import logging
import re
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

from table_errors import DuplicateColumnError

logger = logging.getLogger("rowdesk.columns")

COLUMN_TYPES = ("text", "number", "email")

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class Column:
    id: str
    label: str
    visible: bool = True
    sortable: bool = True
    type: str = "text"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Column":
        column_type = data.get("type", "text")
        if column_type not in COLUMN_TYPES:
            raise ValueError(f"Unknown column type '{column_type}'")
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", data["id"])),
            visible=bool(data.get("visible", True)),
            sortable=bool(data.get("sortable", True)),
            type=column_type,
        )


def derive_column_id(label: str) -> str:
    return _WHITESPACE_RUN.sub("_", label.lower())


class ColumnRegistry:
    """Ordered column schema. List order drives display and reordering."""

    def __init__(self, columns: Optional[Iterable[Column]] = None):
        self._columns: List[Column] = []
        if columns is not None:
            self.set_columns(columns)

    def __len__(self):
        return len(self._columns)

    def __contains__(self, column_id):
        return self._index_of(column_id) is not None

    def list_columns(self) -> List[Column]:
        return list(self._columns)

    def visible_columns(self) -> List[Column]:
        return [col for col in self._columns if col.visible]

    def get(self, column_id: str) -> Optional[Column]:
        idx = self._index_of(column_id)
        return self._columns[idx] if idx is not None else None

    def set_columns(self, columns: Iterable[Column]) -> None:
        cleaned: List[Column] = []
        seen = set()
        for col in columns:
            if col.id in seen:
                raise DuplicateColumnError(col.id)
            seen.add(col.id)
            cleaned.append(col)
        self._columns = cleaned

    def toggle_visibility(self, column_id: str) -> bool:
        col = self.get(column_id)
        if col is None:
            logger.debug("toggle_visibility ignored unknown column %r", column_id)
            return False
        col.visible = not col.visible
        return True

    def add_column(self, label: str, column_type: str = "text") -> Column:
        if column_type not in COLUMN_TYPES:
            raise ValueError(
                f"Unknown column type '{column_type}' (use one of: {'/'.join(COLUMN_TYPES)})"
            )
        if not label or not label.strip():
            raise ValueError("Column name required")

        column_id = derive_column_id(label)
        if column_id in self:
            raise DuplicateColumnError(column_id)

        col = Column(id=column_id, label=label, type=column_type)
        self._columns.append(col)
        logger.info("Added column '%s' (%s)", column_id, column_type)
        return col

    def reorder_columns(self, from_id: str, to_id: str) -> bool:
        old_index = self._index_of(from_id)
        new_index = self._index_of(to_id)
        if old_index is None or new_index is None:
            logger.debug("reorder_columns ignored %r -> %r", from_id, to_id)
            return False
        if old_index == new_index:
            return False
        col = self._columns.pop(old_index)
        self._columns.insert(new_index, col)
        return True

    def _index_of(self, column_id) -> Optional[int]:
        for idx, col in enumerate(self._columns):
            if col.id == column_id:
                return idx
        return None
