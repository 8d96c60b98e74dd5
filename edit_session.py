import logging
from typing import Dict, Optional, Set

from cell_coercion import coerce_cell_value
from table_errors import ValidationError

logger = logging.getLogger("rowdesk.edit")


class EditSessionManager:
    """Tracks rows open for inline editing and reconciles commits into the store.

    A row is either viewing or editing. Values typed into an editing row sit in
    a local buffer until ``commit``; ``cancel`` or turning edit mode off throws
    the buffer away.
    """

    def __init__(self, rows, columns):
        self.rows = rows
        self.columns = columns
        self.edit_mode_enabled = False
        self._editing: Set[str] = set()
        self._buffers: Dict[str, dict] = {}

    # ---------- queries ----------
    def is_editing(self, row_id: str) -> bool:
        return row_id in self._editing

    def editing_rows(self) -> Set[str]:
        return set(self._editing)

    def buffer(self, row_id: str) -> dict:
        return dict(self._buffers.get(row_id, {}))

    # ---------- transitions ----------
    def set_edit_mode(self, enabled: bool) -> None:
        self.edit_mode_enabled = bool(enabled)
        if not self.edit_mode_enabled:
            if self._editing:
                logger.debug("Edit mode off, discarding %d open edits", len(self._editing))
            self._editing.clear()
            self._buffers.clear()

    def begin_edit(self, row_id: str) -> bool:
        if not self.edit_mode_enabled:
            logger.debug("begin_edit(%r) ignored, edit mode is off", row_id)
            return False
        if row_id not in self.rows:
            logger.debug("begin_edit ignored unknown row %r", row_id)
            return False
        self._editing.add(row_id)
        self._buffers.setdefault(row_id, {})
        return True

    def stage(self, row_id: str, column_id: str, value) -> bool:
        if row_id not in self._editing:
            return False
        self._buffers[row_id][column_id] = value
        return True

    def commit(self, row_id: str, field_values: Optional[dict] = None) -> bool:
        if row_id not in self._editing:
            logger.debug("commit(%r) ignored, row is not being edited", row_id)
            return False

        pending = {**self._buffers.get(row_id, {}), **(field_values or {})}
        changes = {}
        for column_id, value in pending.items():
            col = self.columns.get(column_id)
            if col is not None:
                try:
                    value = coerce_cell_value(col.type, value)
                except ValidationError as exc:
                    # keep the previously committed value
                    logger.debug("Reverted %s on row %s: %s", column_id, row_id, exc)
                    continue
            changes[column_id] = value

        self.rows.update(row_id, changes)
        self._finish(row_id)
        return True

    def cancel(self, row_id: str) -> bool:
        if row_id not in self._editing:
            return False
        self._finish(row_id)
        return True

    def forget_missing_rows(self) -> None:
        """Drop edit state for rows that are no longer in the store."""
        for row_id in list(self._editing):
            if row_id not in self.rows:
                self._finish(row_id)

    def _finish(self, row_id: str) -> None:
        self._editing.discard(row_id)
        self._buffers.pop(row_id, None)
