import dataclasses
import logging
import os
from typing import Iterable, List, Optional

from column_registry import Column, ColumnRegistry
from csv_bridge import ensure_csv_source, parse_csv, read_csv_file, to_csv, write_export
from default_table_initializer import DefaultTableInitializer
from edit_session import EditSessionManager
from import_loader import ImportLoader, ImportState
from pagination import Paginator
from row_store import RowStore
from table_errors import ImportInProgressError
from view_deriver import DerivedView, Query, SortSpec, derive

logger = logging.getLogger("rowdesk.engine")


class TableEngine:
    """Single owner of the table state: rows, columns, query and edit session.

    Every command is a synchronous step. The displayed page is re-derived from
    scratch on demand and cached until the next state change.
    """

    def __init__(
        self,
        columns: Optional[Iterable[Column]] = None,
        rows: Optional[Iterable[dict]] = None,
        export_dir: Optional[str] = None,
    ):
        self.columns = ColumnRegistry(columns)
        self.rows = RowStore(rows)
        self.edits = EditSessionManager(self.rows, self.columns)
        self.export_dir = export_dir

        self._query = Query()
        self._revision = 0
        self._view_cache: Optional[tuple] = None
        self._import: Optional[ImportLoader] = None

    @classmethod
    def with_defaults(cls, export_dir: Optional[str] = None) -> "TableEngine":
        init = DefaultTableInitializer()
        return cls(init.create_columns(), init.create_rows(), export_dir=export_dir)

    # ---------- queries ----------
    @property
    def query(self) -> Query:
        return self._query

    @property
    def edit_mode(self) -> bool:
        return self.edits.edit_mode_enabled

    def view(self) -> DerivedView:
        if self._view_cache is not None and self._view_cache[0] == self._revision:
            return self._view_cache[1]
        view = derive(self.rows.all(), self.columns.list_columns(), self._query)
        self._view_cache = (self._revision, view)
        return view

    def list_columns(self) -> List[Column]:
        return self.columns.list_columns()

    def visible_columns(self) -> List[Column]:
        return self.columns.visible_columns()

    def all_rows(self) -> List[dict]:
        return self.rows.all()

    def get_row(self, row_id: str) -> Optional[dict]:
        return self.rows.get(row_id)

    def is_editing(self, row_id: str) -> bool:
        return self.edits.is_editing(row_id)

    # ---------- search / sort / page ----------
    def search(self, text: str) -> None:
        self._set_query(search_text=text or "", page_index=0)

    def sort(self, column_id: str) -> Optional[SortSpec]:
        col = self.columns.get(column_id)
        if col is None or not col.sortable:
            logger.debug("sort ignored column %r", column_id)
            return self._query.sort
        current = self._query.sort
        if current is not None and current.column_id == column_id:
            spec = current.toggled()
        else:
            spec = SortSpec(column_id, "asc")
        self._set_query(sort=spec)
        return spec

    def set_page(self, page_index: int) -> int:
        paginator = self._paginator()
        paginator.set_page(page_index)
        return self._apply_page(paginator)

    def next_page(self) -> int:
        paginator = self._paginator()
        paginator.next_page()
        return self._apply_page(paginator)

    def prev_page(self) -> int:
        paginator = self._paginator()
        paginator.prev_page()
        return self._apply_page(paginator)

    # ---------- editing ----------
    def set_edit_mode(self, enabled: bool) -> None:
        self.edits.set_edit_mode(enabled)
        self._touch()

    def toggle_edit_mode(self) -> bool:
        self.set_edit_mode(not self.edit_mode)
        return self.edit_mode

    def begin_edit(self, row_id: str) -> bool:
        started = self.edits.begin_edit(row_id)
        self._touch()
        return started

    def stage_edit(self, row_id: str, column_id: str, value) -> bool:
        return self.edits.stage(row_id, column_id, value)

    def commit_edit(self, row_id: str, fields: Optional[dict] = None) -> bool:
        committed = self.edits.commit(row_id, fields)
        if committed:
            self._touch()
            # the edited row may have left the filtered set
            self._clamp_page()
        return committed

    def cancel_edit(self, row_id: str) -> bool:
        cancelled = self.edits.cancel(row_id)
        self._touch()
        return cancelled

    # ---------- rows ----------
    def add_row(self, row: dict) -> dict:
        added = self.rows.add(row)
        self._touch()
        return added

    def delete_row(self, row_id: str) -> bool:
        deleted = self.rows.delete(row_id)
        if deleted:
            self.edits.forget_missing_rows()
            self._touch()
            self._clamp_page()
        return deleted

    # ---------- columns ----------
    def toggle_column_visibility(self, column_id: str) -> bool:
        toggled = self.columns.toggle_visibility(column_id)
        self._touch()
        return toggled

    def add_column(self, label: str, column_type: str = "text") -> Column:
        col = self.columns.add_column(label, column_type)
        self._touch()
        return col

    def reorder_columns(self, from_id: str, to_id: str) -> bool:
        moved = self.columns.reorder_columns(from_id, to_id)
        self._touch()
        return moved

    # ---------- import / export ----------
    def import_csv(self, text: str) -> int:
        rows = parse_csv(text, self.columns.list_columns())
        self._replace_rows(rows)
        return len(rows)

    def import_csv_file(self, path: str) -> int:
        text = read_csv_file(path)
        return self.import_csv(text)

    def start_import_file(self, path: str) -> ImportState:
        if self._import is not None:
            raise ImportInProgressError()
        ensure_csv_source(path)
        columns = self.columns.list_columns()

        def load():
            return parse_csv(read_csv_file(path), columns)

        self._import = ImportLoader(load, source=os.path.basename(path))
        return self._import.start()

    def poll_import(self, timeout: Optional[float] = 0) -> Optional[ImportState]:
        """Apply a finished background import; None while none is ready."""
        if self._import is None:
            return None
        if not self._import.join(timeout):
            return None
        state = self._import.state
        self._import = None
        if state.loaded:
            self._replace_rows(state.rows)
        return state

    def export_csv(self) -> str:
        return to_csv(self.rows.all(), self.columns.list_columns())

    def export_csv_file(self, directory: Optional[str] = None) -> str:
        directory = directory or self.export_dir or os.getcwd()
        return write_export(self.export_csv(), directory)

    # ---------- snapshots ----------
    def snapshot(self) -> dict:
        return {
            "columns": [col.to_dict() for col in self.columns.list_columns()],
            "rows": self.rows.all(),
        }

    def restore(self, snapshot: dict) -> None:
        columns = [Column.from_dict(item) for item in snapshot.get("columns", [])]
        rows = list(snapshot.get("rows", []))
        registry = ColumnRegistry(columns)
        store = RowStore(rows)
        self.columns.set_columns(registry.list_columns())
        self.rows.set_all(store.all())
        self.edits.set_edit_mode(False)
        self._query = Query()
        self._touch()

    # ---------- internals ----------
    def _replace_rows(self, rows: List[dict]) -> None:
        self.rows.set_all(rows)
        self.edits.forget_missing_rows()
        self._query = dataclasses.replace(self._query, page_index=0)
        self._touch()
        logger.info("Replaced dataset with %d rows", len(rows))

    def _set_query(self, **changes) -> None:
        self._query = dataclasses.replace(self._query, **changes)
        self._touch()

    def _paginator(self) -> Paginator:
        return Paginator(
            self.view().total_filtered_count,
            page_size=self._query.page_size,
            page_index=self._query.page_index,
        )

    def _apply_page(self, paginator: Paginator) -> int:
        if paginator.page_index != self._query.page_index:
            self._set_query(page_index=paginator.page_index)
        return paginator.page_index

    def _clamp_page(self) -> None:
        self._apply_page(self._paginator())

    def _touch(self) -> None:
        self._revision += 1
