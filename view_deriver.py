"""Filter → sort → paginate pipeline producing the displayed page of rows.

Everything here is a pure function of ``(rows, columns, query)``. Rows are
loaded into an object-dtype DataFrame whose index is each row's original
position, so the final page can be read back out of the input list.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from cell_coercion import coerce_number, format_cell_value, is_missing
from pagination import PAGE_SIZE, Paginator
from table_errors import ValidationError

SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class SortSpec:
    column_id: str
    direction: str = "asc"

    def __post_init__(self):
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction '{self.direction}'")

    def toggled(self) -> "SortSpec":
        return SortSpec(self.column_id, "desc" if self.direction == "asc" else "asc")


@dataclass(frozen=True)
class Query:
    search_text: str = ""
    sort: Optional[SortSpec] = None
    page_index: int = 0
    page_size: int = PAGE_SIZE


@dataclass
class DerivedView:
    page_rows: List[dict] = field(default_factory=list)
    total_filtered_count: int = 0
    total_pages: int = 1


def _frame(rows: Sequence[dict]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=["id"], dtype=object)
    return pd.DataFrame(list(rows), dtype=object)


def filter_positions(frame: pd.DataFrame, search_text: str) -> np.ndarray:
    """Positions of rows where any present value contains ``search_text``."""
    if not search_text or len(frame) == 0:
        return np.arange(len(frame))
    needle = search_text.lower()
    mask = np.zeros(len(frame), dtype=bool)
    for col in frame.columns:
        series = frame[col]
        present = series.notna().to_numpy()
        text = series.map(format_cell_value).str.lower()
        hits = text.str.contains(needle, regex=False).to_numpy(dtype=bool)
        mask |= present & hits
    return np.flatnonzero(mask)


def _numeric_key(value):
    if is_missing(value):
        return np.nan
    try:
        return coerce_number(value)
    except ValidationError:
        return np.nan


def _text_key(value):
    return np.nan if is_missing(value) else format_cell_value(value)


def sort_positions(
    frame: pd.DataFrame, positions: np.ndarray, sort: SortSpec, column_type: str
) -> np.ndarray:
    if sort.column_id not in frame.columns or len(positions) == 0:
        return positions
    values = frame[sort.column_id].iloc[positions]
    if column_type == "number":
        keys = values.map(_numeric_key).astype(float)
    else:
        keys = values.map(_text_key).astype(object)
    keys.index = positions
    ordered = keys.sort_values(
        ascending=sort.direction == "asc", kind="stable", na_position="last"
    )
    return ordered.index.to_numpy()


def derive(rows: Sequence[dict], columns, query: Query) -> DerivedView:
    frame = _frame(rows)
    positions = filter_positions(frame, query.search_text)

    if query.sort is not None:
        column_type = "text"
        for col in columns:
            if col.id == query.sort.column_id:
                column_type = col.type
                break
        positions = sort_positions(frame, positions, query.sort, column_type)

    total = len(positions)
    paginator = Paginator(total, page_size=query.page_size, page_index=query.page_index)
    page = positions[paginator.page_start:paginator.page_end]

    return DerivedView(
        page_rows=[dict(rows[int(pos)]) for pos in page],
        total_filtered_count=total,
        total_pages=paginator.page_count,
    )
