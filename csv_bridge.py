"""CSV text ⇄ table rows.

Import reads every value as a string and maps headers onto row fields; export
writes the visible columns only, headed by their labels.
"""
import io
import logging
import os
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from cell_coercion import coerce_number, format_cell_value
from row_store import new_row_id
from table_errors import EmptyImportError, ImportFormatError, ParseError, ValidationError

logger = logging.getLogger("rowdesk.csv")

LOGICAL_FIELDS = ("name", "email", "age", "role", "department", "location")
NUMERIC_LOGICAL_FIELDS = {"age"}
EXPORT_PREFIX = "data-export-"


def ensure_csv_source(path: str) -> None:
    _, ext = os.path.splitext(str(path))
    if ext.lower() != ".csv":
        raise ImportFormatError(str(path))


def read_csv_file(path: str) -> str:
    ensure_csv_source(path)
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            return f.read()
    except UnicodeDecodeError as exc:
        raise ParseError(f"File is not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc


def read_frame(text: str) -> pd.DataFrame:
    """Read CSV text into a string frame headed by the literal header row.

    The header is read as an ordinary record so duplicate names survive
    unchanged and no column is ever promoted to the index. Every record must
    have exactly as many fields as the header.
    """
    try:
        raw = pd.read_csv(
            io.StringIO(text),
            header=None,
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        raise EmptyImportError() from None
    except pd.errors.ParserError as exc:
        message = str(exc).strip().splitlines()[0] if str(exc).strip() else "Malformed CSV"
        raise ParseError(message) from exc

    # short records come back padded with missing cells
    short = raw.isna().any(axis=1).to_numpy()
    if short.any():
        pos = int(short.argmax())
        found = int(raw.iloc[pos].notna().sum())
        raise ParseError(
            f"Too few fields: expected {raw.shape[1]} fields but parsed {found} (row {pos})"
        )

    headers = [str(h) for h in raw.iloc[0]] if len(raw) else []
    frame = raw.iloc[1:].reset_index(drop=True)
    frame.columns = headers
    return frame


def _header_targets(headers: Sequence[str], columns) -> List[Optional[str]]:
    """Row field for each header position, or None when it is an extra field."""
    known: Dict[str, str] = {}
    for col in columns or ():
        known.setdefault(col.id.lower(), col.id)
        known.setdefault(col.label.strip().lower(), col.id)

    targets: List[Optional[str]] = []
    claimed = set()
    for header in headers:
        key = str(header).strip().lower()
        target = key if key in LOGICAL_FIELDS else known.get(key)
        if target in claimed:
            target = None
        if target is not None:
            claimed.add(target)
        targets.append(target)
    return targets


def _column_types(columns) -> Dict[str, str]:
    return {col.id: col.type for col in columns or ()}


def _convert(field: str, raw: str, column_types: Dict[str, str]):
    if field in NUMERIC_LOGICAL_FIELDS:
        try:
            return coerce_number(raw)
        except ValidationError:
            return 0
    if column_types.get(field) == "number":
        try:
            return coerce_number(raw)
        except ValidationError:
            return raw
    return raw


def rows_from_frame(frame: pd.DataFrame, columns=None) -> List[dict]:
    headers = [str(h) for h in frame.columns]
    targets = _header_targets(headers, columns)
    column_types = _column_types(columns)

    rows: List[dict] = []
    for record in frame.itertuples(index=False, name=None):
        row = {"id": new_row_id("imported")}
        for field in LOGICAL_FIELDS:
            row[field] = 0 if field in NUMERIC_LOGICAL_FIELDS else ""
        for header, target, raw in zip(headers, targets, record):
            raw = "" if raw is None else str(raw)
            if target is not None:
                row[target] = _convert(target, raw, column_types)
            elif header == "id":
                # imported rows always get fresh ids
                continue
            else:
                # a repeated header keeps its first value
                row.setdefault(header, raw)
        rows.append(row)
    return rows


def parse_csv(text: str, columns=None) -> List[dict]:
    """Parse CSV text into new rows, all-or-nothing.

    Raises ParseError for malformed input and EmptyImportError when the text
    is well-formed but has no data rows.
    """
    frame = read_frame(text)
    if frame.empty:
        raise EmptyImportError()
    rows = rows_from_frame(frame, columns)
    logger.info("Parsed %d rows from CSV", len(rows))
    return rows


def to_csv(rows: Iterable[dict], columns) -> str:
    visible = [col for col in columns if col.visible]
    if not visible:
        return ""
    records = [[format_cell_value(row.get(col.id)) for col in visible] for row in rows]
    frame = pd.DataFrame(records, columns=[col.label for col in visible], dtype=object)
    return frame.to_csv(index=False, lineterminator="\n")


def export_filename(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{EXPORT_PREFIX}{moment.date().isoformat()}.csv"


def write_export(text: str, directory: str, moment: Optional[datetime] = None) -> str:
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, export_filename(moment))
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    logger.info("Exported CSV to %s", path)
    return path
