import sys

import pandas as pd

from cell_coercion import format_cell_value
from config_paths import load_config
from default_table_initializer import DefaultTableInitializer
from logging_config import setup_logging
from table_engine import TableEngine
from table_errors import TableError

try:
    from _version import __version__
except ImportError:
    __version__ = "0.0.0"


USAGE = (
    "rowdesk - tabular data editor engine\n\n"
    "Usage:\n"
    "  rowdesk [path.csv] [--search TEXT] [--sort COL[:desc]] [--page N]\n"
    "          [--hide COL] [--export DIR]\n"
    "  rowdesk -v\n"
)

_VALUE_FLAGS = {"--search", "--sort", "--page", "--hide", "--export"}


def _parse_args(args: list[str]) -> dict:
    opts = {"path": None, "search": "", "sort": None, "page": 1, "hide": [], "export": None}
    idx = 0
    while idx < len(args):
        arg = args[idx]
        if arg in _VALUE_FLAGS:
            if idx + 1 >= len(args):
                raise ValueError(f"{arg} requires a value")
            value = args[idx + 1]
            idx += 2
            if arg == "--search":
                opts["search"] = value
            elif arg == "--sort":
                column, _, direction = value.partition(":")
                direction = direction or "asc"
                if direction not in ("asc", "desc"):
                    raise ValueError(f"Unknown sort direction '{direction}'")
                opts["sort"] = (column, direction)
            elif arg == "--page":
                try:
                    opts["page"] = int(value)
                except ValueError:
                    raise ValueError(f"--page expects a number, got '{value}'") from None
            elif arg == "--hide":
                opts["hide"].append(value)
            elif arg == "--export":
                opts["export"] = value
            continue
        if arg.startswith("-"):
            raise ValueError(f"Unknown option '{arg}'")
        if opts["path"] is not None:
            raise ValueError("Only one input file is supported")
        opts["path"] = arg
        idx += 1
    return opts


def render_page(engine: TableEngine) -> str:
    view = engine.view()
    columns = engine.visible_columns()
    records = [[format_cell_value(row.get(col.id)) for col in columns] for row in view.page_rows]
    frame = pd.DataFrame(records, columns=[col.label for col in columns])
    if frame.empty:
        body = "(no rows)"
    else:
        body = frame.to_string(index=False)
    footer = (
        f"Page {engine.query.page_index + 1} of {view.total_pages}"
        f" ({view.total_filtered_count} rows)"
    )
    return f"{body}\n{footer}"


def _build_engine(opts: dict, cfg: dict) -> TableEngine:
    if opts["path"] or not cfg["SEED_DEMO_DATA"]:
        columns = DefaultTableInitializer().create_columns()
        engine = TableEngine(columns, export_dir=cfg["EXPORT_DIR"])
    else:
        engine = TableEngine.with_defaults(export_dir=cfg["EXPORT_DIR"])

    if opts["path"]:
        engine.import_csv_file(opts["path"])

    for column_id in opts["hide"]:
        col = engine.columns.get(column_id)
        if col is not None and col.visible:
            engine.toggle_column_visibility(column_id)

    if opts["search"]:
        engine.search(opts["search"])

    if opts["sort"]:
        column_id, direction = opts["sort"]
        spec = engine.sort(column_id)
        if spec is not None and spec.column_id == column_id and spec.direction != direction:
            engine.sort(column_id)

    engine.set_page(opts["page"] - 1)
    return engine


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)

    if "-v" in args or "-V" in args:
        print(__version__)
        return 0

    if "-h" in args or "--help" in args:
        print(USAGE)
        return 0

    cfg = load_config()
    setup_logging(cfg["LOG_LEVEL"], cfg["LOG_FILE"])

    try:
        opts = _parse_args(args)
    except ValueError as exc:
        print(f"{exc}\n\n{USAGE}", file=sys.stderr)
        return 2

    try:
        engine = _build_engine(opts, cfg)
        print(render_page(engine))
        if opts["export"]:
            path = engine.export_csv_file(opts["export"])
            print(f"Exported {len(engine.rows)} rows to {path}")
    except TableError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Load failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
