import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from column_registry import Column
from csv_bridge import (
    ensure_csv_source,
    export_filename,
    parse_csv,
    read_csv_file,
    to_csv,
    write_export,
)
from default_table_initializer import DefaultTableInitializer
from table_errors import EmptyImportError, ImportFormatError, ParseError


@pytest.fixture
def columns():
    return DefaultTableInitializer().create_columns()


def test_age_parse_failure_defaults_to_zero(columns):
    rows = parse_csv("name,age\nAnn,thirty\n", columns)
    assert len(rows) == 1
    assert rows[0]["name"] == "Ann"
    assert rows[0]["age"] == 0


def test_header_only_is_empty_import(columns):
    with pytest.raises(EmptyImportError):
        parse_csv("name,age\n", columns)


def test_blank_input_is_empty_import(columns):
    with pytest.raises(EmptyImportError):
        parse_csv("", columns)


def test_malformed_csv_raises_parse_error_with_message(columns):
    with pytest.raises(ParseError) as excinfo:
        parse_csv("name,age\nAnn,30\nBob,25,extra,fields\n", columns)
    assert excinfo.value.message
    assert "Expected" in excinfo.value.message


@pytest.mark.parametrize(
    "text",
    [
        "name,age\nAnn,30,x\n",
        "name,age\nAnn,30,x\nBob,25,y\n",
        "name,age\nAnn,30\nBob,25,y\n",
    ],
)
def test_records_longer_than_header_are_rejected(columns, text):
    with pytest.raises(ParseError):
        parse_csv(text, columns)


@pytest.mark.parametrize("text", ["name,age\nAnn\n", "name,age\nAnn,30\nBob\n"])
def test_records_shorter_than_header_are_rejected(columns, text):
    with pytest.raises(ParseError) as excinfo:
        parse_csv(text, columns)
    assert "Too few fields" in excinfo.value.message


def test_trailing_empty_field_is_not_short(columns):
    row = parse_csv("name,role\nAnn,\n", columns)[0]
    assert row["name"] == "Ann"
    assert row["role"] == ""


def test_repeated_extra_header_keeps_literal_text(columns):
    row = parse_csv("name,tag,tag\nAnn,a,b\n", columns)[0]
    assert row["tag"] == "a"
    assert "tag.1" not in row


def test_repeated_logical_header_does_not_overwrite(columns):
    row = parse_csv("age,age\n30,x\n", columns)[0]
    assert row["age"] == 30


def test_logical_fields_match_case_insensitively(columns):
    text = "NAME,Email,AGE,Role,Department,Location\nAnn,ann@x.io,30,Dev,Eng,Oslo\n"
    row = parse_csv(text, columns)[0]
    assert row["name"] == "Ann"
    assert row["email"] == "ann@x.io"
    assert row["age"] == 30
    assert row["role"] == "Dev"
    assert row["department"] == "Eng"
    assert row["location"] == "Oslo"
    assert "NAME" not in row


def test_missing_logical_fields_get_defaults(columns):
    row = parse_csv("name\nAnn\n", columns)[0]
    assert row["email"] == ""
    assert row["role"] == ""
    assert row["age"] == 0


def test_unknown_headers_become_extra_fields(columns):
    row = parse_csv("name,Favourite Colour\nAnn,teal\n", columns)[0]
    assert row["Favourite Colour"] == "teal"


def test_first_matching_header_wins(columns):
    row = parse_csv("name,Name\nAnn,Other\n", columns)[0]
    assert row["name"] == "Ann"
    assert row["Name"] == "Other"


def test_imported_rows_get_fresh_unique_ids(columns):
    rows = parse_csv("id,name\n7,Ann\n7,Bob\n", columns)
    ids = [row["id"] for row in rows]
    assert len(set(ids)) == 2
    assert all(i.startswith("imported-") for i in ids)


def test_registered_number_columns_are_parsed(columns):
    columns = columns + [Column("score", "Score", type="number")]
    rows = parse_csv("name,Score\nAnn,4.5\nBob,\n", columns)
    assert rows[0]["score"] == 4.5
    assert rows[1]["score"] == ""


def test_values_stay_text(columns):
    row = parse_csv("name,role\nNA,007\n", columns)[0]
    assert row["name"] == "NA"
    assert row["role"] == "007"


def test_export_uses_visible_columns_and_labels(columns):
    rows = [
        {"id": "1", "name": "Ann", "email": "a@x.io", "age": 30, "role": "Dev", "department": "Eng"},
        {"id": "2", "name": "Bob, Jr", "age": 0},
    ]
    text = to_csv(rows, columns)
    lines = text.splitlines()
    assert lines[0] == "Name,Email,Age,Role"
    assert lines[1] == "Ann,a@x.io,30,Dev"
    assert lines[2] == '"Bob, Jr",,0,'
    assert "Eng" not in text
    assert text.endswith("\n")


def test_export_follows_column_order():
    cols = [Column("b", "Bee"), Column("a", "Ay")]
    assert to_csv([{"id": "1", "a": "x", "b": "y"}], cols) == "Bee,Ay\ny,x\n"


def test_export_with_no_rows_writes_header(columns):
    assert to_csv([], columns) == "Name,Email,Age,Role\n"


def test_round_trip_keeps_visible_values_and_drops_hidden(columns):
    rows = DefaultTableInitializer().create_rows()
    reimported = parse_csv(to_csv(rows, columns), columns)

    for before, after in zip(rows, reimported):
        for col in columns:
            if col.visible:
                assert after[col.id] == before[col.id]
            else:
                assert after[col.id] == ""


def test_export_filename_uses_utc_date():
    moment = datetime(2024, 3, 5, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert export_filename(moment) == "data-export-2024-03-06.csv"
    assert export_filename(datetime(2024, 1, 2, 8, 0)) == "data-export-2024-01-02.csv"


def test_ensure_csv_source():
    ensure_csv_source("people.CSV")
    with pytest.raises(ImportFormatError):
        ensure_csv_source("people.xlsx")


def test_read_and_write_files(columns):
    with tempfile.TemporaryDirectory() as tmp:
        path = write_export("Name\nAnn\n", tmp, datetime(2024, 1, 2, tzinfo=timezone.utc))
        assert os.path.basename(path) == "data-export-2024-01-02.csv"
        assert read_csv_file(path) == "Name\nAnn\n"

        bad = os.path.join(tmp, "data.txt")
        with open(bad, "w", encoding="utf-8") as f:
            f.write("name\nAnn\n")
        with pytest.raises(ImportFormatError):
            read_csv_file(bad)


def test_non_utf8_file_is_a_parse_error():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "people.csv")
        with open(path, "wb") as f:
            f.write(b"name,age\n\xff\xfeAnn,30\n")
        with pytest.raises(ParseError) as excinfo:
            read_csv_file(path)
    assert "UTF-8" in excinfo.value.message
