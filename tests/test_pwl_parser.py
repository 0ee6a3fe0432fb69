"""Regression tests for PWL header/column/format detection."""

from __future__ import annotations

import io
import sys
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from wavpwl.errors import ConfigurationError, ErrorKind, PwlFormatError, PwlIOError, StructuralError
from wavpwl.pwl_parser import is_header_line, parse_lines, parse_pwl, resolve_column


def test_header_detection() -> None:
    assert is_header_line("time out")
    assert is_header_line("time v(in) v(out)")
    assert not is_header_line("0.0 0.0")
    assert not is_header_line("0.0, 0.0")
    assert not is_header_line("time")
    # comma-bearing tokens never count
    assert not is_header_line("time,out")
    # numeric-looking names are not recognised as a header
    assert not is_header_line("time 5")
    assert not is_header_line("1e-3 -2.5E+1 inf")
    # underscores are not numbers here, unlike float()
    assert is_header_line("time 1_000")


def test_column_resolution_with_header() -> None:
    header = "time mid out"
    assert resolve_column(header, None).index == 2
    assert resolve_column(header, None).name == "out"
    assert resolve_column(header, "mid").index == 1
    assert resolve_column(header, "0").index == 0
    assert resolve_column(header, "2").columns == ("time", "mid", "out")


def test_header_without_out_falls_back_to_time() -> None:
    buf = io.StringIO()
    with redirect_stdout(buf):
        sel = resolve_column("time v1 v2", None)
    assert sel.index == 0
    assert sel.name == "time"
    printed = buf.getvalue()
    assert "[1] v1" in printed
    assert "[2] v2" in printed


def test_unknown_column_lists_available() -> None:
    with pytest.raises(ConfigurationError) as err:
        resolve_column("time mid out", "nope")
    assert "nope" in str(err.value)
    assert "time, mid, out" in str(err.value)
    assert err.value.kind is ErrorKind.CONFIGURATION


def test_header_index_out_of_range() -> None:
    with pytest.raises(ConfigurationError):
        resolve_column("time out", "7")


def test_headerless_column_rules() -> None:
    assert resolve_column(None, None).index == 1
    assert resolve_column(None, "3").index == 3
    with pytest.raises(ConfigurationError) as err:
        resolve_column(None, "abc")
    assert "abc" in str(err.value)
    assert "No header" in str(err.value)


def test_comma_rows_with_comments_and_blanks() -> None:
    lines = [
        "0.0, 0.0",
        "* generated by hand",
        "",
        "; halfway",
        "   0.5,1.0  ",
        "1.0 ,0.0",
    ]
    series, sel = parse_lines(lines)
    assert sel.index == 1
    assert not sel.has_header
    assert list(series) == [(0.0, 0.0), (0.5, 1.0), (1.0, 0.0)]


def test_comment_first_line_is_read_as_header() -> None:
    assert is_header_line("* generated by hand")

    buf = io.StringIO()
    with redirect_stdout(buf):
        series, sel = parse_lines(["* generated by hand", "0 1", "1 0"])
    assert sel.has_header
    assert sel.index == 0
    assert sel.name == "*"
    assert "[1] generated" in buf.getvalue()
    assert list(series) == [(0.0, 0.0), (1.0, 1.0)]


def test_non_finite_values_are_format_errors() -> None:
    for bad in ("inf", "-inf", "nan", "Infinity"):
        with pytest.raises(PwlFormatError) as err:
            parse_lines(["0.0,0.0", f"{bad},1.0"])
        assert "Line 2" in str(err.value)

        with pytest.raises(PwlFormatError):
            parse_lines(["0.0 0.0", f"1.0 {bad}"])


def test_underscore_digits_rejected_in_rows() -> None:
    with pytest.raises(PwlFormatError) as err:
        parse_lines(["0,1_000"])
    assert "1_000" in str(err.value)

    with pytest.raises(PwlFormatError):
        parse_lines(["0 0", "1_0 1"])


def test_header_with_whitespace_rows() -> None:
    lines = [
        "time mid out",
        "0.0 0.1 0.2",
        "1e-3 0.3 0.4",
    ]
    series, sel = parse_lines(lines)
    assert sel.index == 2
    assert list(series) == [(0.0, 0.2), (0.001, 0.4)]

    series, _ = parse_lines(lines, "mid")
    assert list(series) == [(0.0, 0.1), (0.001, 0.3)]


def test_mixed_delimiters_index_each_row_separately() -> None:
    lines = ["0 1 2", "1,3,4"]
    series, _ = parse_lines(lines, "2")
    assert list(series) == [(0.0, 2.0), (1.0, 4.0)]


def test_short_row_names_its_column_count() -> None:
    with pytest.raises(PwlFormatError) as err:
        parse_lines(["0.0 1.0", "1.0"], "1")
    assert "1 columns" in str(err.value)

    with pytest.raises(PwlFormatError) as err:
        parse_lines(["0.0, 1.0"], "3")
    assert "2 columns" in str(err.value)


def test_bad_number_aborts_whole_file() -> None:
    with pytest.raises(PwlFormatError) as err:
        parse_lines(["0.0, 0.0", "0.5, oops", "1.0, 0.0"])
    assert "Line 2" in str(err.value)
    assert err.value.kind is ErrorKind.FORMAT


def test_header_line_that_is_only_comma_data_is_not_skipped() -> None:
    with pytest.raises(PwlFormatError):
        parse_lines(["time,out", "0,1"])


def test_structural_errors() -> None:
    with pytest.raises(StructuralError) as err:
        parse_lines([])
    assert "Empty" in str(err.value)

    with pytest.raises(StructuralError) as err:
        parse_lines(["time out", "* nothing here", ""])
    assert "No valid samples" in str(err.value)


def test_parse_pwl_reads_file() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "in.txt"
        path.write_text("time out\n0 0\n0.5 1\n1 0\n", encoding="utf-8")
        series, sel = parse_pwl(path)
        assert sel.name == "out"
        assert len(series) == 3
        assert series.duration == 1.0

        with pytest.raises(StructuralError):
            empty = Path(tmp) / "empty.txt"
            empty.write_text("", encoding="utf-8")
            parse_pwl(empty)

        with pytest.raises(PwlIOError):
            parse_pwl(Path(tmp) / "missing.txt")

        bad = Path(tmp) / "latin1.txt"
        bad.write_bytes(b"0,0\n\xff\xfe,1\n")
        with pytest.raises(PwlFormatError) as err:
            parse_pwl(bad)
        assert "UTF-8" in str(err.value)


if __name__ == "__main__":
    test_header_detection()
    test_column_resolution_with_header()
    test_header_without_out_falls_back_to_time()
    test_unknown_column_lists_available()
    test_header_index_out_of_range()
    test_headerless_column_rules()
    test_comma_rows_with_comments_and_blanks()
    test_comment_first_line_is_read_as_header()
    test_non_finite_values_are_format_errors()
    test_underscore_digits_rejected_in_rows()
    test_header_with_whitespace_rows()
    test_mixed_delimiters_index_each_row_separately()
    test_short_row_names_its_column_count()
    test_bad_number_aborts_whole_file()
    test_header_line_that_is_only_comma_data_is_not_skipped()
    test_structural_errors()
    test_parse_pwl_reads_file()
    print("tests/test_pwl_parser.py: ALL TESTS PASSED")
