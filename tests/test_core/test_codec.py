from __future__ import annotations

from pathlib import Path

import pytest

from cpkeeper.core.codec import (
    decode,
    encode,
    read_classpath_file,
    write_classpath_file,
)
from cpkeeper.exceptions import ClasspathFormatError, FileOperationError


@pytest.mark.unit
class TestEncode:
    """Tests for encode()."""

    def test_joins_with_separator(self) -> None:
        """Test entries are joined with no trailing separator or newline."""
        data = encode(["/r/a.jar", "/r/b.jar"], separator=":")

        assert data == b"/r/a.jar:/r/b.jar"

    def test_empty_list_encodes_to_empty_bytes(self) -> None:
        """Test an empty list encodes to empty bytes."""
        assert encode([], separator=":") == b""

    def test_single_entry(self) -> None:
        """Test a single entry has no separator."""
        assert encode(["lib/a.jar"], separator=";") == b"lib/a.jar"

    def test_rejects_empty_entry(self) -> None:
        """Test an empty entry cannot be written."""
        with pytest.raises(ClasspathFormatError) as exc_info:
            encode(["/r/a.jar", ""], separator=":")

        assert exc_info.value.position == 1

    def test_rejects_entry_containing_separator(self) -> None:
        """Test an entry that would split on decode is refused."""
        with pytest.raises(ClasspathFormatError, match="separator"):
            encode(["/r/a.jar:/r/b.jar"], separator=":")

    def test_non_ascii_paths_are_utf8(self) -> None:
        """Test non-ASCII paths are written as UTF-8."""
        data = encode(["/r/café.jar"], separator=":")

        assert data == "/r/café.jar".encode("utf-8")


@pytest.mark.unit
class TestDecode:
    """Tests for decode()."""

    def test_splits_on_separator(self) -> None:
        """Test decoding splits on the separator."""
        assert decode(b"/r/a.jar:/r/b.jar", separator=":") == ["/r/a.jar", "/r/b.jar"]

    def test_accepts_text(self) -> None:
        """Test decoding accepts str as well as bytes."""
        assert decode("a.jar;b.jar", separator=";") == ["a.jar", "b.jar"]

    def test_empty_data_is_empty_classpath(self) -> None:
        """Test an empty file stands for an empty classpath."""
        assert decode(b"", separator=":") == []

    @pytest.mark.parametrize(
        "data, position",
        [
            (b"/r/a.jar:", 1),
            (b":/r/a.jar", 0),
            (b"/r/a.jar::/r/b.jar", 1),
        ],
        ids=["trailing", "leading", "doubled"],
    )
    def test_empty_element_is_an_error(self, data: bytes, position: int) -> None:
        """Test empty elements are reported rather than skipped."""
        with pytest.raises(ClasspathFormatError) as exc_info:
            decode(data, separator=":")

        assert exc_info.value.position == position

    def test_invalid_utf8_is_an_error(self) -> None:
        """Test invalid UTF-8 raises ClasspathFormatError."""
        with pytest.raises(ClasspathFormatError, match="not valid text"):
            decode(b"\xff\xfe", separator=":")

    def test_preserves_order(self) -> None:
        """Test entry order is kept exactly, including duplicates."""
        data = b"c.jar:a.jar:b.jar:a.jar"

        assert decode(data, separator=":") == ["c.jar", "a.jar", "b.jar", "a.jar"]

    @pytest.mark.parametrize(
        "paths",
        [
            ["/r/a.jar"],
            ["/r/a.jar", "/r/b.jar", "/r/c.jar"],
            ["relative/a.jar", "../up/b.jar", "with space/c.jar"],
        ],
    )
    def test_round_trip(self, paths: list) -> None:
        """Test decode(encode(paths)) returns the same list."""
        assert decode(encode(paths, separator=":"), separator=":") == paths


@pytest.mark.unit
class TestClasspathFiles:
    """Tests for reading and writing classpath files."""

    def test_write_then_read(self, tmp_path: Path) -> None:
        """Test a written file reads back the same entries."""
        target = tmp_path / "cp.txt"

        written = write_classpath_file(target, ["/r/a.jar", "/r/b.jar"], separator=":")

        assert written == target
        assert target.read_bytes() == b"/r/a.jar:/r/b.jar"
        assert read_classpath_file(target, separator=":") == ["/r/a.jar", "/r/b.jar"]

    def test_write_creates_parent_directories(self, tmp_path: Path) -> None:
        """Test writing creates missing parent directories."""
        target = tmp_path / "build" / "deps" / "cp.txt"

        write_classpath_file(target, ["a.jar"], separator=":")

        assert target.read_bytes() == b"a.jar"

    def test_write_replaces_existing_contents(self, tmp_path: Path) -> None:
        """Test writing replaces the previous classpath."""
        target = tmp_path / "cp.txt"
        target.write_bytes(b"old.jar:older.jar")

        write_classpath_file(target, ["new.jar"], separator=":")

        assert target.read_bytes() == b"new.jar"

    def test_failed_encode_leaves_file_untouched(self, tmp_path: Path) -> None:
        """Test nothing is written when an entry cannot be encoded."""
        target = tmp_path / "cp.txt"
        target.write_bytes(b"keep.jar")

        with pytest.raises(ClasspathFormatError):
            write_classpath_file(target, ["ok.jar", ""], separator=":")

        assert target.read_bytes() == b"keep.jar"
        assert [p.name for p in tmp_path.iterdir()] == ["cp.txt"]

    def test_write_empty_classpath(self, tmp_path: Path) -> None:
        """Test an empty classpath is written as an empty file."""
        target = tmp_path / "cp.txt"

        write_classpath_file(target, [], separator=":")

        assert target.read_bytes() == b""
        assert read_classpath_file(target, separator=":") == []

    def test_read_missing_file(self, tmp_path: Path) -> None:
        """Test reading a missing file raises FileOperationError."""
        with pytest.raises(FileOperationError, match="File not found"):
            read_classpath_file(tmp_path / "absent.txt")

    def test_read_malformed_file_reports_path(self, tmp_path: Path) -> None:
        """Test format errors name the offending file."""
        target = tmp_path / "cp.txt"
        target.write_bytes(b"a.jar::b.jar")

        with pytest.raises(ClasspathFormatError) as exc_info:
            read_classpath_file(target, separator=":")

        assert exc_info.value.file_path == str(target)
        assert exc_info.value.details["file"] == str(target)
        assert str(target) in str(exc_info.value)
