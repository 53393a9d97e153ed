"""Idempotent marker-block edits on host project files.

A registration is a small block of text wrapped between two comment lines::

    // module-maker:begin Blog
    require_once __DIR__ . '/../modules/Blog/Routes/web.php';
    // module-maker:end Blog

Inserting is a no-op when the begin line is already present, and removal
deletes exactly the lines between (and including) the two markers, so
``insert`` then ``remove`` restores the original file. Marker lines are
matched as whole lines, so the marker ``Blog`` never matches ``BlogPost``.

``composer.json`` cannot carry comments, so :class:`JsonMapEdit` provides the
same apply/revert/is_applied contract for a single key of a nested JSON
object, where the key itself acts as the marker.

Every edit reads the entire file, computes the new content, and writes the
entire file back.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from module_maker.errors import GenerationError, RegistryFormatError, SentinelMissingError
from module_maker.utils import read_text, write_text

MARKER_TAG = "module-maker"

_BLANK_RUN_RE = re.compile(r"\r?\n(?:[ \t]*\r?\n){3,}")


@dataclass(frozen=True)
class CommentStyle:
    """Line-comment delimiters of the edited file's language."""

    open: str
    close: str = ""

    def wrap(self, text: str) -> str:
        if self.close:
            return f"{self.open} {text} {self.close}"
        return f"{self.open} {text}"


PHP_COMMENT = CommentStyle("//")
BLADE_COMMENT = CommentStyle("{{--", "--}}")


def begin_marker(marker: str, style: CommentStyle = PHP_COMMENT) -> str:
    return style.wrap(f"{MARKER_TAG}:begin {marker}")


def end_marker(marker: str, style: CommentStyle = PHP_COMMENT) -> str:
    return style.wrap(f"{MARKER_TAG}:end {marker}")


# ---------------------------------------------------------------------------
# Pure text operations
# ---------------------------------------------------------------------------


def _find_line(lines: list[str], text: str, start: int = 0) -> int:
    for index in range(start, len(lines)):
        if lines[index].strip() == text:
            return index
    return -1


def _newline(content: str) -> str:
    return "\r\n" if "\r\n" in content else "\n"


def collapse_blank_lines(content: str) -> str:
    """Collapse every run of three or more blank lines to a single blank line."""
    return _BLANK_RUN_RE.sub(lambda match: _newline(match.group(0)) * 2, content)


def has_block(content: str, marker: str, style: CommentStyle = PHP_COMMENT) -> bool:
    """Return ``True`` if *content* holds the begin line for *marker*."""
    return _find_line(content.splitlines(), begin_marker(marker, style)) >= 0


def insert_block(
    content: str,
    marker: str,
    body: list[str],
    style: CommentStyle = PHP_COMMENT,
    sentinel: str | None = None,
    indent: str | None = None,
) -> str:
    """Return *content* with the marked block added, or unchanged if present.

    Args:
        content: Current file content.
        marker: Unique marker for this registration.
        body: Lines placed between the begin and end markers.
        style: Comment delimiters for the marker lines.
        sentinel: When a line equal to this (ignoring surrounding
            whitespace) exists, the block goes directly before the first
            such line. Otherwise the block is appended after a blank line.
        indent: Prefix for every block line. Defaults to the sentinel
            line's indentation, or nothing when appending.
    """
    if has_block(content, marker, style):
        return content

    newline = _newline(content)
    lines = content.splitlines(keepends=True)
    position = _find_line(lines, sentinel) if sentinel else -1

    if position >= 0:
        sentinel_line = lines[position]
        prefix = indent if indent is not None else sentinel_line[: len(sentinel_line) - len(sentinel_line.lstrip())]
    else:
        prefix = indent or ""

    block = [prefix + begin_marker(marker, style)]
    block.extend(prefix + line if line else line for line in body)
    block.append(prefix + end_marker(marker, style))
    rendered = "".join(line + newline for line in block)

    if position >= 0:
        return "".join(lines[:position]) + rendered + "".join(lines[position:])

    if content and not content.endswith(("\n", "\r")):
        content += newline
    separator = newline if content else ""
    return content + separator + rendered


def remove_block(content: str, marker: str, style: CommentStyle = PHP_COMMENT) -> str:
    """Return *content* without the marked block.

    One blank line directly before the block is dropped when the block was
    followed by a blank line or the end of the file, so the blank line added
    by :func:`insert_block` goes away with it. Runs of three or more blank
    lines left anywhere in the file are then collapsed to one.
    """
    lines = content.splitlines(keepends=True)
    begin = _find_line(lines, begin_marker(marker, style))
    if begin < 0:
        return content
    end = _find_line(lines, end_marker(marker, style), begin + 1)
    if end < 0:
        return content

    del lines[begin : end + 1]

    previous_blank = begin > 0 and lines[begin - 1].strip() == ""
    next_blank = begin >= len(lines) or lines[begin].strip() == ""
    if previous_blank and next_blank:
        del lines[begin - 1]

    return collapse_blank_lines("".join(lines))


# ---------------------------------------------------------------------------
# File edits
# ---------------------------------------------------------------------------


def _read(path: Path) -> str:
    """Read a host registry file; undecodable text is a format error."""
    try:
        return read_text(path)
    except GenerationError as exc:
        if isinstance(exc.cause, UnicodeDecodeError):
            raise RegistryFormatError(path, "not valid UTF-8 text") from exc
        raise


@dataclass(frozen=True)
class MarkerBlockEdit:
    """One marker-delimited registration in a host text file."""

    path: Path
    marker: str
    body: tuple[str, ...]
    style: CommentStyle = PHP_COMMENT
    sentinel: str | None = None
    indent: str | None = None
    skeleton: str = ""
    require_sentinel: bool = False

    def is_applied(self) -> bool:
        if not self.path.is_file():
            return False
        return has_block(_read(self.path), self.marker, self.style)

    def apply(self) -> bool:
        """Insert the block. Returns ``False`` when it was already present.

        A missing target file is first created from :attr:`skeleton`.

        Raises:
            SentinelMissingError: :attr:`require_sentinel` is set and the
                existing file has no sentinel line. The file is unchanged.
        """
        if self.path.is_file():
            original = _read(self.path)
        else:
            original = self.skeleton
            write_text(self.path, original)

        if (
            self.require_sentinel
            and self.sentinel
            and not has_block(original, self.marker, self.style)
            and _find_line(original.splitlines(), self.sentinel) < 0
        ):
            raise SentinelMissingError(self.path, self.sentinel)

        updated = insert_block(
            original,
            self.marker,
            list(self.body),
            style=self.style,
            sentinel=self.sentinel,
            indent=self.indent,
        )
        if updated == original:
            return False
        write_text(self.path, updated)
        return True

    def revert(self) -> bool:
        """Remove the block. A missing file or block is a silent no-op."""
        if not self.path.is_file():
            return False
        original = _read(self.path)
        updated = remove_block(original, self.marker, self.style)
        if updated == original:
            return False
        write_text(self.path, updated)
        return True


def dump_json(data: Any) -> str:
    """Serialise the way composer writes ``composer.json``."""
    return json.dumps(data, indent=4, ensure_ascii=False) + "\n"


@dataclass(frozen=True)
class JsonMapEdit:
    """One key of a nested JSON object, e.g. ``autoload.psr-4`` in composer.json.

    The entry is added as the first line of the container and removed by
    deleting that line, so the rest of the file keeps its formatting. When
    the container is missing or written on a single line with entries, the
    whole file is serialised again instead.

    Removing the key leaves its (possibly empty) container in place.
    """

    path: Path
    keys: tuple[str, ...]
    key: str
    value: Any
    skeleton: dict[str, Any] = field(default_factory=dict)

    @property
    def entry(self) -> str:
        key = json.dumps(self.key, ensure_ascii=False)
        return f"{key}: {json.dumps(self.value, ensure_ascii=False)}"

    def _parse(self, raw: str) -> dict[str, Any]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RegistryFormatError(self.path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
        if not isinstance(data, dict):
            raise RegistryFormatError(self.path, "top-level value is not an object")
        return data

    def _container(self, data: dict[str, Any], create: bool) -> dict[str, Any] | None:
        node: Any = data
        for key in self.keys:
            if not isinstance(node, dict):
                return None
            if key not in node:
                if not create:
                    return None
                node[key] = {}
            node = node[key]
        return node if isinstance(node, dict) else None

    def _opening_line(self, lines: list[str]) -> int:
        """Index of the line opening the container, or -1."""
        index = -1
        for key in self.keys:
            prefix = json.dumps(key, ensure_ascii=False) + ":"
            index = next(
                (i for i in range(index + 1, len(lines)) if lines[i].strip().startswith(prefix)),
                -1,
            )
            if index < 0:
                return -1
        return index

    def is_applied(self) -> bool:
        if not self.path.is_file():
            return False
        container = self._container(self._parse(_read(self.path)), create=False)
        return container is not None and self.key in container

    def apply(self) -> bool:
        if not self.path.is_file():
            write_text(self.path, dump_json(self.skeleton))
        raw = _read(self.path)
        data = self._parse(raw)
        container = self._container(data, create=True)
        if container is None:
            raise RegistryFormatError(self.path, f"'{'.'.join(self.keys)}' is not an object")
        if self.key in container:
            return False
        had_entries = bool(container)
        container[self.key] = self.value

        updated = self._insert_line(raw, had_entries)
        if updated is None or not _matches(updated, data):
            updated = dump_json(data)
        write_text(self.path, updated)
        return True

    def revert(self) -> bool:
        if not self.path.is_file():
            return False
        raw = _read(self.path)
        data = self._parse(raw)
        container = self._container(data, create=False)
        if container is None or self.key not in container:
            return False
        del container[self.key]

        updated = self._remove_line(raw)
        if updated is None or not _matches(updated, data):
            updated = dump_json(data)
        write_text(self.path, updated)
        return True

    def _insert_line(self, raw: str, had_entries: bool) -> str | None:
        newline = _newline(raw)
        lines = raw.splitlines(keepends=True)
        opening = self._opening_line(lines)
        if opening < 0:
            return None
        line = lines[opening].rstrip("\r\n")
        outer = line[: len(line) - len(line.lstrip())]
        stripped = line.rstrip()

        if stripped.endswith("{}") or stripped.endswith("{},"):
            # "psr-4": {} becomes a three-line object.
            head, _, tail = stripped.rpartition("{}")
            inner = outer + self._indent_unit(outer)
            lines[opening : opening + 1] = [
                head + "{" + newline,
                inner + self.entry + newline,
                outer + "}" + tail + newline,
            ]
            return "".join(lines)

        if not stripped.endswith("{"):
            return None
        if had_entries and opening + 1 < len(lines):
            following = lines[opening + 1]
            inner = following[: len(following) - len(following.lstrip())]
        else:
            inner = outer + self._indent_unit(outer)
        comma = "," if had_entries else ""
        lines.insert(opening + 1, inner + self.entry + comma + newline)
        return "".join(lines)

    def _remove_line(self, raw: str) -> str | None:
        lines = raw.splitlines(keepends=True)
        opening = self._opening_line(lines)
        if opening < 0 or not lines[opening].rstrip().endswith("{"):
            return None
        prefix = json.dumps(self.key, ensure_ascii=False) + ":"
        for index in range(opening + 1, len(lines)):
            stripped = lines[index].strip()
            if stripped.startswith("}"):
                return None
            if not stripped.startswith(prefix):
                continue
            if index == opening + 1 and index + 1 < len(lines) and lines[index + 1].strip().startswith("}"):
                # Sole entry: collapse back to "{}".
                closing = lines[index + 1].rstrip("\r\n").strip()
                head = lines[opening].rstrip("\r\n").rstrip()
                lines[opening : index + 2] = [head + "}" + closing[1:] + _newline(raw)]
                return "".join(lines)
            if not stripped.endswith(","):
                # Last entry: the one before it loses its comma.
                previous = lines[index - 1].rstrip("\r\n")
                if previous.rstrip().endswith(","):
                    ending = lines[index - 1][len(previous):]
                    lines[index - 1] = previous.rstrip()[:-1] + ending
            del lines[index]
            return "".join(lines)
        return None

    def _indent_unit(self, outer: str) -> str:
        depth = len(self.keys)
        if outer and len(outer) % depth == 0:
            return outer[: len(outer) // depth]
        return "    "


def _matches(text: str, data: dict[str, Any]) -> bool:
    try:
        return json.loads(text) == data
    except json.JSONDecodeError:
        return False
