"""Unified diff parsing for staged changes.

Turns the output of ``git diff --cached`` into the lines a commit would add,
each tagged with its file path and its line number in the staged version of
the file.

Example input (``--unified=0``)::

    diff --git a/app/settings.py b/app/settings.py
    index 3b18e51..a9c2f4d 100644
    --- a/app/settings.py
    +++ b/app/settings.py
    @@ -12,0 +13,2 @@ DEBUG = False
    +timeout = 30
    +password = "hunter2"
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional


HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

# Extended header lines that may appear between "diff --git" and the first hunk
_EXTENDED_HEADERS = (
    "index ",
    "old mode ",
    "new mode ",
    "deleted file mode ",
    "new file mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
)


class DiffParseError(ValueError):
    """Raised when diff text is not a well-formed unified diff."""


@dataclass(frozen=True)
class StagedLine:
    """A line added by the staged changeset.

    Attributes:
        path: File path relative to the repository root.
        line_number: 1-based line number in the staged version of the file.
        content: Line text without the leading ``+`` and trailing newline.
    """
    path: str
    line_number: int
    content: str


_PATH_ESCAPES = {
    "a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92,
}
_OCTAL = re.compile(r"[0-7]{3}")


def unquote_path(raw: str) -> str:
    """Decode a path as git prints it, including C-style quoted paths.

    Raises:
        DiffParseError: On an unknown escape sequence.
    """
    # Plain "diff -u" output may append a tab and a timestamp
    raw = raw.split("\t", 1)[0]
    if not (len(raw) >= 2 and raw.startswith('"') and raw.endswith('"')):
        return raw

    inner = raw[1:-1]
    out = bytearray()
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue
        esc = inner[i + 1:i + 2]
        if esc in _PATH_ESCAPES:
            out.append(_PATH_ESCAPES[esc])
            i += 2
        elif _OCTAL.fullmatch(inner[i + 1:i + 4]):
            out.append(int(inner[i + 1:i + 4], 8))
            i += 4
        else:
            raise DiffParseError(f"Bad escape in quoted path: {raw}")
    return out.decode("utf-8", "replace")


def _strip_prefix(path: str, prefix: str) -> str:
    return path[len(prefix):] if path.startswith(prefix) else path


class _Hunk:
    __slots__ = ("old_remaining", "new_remaining", "next_line")

    def __init__(self, old_count: int, new_start: int, new_count: int):
        self.old_remaining = old_count
        self.new_remaining = new_count
        self.next_line = new_start

    @property
    def done(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0


def parse_unified_diff(text: str) -> list[StagedLine]:
    """Parse unified diff text into the lines it adds.

    Deleted files and binary files contribute nothing. Hunk line counts are
    enforced, so a truncated or corrupted diff is rejected rather than
    partially scanned.

    Args:
        text: Unified diff, as produced by ``git diff``.

    Returns:
        Added lines in diff order.

    Raises:
        DiffParseError: If the text is not a well-formed unified diff.
    """
    added: list[StagedLine] = []
    path: Optional[str] = None
    in_file = False
    have_target = False
    hunk: Optional[_Hunk] = None

    # Only "\n" ends a diff line. Staged content may hold \r, \f, U+2028 and
    # other characters that str.splitlines() would also split on.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    for number, line in enumerate(lines, start=1):
        if hunk is not None and not hunk.done:
            if line.startswith("\\"):
                # "\ No newline at end of file"
                continue
            if line.startswith("+"):
                if hunk.new_remaining <= 0:
                    raise DiffParseError(f"Line {number}: more added lines than the hunk declares")
                if path is None:
                    raise DiffParseError(f"Line {number}: added line in a deleted file")
                added.append(StagedLine(path, hunk.next_line, line[1:]))
                hunk.next_line += 1
                hunk.new_remaining -= 1
            elif line.startswith("-"):
                if hunk.old_remaining <= 0:
                    raise DiffParseError(f"Line {number}: more removed lines than the hunk declares")
                hunk.old_remaining -= 1
            elif line.startswith(" ") or line in ("", "\r"):
                if hunk.old_remaining <= 0 or hunk.new_remaining <= 0:
                    raise DiffParseError(f"Line {number}: more context lines than the hunk declares")
                hunk.next_line += 1
                hunk.old_remaining -= 1
                hunk.new_remaining -= 1
            else:
                raise DiffParseError(f"Line {number}: hunk ended early: {line[:80]!r}")
            continue

        # Headers of a diff saved with CRLF line endings
        line = line.rstrip("\r")
        if not line or line.startswith("\\"):
            continue

        if line.startswith("diff --git "):
            # The "+++" header names the file; until then nothing is attributed
            in_file = True
            have_target = False
            path = None
            hunk = None
            continue

        if line.startswith("--- "):
            in_file = True
            have_target = False
            path = None
            hunk = None
            continue

        if line.startswith("+++ "):
            if not in_file:
                raise DiffParseError(f"Line {number}: '+++' header without '---' header")
            target = unquote_path(line[4:])
            path = None if target == "/dev/null" else _strip_prefix(target, "b/")
            have_target = True
            hunk = None
            continue

        if in_file and line.startswith(_EXTENDED_HEADERS):
            continue

        if in_file and line.startswith("Binary files ") and line.endswith(" differ"):
            continue

        if line.startswith("@@"):
            if not have_target:
                raise DiffParseError(f"Line {number}: hunk before any file header")
            m = HUNK_HEADER.match(line)
            if m is None:
                raise DiffParseError(f"Line {number}: malformed hunk header: {line[:80]!r}")
            old_count = int(m.group(2)) if m.group(2) is not None else 1
            new_start = int(m.group(3))
            new_count = int(m.group(4)) if m.group(4) is not None else 1
            hunk = _Hunk(old_count, new_start, new_count)
            continue

        if line.startswith(("+", "-", " ")):
            raise DiffParseError(f"Line {number}: diff content outside of a hunk")

        if in_file:
            raise DiffParseError(f"Line {number}: unexpected line in diff: {line[:80]!r}")
        # Preamble before the first file (e.g. a mail header) is ignored

    if hunk is not None and not hunk.done:
        raise DiffParseError("Diff ended in the middle of a hunk")

    return added


def group_by_file(lines: Iterable[StagedLine]) -> dict[str, list[StagedLine]]:
    """Group added lines by path, preserving diff order."""
    grouped: dict[str, list[StagedLine]] = {}
    for line in lines:
        grouped.setdefault(line.path, []).append(line)
    return grouped
