"""Git diff parser - extract file changes and hunk ranges from unified diffs.

Parses the output of `git diff` into per-file structures. The reviewer
ranker only needs the pre-image side of each hunk: the lines that existed
at the base revision and were touched by the series.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from patchprep.git.runner import GitRunner

HUNK_HEADER = re.compile(r"@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


@dataclass
class DiffHunk:
    """A single hunk from a unified diff."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int


@dataclass
class FileDiff:
    """Changes to a single file."""
    path: str
    status: str  # 'added', 'modified', 'deleted', 'renamed'
    old_path: str | None = None
    hunks: list[DiffHunk] = field(default_factory=list)

    @property
    def pre_image_path(self) -> str:
        """Path of the file at the base revision."""
        return self.old_path or self.path


@dataclass(frozen=True)
class Hunk:
    """Pre-image line range of a hunk: `line_count` lines from `start_line`."""
    file: str
    start_line: int
    line_count: int

    @property
    def blame_range(self) -> str:
        """The range in `git blame -L` syntax."""
        return f"{self.start_line},+{self.line_count}"


def unquote_path(raw: str) -> str:
    """Undo git's path decoration in diff headers.

    Names containing a space end with a tab, and names with control
    characters, quotes or (under core.quotePath) non-ASCII bytes are
    C-quoted: `"a/caf\\303\\251.c"`.
    """
    raw = raw.rstrip("\t")
    if len(raw) < 2 or not (raw.startswith('"') and raw.endswith('"')):
        return raw
    escaped = raw[1:-1].encode("utf-8").decode("unicode_escape")
    return escaped.encode("latin-1").decode("utf-8", errors="replace")


def _strip_prefix(path: str, prefix: str) -> str | None:
    return path[len(prefix):] if path.startswith(prefix) else None


def parse_diff(diff_text: str) -> list[FileDiff]:
    """Parse unified diff text into structured FileDiff objects."""
    files: list[FileDiff] = []
    current_file: FileDiff | None = None
    in_hunks = False

    for line in diff_text.splitlines():
        # New file header
        if line.startswith("diff --git"):
            if current_file:
                files.append(current_file)
            parts = line.split(" b/")
            path = parts[-1] if len(parts) > 1 else ""
            current_file = FileDiff(path=path, status="modified")
            in_hunks = False
            continue

        if current_file is None:
            continue

        if not in_hunks:
            # Extended header lines, only valid before the first hunk
            if line.startswith("new file"):
                current_file.status = "added"
                continue
            if line.startswith("deleted file"):
                current_file.status = "deleted"
                continue
            if line.startswith("rename from "):
                current_file.old_path = unquote_path(line[len("rename from "):])
                current_file.status = "renamed"
                continue
            if line.startswith("--- "):
                old_path = _strip_prefix(unquote_path(line[4:]), "a/")
                if old_path is not None:
                    current_file.old_path = old_path
                continue
            if line.startswith("+++ "):
                new_path = _strip_prefix(unquote_path(line[4:]), "b/")
                if new_path is not None:
                    current_file.path = new_path
                elif current_file.old_path:
                    # Deleted file: "+++ /dev/null"
                    current_file.path = current_file.old_path
                continue

        if line.startswith("@@"):
            # Hunk header: @@ -old_start,old_count +new_start,new_count @@
            match = HUNK_HEADER.match(line)
            if match:
                current_file.hunks.append(DiffHunk(
                    old_start=int(match.group(1)),
                    old_count=int(match.group(2) or "1"),
                    new_start=int(match.group(3)),
                    new_count=int(match.group(4) or "1"),
                ))
                in_hunks = True

    if current_file:
        files.append(current_file)

    return files


def pre_image_hunks(file_diffs: list[FileDiff]) -> list[Hunk]:
    """Collect the base-revision line ranges touched by the diff.

    Added files and pure insertions (`-N,0`) have no pre-image lines and
    are skipped.
    """
    hunks: list[Hunk] = []
    for fd in file_diffs:
        if fd.status == "added":
            continue
        for dh in fd.hunks:
            if dh.old_count <= 0:
                continue
            hunks.append(Hunk(fd.pre_image_path, dh.old_start, dh.old_count))
    return hunks


def get_git_diff(
    runner: GitRunner,
    base: str,
    head: str = "HEAD",
    diff_filter: str | None = None,
) -> str:
    """Get the diff between two revisions (`base..head`)."""
    args = ["diff"]
    if diff_filter:
        args.append(f"--diff-filter={diff_filter}")
    args.append(f"{base}..{head}")
    return runner.run(*args).stdout
