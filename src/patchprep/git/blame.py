"""Parse `git blame --line-porcelain` output."""

from __future__ import annotations

import re
from dataclasses import dataclass

from patchprep.git.diff_parser import Hunk
from patchprep.git.runner import GitRunner

COMMIT_LINE = re.compile(r"^([0-9a-f]{40}|[0-9a-f]{64}) \d+ \d+(?: \d+)?$")

# -M/-C: follow moved and copied lines across files, -w: ignore whitespace
BLAME_FLAGS = ("--line-porcelain", "-M", "-C", "-w")


@dataclass(frozen=True)
class BlameRecord:
    """Attribution of a single line."""
    author_email: str
    commit_hash: str


def parse_line_porcelain(output: str) -> list[BlameRecord]:
    """Turn line-porcelain output into one BlameRecord per blamed line."""
    records: list[BlameRecord] = []
    commit: str | None = None
    email: str | None = None

    for line in output.splitlines():
        if line.startswith("\t"):
            # Content line closes the entry
            if commit is not None and email is not None:
                records.append(BlameRecord(author_email=email, commit_hash=commit))
            commit = None
            email = None
            continue

        match = COMMIT_LINE.match(line)
        if match:
            commit = match.group(1)
        elif line.startswith("author-mail "):
            email = line[len("author-mail "):].strip().strip("<>")

    return records


def blame_hunk(runner: GitRunner, revision: str, hunk: Hunk) -> list[BlameRecord]:
    """Blame the pre-image range of `hunk` at `revision`.

    Returns an empty list when git cannot blame the range, e.g. because
    the file did not exist at `revision` under that name.
    """
    result = runner.run(
        "blame", *BLAME_FLAGS, "-L", hunk.blame_range, revision, "--", hunk.file,
        check=False,
    )
    if not result.ok:
        return []
    return parse_line_porcelain(result.stdout)
