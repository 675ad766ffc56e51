"""Thin wrappers around the git command line.

Everything here shells out to git and turns its text output into small
dataclasses; nothing writes to the repository except the runner calls the
preparer makes explicitly.
"""

from patchprep.git.blame import BlameRecord, parse_line_porcelain
from patchprep.git.diff_parser import DiffHunk, FileDiff, Hunk, parse_diff, pre_image_hunks
from patchprep.git.runner import CommandResult, GitRunner

__all__ = [
    "BlameRecord",
    "CommandResult",
    "DiffHunk",
    "FileDiff",
    "GitRunner",
    "Hunk",
    "parse_diff",
    "parse_line_porcelain",
    "pre_image_hunks",
]
