"""Custom exceptions for patchprep."""

from __future__ import annotations


class PatchPrepError(Exception):
    """Base exception for all patchprep errors."""


class ConfigError(PatchPrepError):
    """Configuration-related errors."""


class RepositoryError(PatchPrepError):
    """Raised when the working directory is not usable as a Git repository."""


class GitCommandError(PatchPrepError):
    """Raised when a git invocation fails unexpectedly."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        message = f"'{' '.join(self.args_list)}' failed with exit status {returncode}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)
