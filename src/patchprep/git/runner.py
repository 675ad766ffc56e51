"""Command-execution abstraction for git.

Every git call in patchprep goes through `GitRunner.run`, which returns a
`CommandResult` instead of raising on a non-zero exit. Callers that treat a
failure as fatal pass `check=True` and get a `GitCommandError`; callers that
tolerate failure (blame on a vanished file, an empty grep) inspect the
result themselves.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from patchprep.exceptions import GitCommandError, RepositoryError

logger = logging.getLogger("patchprep.git")


@dataclass
class CommandResult:
    """Outcome of one git invocation."""
    args: list[str]
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def lines(self) -> list[str]:
        """Non-empty stdout lines."""
        return [line for line in self.stdout.splitlines() if line.strip()]


@dataclass
class GitRunner:
    """Runs git subcommands inside a repository."""
    root: Path = field(default_factory=Path.cwd)
    timeout: float | None = None

    def run(
        self,
        *args: str,
        check: bool = True,
        input: str | None = None,
    ) -> CommandResult:
        """Run `git <args>` and capture its output.

        With `check=True` a non-zero exit or a timeout raises GitCommandError;
        otherwise both come back as a failed result.
        """
        cmd = ["git", "--no-pager", *args]
        logger.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.root,
                input=input,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise RepositoryError("git executable not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            message = f"timed out after {self.timeout}s"
            logger.debug("%s %s", " ".join(cmd), message)
            if check:
                raise GitCommandError(cmd, -1, message) from e
            return CommandResult(args=cmd, stderr=message, returncode=-1)

        result = CommandResult(
            args=cmd,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )
        if not result.ok:
            logger.debug("exit status %d: %s", result.returncode, result.stderr.strip())
            if check:
                raise GitCommandError(cmd, result.returncode, result.stderr)
        return result

    def output(self, *args: str) -> str:
        """Run a command that must succeed and return its stripped stdout."""
        return self.run(*args).stdout.strip()

    def rev_parse(self, rev: str) -> str:
        return self.output("rev-parse", rev)

    def config_value(self, key: str) -> str:
        """Read a git config value, empty string when unset."""
        return self.run("config", key, check=False).stdout.strip()
