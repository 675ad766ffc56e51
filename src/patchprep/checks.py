"""Advisory sanity checks for a patch series.

Each check looks at the commits in `base...head` and returns zero or more
`Advisory` findings. Findings never stop the run; only a failing git
command does.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from patchprep.git.runner import GitRunner

logger = logging.getLogger("patchprep.checks")

SPACE_AFTER_REDIRECT = re.compile(r"^\+.*> .*")


@dataclass(frozen=True)
class Advisory:
    """A non-fatal finding reported as a warning."""
    title: str
    detail: str = ""


def check_whitespace(runner: GitRunner, base: str, head: str) -> list[Advisory]:
    """Whitespace errors as reported by `git diff --check`."""
    # --check exits non-zero when it finds problems
    result = runner.run("diff", "--check", f"{base}...{head}", check=False)
    if result.stdout.strip():
        return [Advisory("Whitespace errors", result.stdout.rstrip())]
    return []


def _identities(runner: GitRunner, fmt: str, base: str, head: str) -> list[str]:
    seen: list[str] = []
    for email in runner.run("log", f"--format={fmt}", f"{base}...{head}").lines:
        if email.lower() not in (s.lower() for s in seen):
            seen.append(email)
    return seen


def check_identities(
    runner: GitRunner, base: str, head: str, email: str
) -> list[Advisory]:
    """Every commit should be authored and committed by `email` (any case)."""
    advisories = []
    for label, fmt in (("Authors", "%ae"), ("Committers", "%ce")):
        found = _identities(runner, fmt, base, head)
        if found and [f.lower() for f in found] != [email.lower()]:
            advisories.append(Advisory(f"{label}: {', '.join(found)}"))
    return advisories


def check_test_redirects(
    runner: GitRunner, base: str, head: str, test_dir: str = "t"
) -> list[Advisory]:
    """Added test lines with a space after '>' (`>file` is the house style)."""
    diff = runner.run("diff", f"{base}..{head}", "--", test_dir).stdout
    offending = [
        line for line in diff.splitlines()
        if not line.startswith("+++") and SPACE_AFTER_REDIRECT.match(line)
    ]
    if offending:
        return [Advisory("Spaces after '>' detected!", "\n".join(offending))]
    return []


def check_commit_message_ascii(runner: GitRunner, base: str, head: str) -> list[Advisory]:
    messages = runner.run("log", "--pretty=format:%B", f"{base}...{head}").stdout
    non_ascii = "".join(ch for ch in messages if ord(ch) > 127)
    if non_ascii:
        return [
            Advisory(
                "Non ASCII characters in commit message detected!",
                f"---{non_ascii}---",
            )
        ]
    return []


def run_checks(
    runner: GitRunner,
    base: str,
    head: str,
    email: str,
    test_dir: str = "t",
    on_advisory: Callable[[Advisory], None] | None = None,
) -> list[Advisory]:
    """Run every check and collect the findings."""
    advisories: list[Advisory] = []
    advisories += check_whitespace(runner, base, head)
    if email:
        advisories += check_identities(runner, base, head, email)
    advisories += check_test_redirects(runner, base, head, test_dir)
    advisories += check_commit_message_ascii(runner, base, head)

    for advisory in advisories:
        logger.debug("advisory: %s", advisory.title)
        if on_advisory:
            on_advisory(advisory)
    return advisories
