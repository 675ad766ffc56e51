"""Shared test fixtures for patchprep."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from patchprep.exceptions import GitCommandError
from patchprep.git.runner import CommandResult, GitRunner

OLD_DATE = "2015-01-01T12:00:00"


class FakeRunner(GitRunner):
    """GitRunner returning canned output keyed by argument prefix.

    The longest matching prefix wins. A value may be a string (stdout of a
    successful command) or a full CommandResult. Unknown commands fail.
    """

    def __init__(self, responses: dict[tuple[str, ...], str | CommandResult] | None = None):
        super().__init__(root=Path("."))
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []
        self.inputs: list[str | None] = []

    def run(self, *args: str, check: bool = True, input: str | None = None) -> CommandResult:
        self.calls.append(args)
        self.inputs.append(input)
        best = None
        for prefix in self.responses:
            if args[:len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            result = CommandResult(list(args), stderr="unexpected command", returncode=1)
        else:
            value = self.responses[best]
            if isinstance(value, CommandResult):
                result = value
            else:
                result = CommandResult(list(args), stdout=value)
        if check and not result.ok:
            raise GitCommandError(list(args), result.returncode, result.stderr)
        return result

    def called(self, *prefix: str) -> bool:
        return any(call[:len(prefix)] == prefix for call in self.calls)


@pytest.fixture
def fake_runner() -> type[FakeRunner]:
    return FakeRunner


def porcelain(*entries: tuple[str, str]) -> str:
    """Build `git blame --line-porcelain` output from (sha, email) pairs."""
    lines = []
    for n, (sha, email) in enumerate(entries, 1):
        lines += [
            f"{sha} {n} {n} 1",
            "author Someone",
            f"author-mail <{email}>",
            "author-time 1420113600",
            "author-tz +0000",
            "committer Someone",
            f"committer-mail <{email}>",
            "committer-time 1420113600",
            "committer-tz +0000",
            "summary change",
            "filename a.c",
            f"\tline {n}",
        ]
    return "\n".join(lines) + "\n"


class GitRepo:
    """A scratch repository driven through the real git binary."""

    def __init__(self, root: Path):
        self.root = root
        self.runner = GitRunner(root)

    def git(self, *args: str, env: dict[str, str] | None = None) -> str:
        full_env = dict(os.environ)
        full_env.update(env or {})
        proc = subprocess.run(
            ["git", *args], cwd=self.root, env=full_env,
            capture_output=True, text=True, check=True,
        )
        return proc.stdout

    def write(self, name: str, content: str) -> None:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    def commit(
        self, message: str, email: str = "me@x.com", date: str | None = None
    ) -> str:
        env = {
            "GIT_AUTHOR_NAME": email.split("@")[0],
            "GIT_AUTHOR_EMAIL": email,
            "GIT_COMMITTER_NAME": email.split("@")[0],
            "GIT_COMMITTER_EMAIL": email,
        }
        if date:
            env["GIT_AUTHOR_DATE"] = date
            env["GIT_COMMITTER_DATE"] = date
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message, env=env)
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GitRepo:
    """An empty repository on branch `main` with user me@x.com."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    # Keep the developer's global config out of the tests
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("GIT_DIR", raising=False)

    root = tmp_path / "repo"
    root.mkdir()
    repo = GitRepo(root)
    repo.git("init", "-q")
    repo.git("symbolic-ref", "HEAD", "refs/heads/main")
    repo.git("config", "user.name", "Me")
    repo.git("config", "user.email", "me@x.com")
    repo.git("config", "commit.gpgsign", "false")
    repo.git("config", "core.editor", "true")
    return repo


@pytest.fixture
def blame_repo(git_repo: GitRepo) -> GitRepo:
    """`a.c` with four old lines by alice and two old lines by bob.

    Branch `topic` modifies a line owned by alice; the six-line file fits
    in a single hunk so blame covers every line.
    """
    git_repo.write("a.c", "a1\na2\na3\na4\n")
    git_repo.commit("alice writes a.c", email="alice@x.com", date=OLD_DATE)
    git_repo.write("a.c", "a1\na2\na3\na4\nb5\nb6\n")
    git_repo.commit("bob extends a.c", email="bob@x.com", date=OLD_DATE)
    git_repo.git("checkout", "-q", "-b", "topic")
    git_repo.write("a.c", "a1\na2\nchanged\na4\nb5\nb6\n")
    git_repo.commit("me changes a.c")
    return git_repo
