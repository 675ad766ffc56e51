"""Patch series preparation pipeline.

A linear sequence of git invocations: fetch upstream, tag the topic,
run the advisory checks, annotate and format the patches, fix up the
cover letter and suggest reviewers. Any unexpected git failure raises
GitCommandError and stops the run; everything else is collected as an
Advisory and reported at the end.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from patchprep.checks import Advisory, run_checks
from patchprep.config import PatchConfig
from patchprep.cover_letter import rewrite_cover_letter
from patchprep.documents import Section
from patchprep.exceptions import PatchPrepError, RepositoryError
from patchprep.git.runner import GitRunner
from patchprep.notes import build_note, interdiff_title, write_note
from patchprep.reviewers.ranker import RankedReviewerList, ReviewerRanker

logger = logging.getLogger("patchprep.preparer")

COVER_LETTER_SUFFIX = "0000-cover-letter.patch"


def tag_name(topic: str, version: int) -> str:
    return f"{topic}-v{version}"


@dataclass
class PrepareResult:
    """Everything a run produced."""
    topic: str
    version: int
    tag: str
    base_hash: str
    head_hash: str
    commit_count: int
    patch_dir: Path
    patch_files: list[Path] = field(default_factory=list)
    advisories: list[Advisory] = field(default_factory=list)
    reviewers: RankedReviewerList = field(default_factory=RankedReviewerList)
    send_command: str = ""

    @property
    def cover_letter(self) -> Path | None:
        for path in self.patch_files:
            if path.name.endswith(COVER_LETTER_SUFFIX):
                return path
        return None


def build_send_command(
    publish_remote: str,
    tag: str,
    patch_dir: Path,
    mailing_list: str,
    reviewers: RankedReviewerList,
) -> str:
    send = ["git", "send-email", f"{patch_dir}/*", f"--to={mailing_list}"]
    send += reviewers.cc_flags()
    send.append("--in-reply-to=")
    return f"git push {publish_remote} {tag} && " + " ".join(send)


class PatchSeriesPreparer:
    """Prepare the current branch for mailing-list submission."""

    def __init__(
        self,
        runner: GitRunner,
        config: PatchConfig | None = None,
        on_progress: Callable[[str], None] | None = None,
        on_advisory: Callable[[Advisory], None] | None = None,
    ) -> None:
        self.runner = runner
        self.config = config or PatchConfig()
        self.on_progress = on_progress
        self.on_advisory = on_advisory

    def _progress(self, message: str) -> None:
        logger.info(message)
        if self.on_progress:
            self.on_progress(message)

    def _advise(self, advisories: list[Advisory], advisory: Advisory) -> None:
        advisories.append(advisory)
        if self.on_advisory:
            self.on_advisory(advisory)

    def resolve_email(self) -> str:
        return self.config.email or self.runner.config_value("user.email")

    def resolve_previous_tag(self, name: str) -> str | None:
        """Hash of a previously published tag.

        The publish remote is authoritative; the local tag is the fallback.
        """
        remote = self.runner.run(
            "ls-remote", "--tags", self.config.publish_remote, check=False
        )
        if remote.ok:
            for line in remote.lines:
                sha, _, ref = line.partition("\t")
                if ref == f"refs/tags/{name}":
                    return sha
        local = self.runner.run("rev-parse", "--verify", "--quiet", f"refs/tags/{name}", check=False)
        if local.ok and local.stdout.strip():
            return local.stdout.strip()
        return None

    def reset_patch_dir(self, topic: str) -> Path:
        """Remove and recreate the output directory for `topic`."""
        patch_dir = self.config.patch_root / topic
        if patch_dir.exists():
            shutil.rmtree(patch_dir)
        patch_dir.mkdir(parents=True)
        return patch_dir

    def prepare(self, base_ref: str | None = None, version: int = 1) -> PrepareResult:
        """Run the whole pipeline and return what it produced."""
        if version < 1:
            raise PatchPrepError(f"Patch version must be at least 1, got {version}")

        config = self.config
        runner = self.runner
        advisories: list[Advisory] = []

        if config.fetch:
            self._progress(f"Fetching {config.upstream_remote}...")
            runner.run("fetch", config.upstream_remote)

        base_ref = base_ref or config.default_base
        base_hash = runner.rev_parse(base_ref)
        head_hash = runner.rev_parse("HEAD")
        topic = runner.output("rev-parse", "--abbrev-ref", "HEAD")
        if topic == "HEAD":
            raise RepositoryError("HEAD is detached; check out the topic branch first")

        email = self.resolve_email()
        if not email:
            self._advise(advisories, Advisory(
                "No email configured",
                "Set 'email' in the patchprep config or git's user.email.",
            ))

        prev_version = version - 1 if version >= 2 else None
        prev_hash = None
        if prev_version is not None:
            prev_tag = tag_name(topic, prev_version)
            prev_hash = self.resolve_previous_tag(prev_tag)
            if prev_hash is None:
                self._advise(advisories, Advisory(
                    f"Previous tag {prev_tag} not found", "The interdiff is omitted."
                ))

        tag = tag_name(topic, version)
        runner.run("tag", "--force", tag)

        self._progress("Checking commits...")
        for advisory in run_checks(runner, base_hash, head_hash, email, config.test_dir):
            self._advise(advisories, advisory)

        self._progress("Generating patches...")
        commit_count = int(runner.output("rev-list", "--count", f"{base_hash}...{head_hash}"))
        if commit_count == 0:
            raise PatchPrepError(f"No commits between {base_ref} and HEAD")

        interdiff = None
        if prev_hash is not None:
            interdiff = runner.run("diff", "-w", prev_hash, head_hash).stdout

        flags = [
            "--quiet",
            "--notes",
            "--find-renames",
            f"--reroll-count={version}",
            f"--base={base_hash}",
        ]
        if commit_count == 1:
            base_tags = " ".join(runner.run("tag", "--points-at", base_hash).lines)
            note = build_note(
                base_tags, config.web_url, head_hash, tag,
                version=version, interdiff=interdiff,
            )
            write_note(runner, note, head_hash)
        else:
            flags.append("--cover-letter")

        patch_dir = self.reset_patch_dir(topic)
        runner.run("format-patch", *flags, base_hash, "--output-directory", f"{patch_dir}/")
        patch_files = sorted(patch_dir.glob("*.patch"))

        result = PrepareResult(
            topic=topic,
            version=version,
            tag=tag,
            base_hash=base_hash,
            head_hash=head_hash,
            commit_count=commit_count,
            patch_dir=patch_dir,
            patch_files=patch_files,
            advisories=advisories,
        )

        if commit_count > 1 and result.cover_letter is not None:
            section = None
            if interdiff is not None and prev_version is not None:
                section = Section(title="## " + interdiff_title(prev_version, version))
                section.add_text(interdiff)
            description = runner.config_value(f"branch.{topic}.description")
            letter = rewrite_cover_letter(
                result.cover_letter,
                description=description,
                prev_version=prev_version,
                interdiff=section,
            )
            if letter.has_placeholders:
                self._advise(advisories, Advisory(
                    "Cover letter still has placeholders",
                    f"Set a description with 'git branch --edit-description' "
                    f"or edit {result.cover_letter.name} by hand.",
                ))

        self._progress("Looking for potential reviewers...")
        ranker = ReviewerRanker.from_config(runner, config)
        ranker.excluded_email = email
        result.reviewers = ranker.rank(base_hash, head_hash)

        result.send_command = build_send_command(
            config.publish_remote, tag, patch_dir, config.mailing_list, result.reviewers
        )
        return result


def open_in_editor(runner: GitRunner, path: Path) -> subprocess.Popen | None:
    """Open `path` with git's configured editor without waiting for it."""
    editor = (
        runner.config_value("core.editor")
        or os.environ.get("GIT_EDITOR")
        or os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
    )
    if not editor:
        logger.debug("no editor configured")
        return None
    return subprocess.Popen([*shlex.split(editor), str(path)])
