"""Reviewer suggestion based on blame ownership of the touched lines.

For every hunk of a series that deletes or modifies existing code, blame
the pre-image range at the base revision and count the lines each author
owns. Authors who committed anywhere in the repository within the recent
window get a large additive boost so that active people come first. The
current user is never suggested.

Order among equal scores follows Python's stable sort over the counts in
first-seen blame order. It is not part of the contract.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from patchprep.config import (
    DEFAULT_RECENT_BOOST,
    DEFAULT_RECENT_WINDOW_DAYS,
    DEFAULT_TOP_N,
    PatchConfig,
)
from patchprep.git.blame import BlameRecord, blame_hunk
from patchprep.git.diff_parser import Hunk, get_git_diff, parse_diff, pre_image_hunks
from patchprep.git.runner import GitRunner

logger = logging.getLogger("patchprep.reviewers")


@dataclass(frozen=True)
class ReviewerCandidate:
    """One ranked author."""
    email: str
    line_count: int
    score: int
    recent: bool = False


@dataclass
class RankedReviewerList:
    """Top reviewers in descending score order."""
    candidates: list[ReviewerCandidate] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[ReviewerCandidate]:
        return iter(self.candidates)

    @property
    def emails(self) -> list[str]:
        return [c.email for c in self.candidates]

    def cc_flags(self) -> list[str]:
        return [f"--cc={email}" for email in self.emails]

    def format(self) -> str:
        """Space-joined `--cc=<email>` flags for a send-email command line."""
        return " ".join(self.cc_flags())


def count_lines(records: Iterable[BlameRecord]) -> Counter[str]:
    """Aggregate blamed lines per author email."""
    return Counter(r.author_email for r in records)


def rank_authors(
    line_counts: Counter[str] | dict[str, int],
    recent: set[str],
    excluded_email: str = "",
    top_n: int = DEFAULT_TOP_N,
    recent_boost: int = DEFAULT_RECENT_BOOST,
) -> RankedReviewerList:
    """Weight, filter and sort author line counts.

    `recent_boost` must exceed any realistic line count so that a recent
    author always outranks a non-recent one with an equal or lower count.
    """
    excluded = excluded_email.strip().lower()
    recent_lower = {email.lower() for email in recent}

    candidates: list[ReviewerCandidate] = []
    for email, count in line_counts.items():
        if excluded and email.lower() == excluded:
            continue
        is_recent = email.lower() in recent_lower
        score = count + recent_boost if is_recent else count
        candidates.append(ReviewerCandidate(email, count, score, is_recent))

    candidates.sort(key=lambda c: c.score, reverse=True)
    return RankedReviewerList(candidates[:max(top_n, 0)])


class ReviewerRanker:
    """Suggest reviewers for the changes between two revisions."""

    def __init__(
        self,
        runner: GitRunner,
        excluded_email: str = "",
        recent_window_days: int = DEFAULT_RECENT_WINDOW_DAYS,
        top_n: int = DEFAULT_TOP_N,
        recent_boost: int = DEFAULT_RECENT_BOOST,
    ) -> None:
        self.runner = runner
        self.excluded_email = excluded_email
        self.recent_window_days = recent_window_days
        self.top_n = top_n
        self.recent_boost = recent_boost

    @classmethod
    def from_config(cls, runner: GitRunner, config: PatchConfig) -> ReviewerRanker:
        return cls(
            runner,
            excluded_email=config.email,
            recent_window_days=config.reviewers.recent_window_days,
            top_n=config.reviewers.top_n,
            recent_boost=config.reviewers.recent_boost,
        )

    def touched_hunks(self, base: str, head: str) -> list[Hunk]:
        """Pre-image ranges of deleted or modified files."""
        diff_text = get_git_diff(self.runner, base, head, diff_filter="DM")
        return pre_image_hunks(parse_diff(diff_text))

    def blame_records(self, base: str, hunks: list[Hunk]) -> list[BlameRecord]:
        records: list[BlameRecord] = []
        for hunk in hunks:
            blamed = blame_hunk(self.runner, base, hunk)
            if not blamed:
                logger.debug(
                    "no blame for %s:%s at %s", hunk.file, hunk.blame_range, base
                )
            records.extend(blamed)
        return records

    def recent_contributors(self) -> set[str]:
        """Authors with at least one commit inside the recent window."""
        result = self.runner.run(
            "log", "--all",
            f"--since={self.recent_window_days} days ago",
            "--pretty=format:%ae",
        )
        return set(result.lines)

    def rank(self, base: str, head: str = "HEAD") -> RankedReviewerList:
        """Rank candidate reviewers for `base..head`."""
        hunks = self.touched_hunks(base, head)
        if not hunks:
            logger.debug("no deleted or modified lines between %s and %s", base, head)
            return RankedReviewerList()

        counts = count_lines(self.blame_records(base, hunks))
        if not counts:
            return RankedReviewerList()

        ranked = rank_authors(
            counts,
            self.recent_contributors(),
            excluded_email=self.excluded_email,
            top_n=self.top_n,
            recent_boost=self.recent_boost,
        )
        logger.info("suggested %d reviewer(s) from %d hunk(s)", len(ranked), len(hunks))
        return ranked
