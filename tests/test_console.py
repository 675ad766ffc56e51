"""Tests for console output."""

from __future__ import annotations

import io
from pathlib import Path

from rich.console import Console as RichConsole

from patchprep.preparer import PrepareResult
from patchprep.reviewers.ranker import RankedReviewerList, ReviewerCandidate
from patchprep.ui.console import Console


def _recording_console() -> tuple[Console, io.StringIO]:
    out = io.StringIO()
    console = Console()
    console.console = RichConsole(file=out, width=200, highlight=False)
    return console, out


class TestConsoleMarkup:
    def test_reviewer_email_printed_literally(self):
        console, out = _recording_console()
        reviewers = RankedReviewerList([ReviewerCandidate("[bold]eve@x.com", 3, 3)])
        console.show_reviewers(reviewers)
        assert "[bold]eve@x.com" in out.getvalue()

    def test_result_fields_printed_literally(self):
        console, out = _recording_console()
        result = PrepareResult(
            topic="[bold]topic",
            version=1,
            tag="[bold]topic-v1",
            base_hash="a" * 40,
            head_hash="b" * 40,
            commit_count=1,
            patch_dir=Path("/tmp/[bold]topic"),
            send_command="git push origin topic-v1",
        )
        console.show_result(result)
        text = out.getvalue()
        assert "[bold]topic-v1" in text
        assert "/tmp/[bold]topic" in text
