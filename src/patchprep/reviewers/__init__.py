"""Reviewer suggestion from blame ownership."""

from patchprep.reviewers.ranker import (
    RankedReviewerList,
    ReviewerCandidate,
    ReviewerRanker,
    rank_authors,
)

__all__ = ["RankedReviewerList", "ReviewerCandidate", "ReviewerRanker", "rank_authors"]
