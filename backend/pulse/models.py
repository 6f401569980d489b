"""
File: pulse/models.py
Internal data structures shared by the selector, coordinator and aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, Union


PostId = Union[str, int]
SentimentLabel = Literal["positive", "negative", "neutral"]
SentimentFilter = Literal["all", "positive", "negative", "neutral"]

# Fixed order used for counts and charts
SENTIMENT_LABELS: Tuple[str, ...] = ("positive", "negative", "neutral")
SENTIMENT_FILTERS: Tuple[str, ...] = ("all",) + SENTIMENT_LABELS


@dataclass(frozen=True)
class Post:
    """A corpus item. Only ``id`` and ``text`` matter to the analysis pipeline."""

    id: PostId
    text: str

    # Display metadata, passed through untouched
    author: str = ""
    handle: str = ""
    avatar: str = ""
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class SentimentResult:
    post_id: PostId
    label: str  # "positive" | "negative" | "neutral"
    score: float  # [-1, 1], more positive = more positive sentiment


class RunStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NO_MATCHES = "no_matches"


@dataclass
class AnalysisRun:
    """One keyword submission and everything it produced.

    ``results`` is only populated once the run has succeeded; a failed or
    no-match run keeps it empty.
    """

    token: int
    keyword: str
    status: RunStatus = RunStatus.PENDING
    candidates: List[Post] = field(default_factory=list)
    results: Dict[PostId, SentimentResult] = field(default_factory=dict)
    failed_post_id: Optional[PostId] = None

    @property
    def analyzed_posts(self) -> List[Post]:
        return list(self.candidates) if self.status is RunStatus.SUCCEEDED else []


__all__ = [
    "AnalysisRun",
    "Post",
    "PostId",
    "RunStatus",
    "SENTIMENT_FILTERS",
    "SENTIMENT_LABELS",
    "SentimentFilter",
    "SentimentLabel",
    "SentimentResult",
]
