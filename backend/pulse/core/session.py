"""
Run lifecycle and the shared "current run" state.

Each keyword submission gets a run token from a monotonically increasing
counter. Only the run holding the latest token may write terminal state;
a superseded run finishes quietly and leaves no trace.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from pulse.core.aggregator import average_score, count_by_sentiment, filter_by_label
from pulse.core.classifier import Classifier
from pulse.core.coordinator import classify_candidates
from pulse.core.selector import select_candidates
from pulse.errors import AnalysisFailed
from pulse.models import (
    SENTIMENT_FILTERS,
    AnalysisRun,
    Post,
    PostId,
    RunStatus,
    SentimentResult,
)
from pulse.sources.corpus import Corpus

logger = logging.getLogger(__name__)


@dataclass
class SessionView:
    """Everything the presentation layer needs from the current run."""

    status: RunStatus
    keyword: Optional[str]
    filter: str
    analyzed_posts: List[Post] = field(default_factory=list)
    results: Dict[PostId, SentimentResult] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=dict)
    displayed_posts: List[Post] = field(default_factory=list)
    average_score: float = 0.0
    failed_post_id: Optional[PostId] = None


class AnalysisSession:
    """Holds the current run and the sentiment filter for one consumer."""

    def __init__(self, corpus: Corpus, classifier: Classifier, reset_filter_on_run: bool = False):
        self.corpus = corpus
        self.classifier = classifier
        self.reset_filter_on_run = reset_filter_on_run

        self._tokens = itertools.count(1)
        self._run: Optional[AnalysisRun] = None
        self._filter = "all"
        self._background: Set[asyncio.Task] = set()

    @property
    def current_run(self) -> Optional[AnalysisRun]:
        return self._run

    @property
    def filter(self) -> str:
        return self._filter

    def set_filter(self, sentiment_filter: str) -> None:
        """Change the view filter. Never re-runs classification."""
        if sentiment_filter not in SENTIMENT_FILTERS:
            raise ValueError(f"Unknown sentiment filter {sentiment_filter!r}")
        self._filter = sentiment_filter

    def is_current(self, token: int) -> bool:
        return self._run is not None and self._run.token == token

    def begin(self, keyword: str) -> AnalysisRun:
        """Open a new run, superseding whatever run was current."""
        # Replacing the run record drops previous results and analyzed posts
        run = AnalysisRun(token=next(self._tokens), keyword=keyword)
        self._run = run
        if self.reset_filter_on_run:
            self._filter = "all"
        logger.info("Run %d started for keyword %r", run.token, keyword)
        return run

    def _settle(
        self,
        run: AnalysisRun,
        status: RunStatus,
        candidates: Optional[List[Post]] = None,
        results: Optional[Dict[PostId, SentimentResult]] = None,
        failed_post_id: Optional[PostId] = None,
    ) -> None:
        if not self.is_current(run.token):
            logger.debug("Run %d superseded, dropping %s outcome", run.token, status.value)
            return

        run.status = status
        run.candidates = list(candidates or [])
        run.results = dict(results or {})
        run.failed_post_id = failed_post_id
        logger.info("Run %d settled: %s", run.token, status.value)

    async def analyze(self, keyword: str) -> RunStatus:
        """
        Run select -> classify -> commit for one keyword submission.

        Returns:
            The outcome of this run. If a newer run started meanwhile the
            outcome is still returned but the shared state is left alone.
        """
        return await self.execute(self.begin(keyword))

    async def execute(self, run: AnalysisRun) -> RunStatus:
        """Select, classify and settle a run opened with ``begin``."""
        keyword = run.keyword
        try:
            candidates = select_candidates(keyword, self.corpus.list())
            if not candidates:
                logger.info("No posts matched keyword %r", keyword)
                self._settle(run, RunStatus.NO_MATCHES)
                return RunStatus.NO_MATCHES

            results = await classify_candidates(candidates, self.classifier)
        except AnalysisFailed as e:
            logger.error("Run %d failed: %s", run.token, e)
            self._settle(run, RunStatus.FAILED, failed_post_id=e.post_id)
            return RunStatus.FAILED
        except (asyncio.CancelledError, Exception):
            # Never leave the current run pending
            self._settle(run, RunStatus.FAILED)
            raise

        self._settle(run, RunStatus.SUCCEEDED, candidates=candidates, results=results)
        return RunStatus.SUCCEEDED

    def start(self, keyword: str) -> asyncio.Task:
        """Submit a keyword without waiting for the run to settle."""
        task = asyncio.ensure_future(self.execute(self.begin(keyword)))
        self._background.add(task)
        task.add_done_callback(self._background_done)
        return task

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Background run raised %s: %s", type(error).__name__, error)

    def snapshot(self) -> SessionView:
        run = self._run
        if run is None:
            return SessionView(
                status=RunStatus.IDLE,
                keyword=None,
                filter=self._filter,
                counts=count_by_sentiment({}),
            )

        posts = run.analyzed_posts
        results = dict(run.results)
        return SessionView(
            status=run.status,
            keyword=run.keyword,
            filter=self._filter,
            analyzed_posts=posts,
            results=results,
            counts=count_by_sentiment(results),
            displayed_posts=filter_by_label(posts, results, self._filter),
            average_score=average_score(results),
            failed_post_id=run.failed_post_id,
        )
