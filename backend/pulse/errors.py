"""
Exceptions raised by the analysis pipeline.
"""
from __future__ import annotations

from typing import Optional

from pulse.models import PostId


class PulseError(Exception):
    """Base class for all pipeline errors."""


class CorpusError(PulseError):
    """A corpus could not be loaded or is malformed."""


class ClassificationError(PulseError):
    """A single classify call failed or broke the classifier contract."""

    def __init__(self, message: str, post_id: Optional[PostId] = None):
        super().__init__(message)
        self.post_id = post_id


class AnalysisFailed(PulseError):
    """At least one candidate could not be classified, so the whole run failed."""

    def __init__(self, post_id: Optional[PostId], cause: Optional[BaseException] = None):
        super().__init__(f"Classification failed for post {post_id!r}")
        self.post_id = post_id
        self.cause = cause
