"""
Concurrent classification of a candidate set with an all-or-nothing join.

One classify call is issued per candidate, all in flight at once. The join
waits until every call has finished or the first one has failed; on failure
the calls still running are cancelled and no partial result set is returned.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from pulse.core.classifier import Classifier, ClassifierOutput, validate_output
from pulse.errors import AnalysisFailed, ClassificationError
from pulse.models import Post, PostId, SentimentResult

logger = logging.getLogger(__name__)


def _coerce_output(output: Any) -> ClassifierOutput:
    if isinstance(output, Mapping):
        return validate_output(output.get("label"), output.get("score"))
    return validate_output(getattr(output, "label", None), getattr(output, "score", None))


async def classify_post(post: Post, classifier: Classifier) -> SentimentResult:
    """
    Classify one post.

    Raises:
        ClassificationError: Carrying the post id, whatever the classifier raised
    """
    try:
        output = _coerce_output(await classifier.classify(post.text))
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error("Error analyzing sentiment for post %r: %s", post.id, e)
        raise ClassificationError(str(e), post_id=post.id) from e

    return SentimentResult(post_id=post.id, label=output.label, score=output.score)


async def _cancel_all(tasks: List[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    # Let cancelled calls unwind so none of them outlives the run
    await asyncio.gather(*tasks, return_exceptions=True)


async def classify_candidates(
    candidates: Sequence[Post],
    classifier: Classifier,
) -> Dict[PostId, SentimentResult]:
    """
    Classify every candidate concurrently.

    Args:
        candidates: Non-empty, ordered candidate posts
        classifier: Any object with ``async classify(text)``

    Returns:
        Mapping of post id to result, in candidate order

    Raises:
        AnalysisFailed: If any single call failed. Carries the id of the
            failing post (the earliest in candidate order when several fail
            before the join notices).
    """
    if not candidates:
        return {}

    tasks: List[asyncio.Task] = [
        asyncio.ensure_future(classify_post(post, classifier)) for post in candidates
    ]

    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(tasks)
        raise

    # Nothing has been cancelled from here yet, so a cancelled task means the
    # classify call itself ended in CancelledError
    failed_post: Optional[Post] = None
    cause: Optional[BaseException] = None
    for post, task in zip(candidates, tasks):
        error: Optional[BaseException] = None
        if not task.done():
            continue
        if task.cancelled():
            error = asyncio.CancelledError()
            logger.error("Sentiment call for post %r was cancelled", post.id)
        else:
            error = task.exception()
        if error is not None and failed_post is None:
            failed_post = post
            cause = error.__cause__ or error

    if failed_post is not None:
        await _cancel_all(tasks)
        raise AnalysisFailed(failed_post.id, cause=cause)

    return {post.id: task.result() for post, task in zip(candidates, tasks)}
