"""
Read-only views over a settled, successful run.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Iterable, List, Sequence, Union

from pulse.models import SENTIMENT_LABELS, Post, SentimentResult

Results = Union[Mapping, Iterable[SentimentResult]]


def _iter_results(results: Results) -> Iterable[SentimentResult]:
    if isinstance(results, Mapping):
        return results.values()
    return results


def count_by_sentiment(results: Results) -> Dict[str, int]:
    """
    Count results per sentiment label.

    Every label is present, so the counts always sum to ``len(results)``.
    A label outside the closed set raises ``KeyError``.
    """
    counts = {label: 0 for label in SENTIMENT_LABELS}
    for result in _iter_results(results):
        counts[result.label] += 1
    return counts


def filter_by_label(
    posts: Sequence[Post],
    results: Mapping,
    sentiment_filter: str = "all",
) -> List[Post]:
    """
    Posts whose result carries ``sentiment_filter``, in their original order.

    ``"all"`` returns every post. Neither argument is modified.
    """
    if sentiment_filter == "all":
        return list(posts)

    matching_ids = {
        post_id for post_id, result in results.items() if result.label == sentiment_filter
    }
    return [post for post in posts if post.id in matching_ids]


def average_score(results: Results) -> float:
    """Mean sentiment score, 0.0 when there are no results."""
    scores = [result.score for result in _iter_results(results)]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 4)

