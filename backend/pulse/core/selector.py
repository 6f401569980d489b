"""
Keyword selection over a corpus snapshot.
"""
from __future__ import annotations

from typing import Iterable, List

from pulse.models import Post


def select_candidates(keyword: str, posts: Iterable[Post]) -> List[Post]:
    """
    Return the posts whose text contains ``keyword``, case-insensitively.

    Corpus order is preserved. An empty list is the "no matches" signal and
    must not be sent on to classification.
    """
    needle = keyword.lower()
    return [post for post in posts if needle in post.text.lower()]
