"""
Corpus providers. The analysis pipeline only needs ``list() -> List[Post]``.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Protocol, Union

from pulse.config import Settings
from pulse.errors import CorpusError
from pulse.models import Post
from pulse.sources.common import ensure_unique_ids, post_from_record
from pulse.sources.mock_data import MOCK_POSTS
from pulse.sources.reddit import RedditCorpus

logger = logging.getLogger(__name__)


class Corpus(Protocol):
    def list(self) -> List[Post]:
        ...


class StaticCorpus:
    """Fixed, in-memory list of posts."""

    def __init__(self, posts: Iterable[Post]):
        self._posts = ensure_unique_ids(posts)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "StaticCorpus":
        return cls(post_from_record(record) for record in records)

    @classmethod
    def default(cls) -> "StaticCorpus":
        """The bundled demo posts."""
        return cls.from_records(MOCK_POSTS)

    def list(self) -> List[Post]:
        return list(self._posts)


class JsonFileCorpus(StaticCorpus):
    """Posts loaded once from a JSON array on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CorpusError(f"Could not read corpus file {self.path}: {e}") from e

        if not isinstance(data, list):
            raise CorpusError(f"Corpus file {self.path} must contain a JSON array")

        super().__init__(post_from_record(record) for record in data)
        logger.info("Loaded %d posts from %s", len(self._posts), self.path)


def build_corpus(settings: Settings) -> Corpus:
    """
    Pick the corpus provider selected by ``CORPUS_BACKEND``.

    ``auto`` reads ``CORPUS_PATH`` when it is set and serves the bundled demo
    posts otherwise.
    """
    backend = settings.CORPUS_BACKEND
    if backend == "auto":
        backend = "file" if settings.CORPUS_PATH else "mock"

    if backend == "reddit":
        return RedditCorpus(limit=settings.REDDIT_LIMIT)
    if backend == "file":
        if not settings.CORPUS_PATH:
            raise CorpusError("CORPUS_BACKEND=file needs a CORPUS_PATH")
        return JsonFileCorpus(settings.CORPUS_PATH)
    return StaticCorpus.default()
