"""
File: pulse/sources/reddit.py
Reddit search JSON corpus (unauthenticated). For production, prefer OAuth API.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from pulse.errors import CorpusError
from pulse.models import Post
from pulse.sources.common import ensure_unique_ids
from pulse.utils import normalize_text

logger = logging.getLogger(__name__)

USER_AGENT = "keyword-sentiment-pulse/0.1"


class RedditCorpus:
    """Snapshot of Reddit search results.

    ``refresh`` is async and may fail; ``list`` only returns the last snapshot,
    so the analysis pipeline never sees a network error from the corpus.
    """

    SEARCH_URL = "https://www.reddit.com/search.json"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, limit: int = 50):
        self._client = client
        self.limit = limit
        self._posts: List[Post] = []

    def list(self) -> List[Post]:
        return list(self._posts)

    async def refresh(self, query: str) -> List[Post]:
        params = {"q": query, "sort": "new", "limit": min(self.limit, 100)}

        try:
            if self._client is not None:
                r = await self._client.get(self.SEARCH_URL, params=params)
            else:
                async with httpx.AsyncClient(headers={"User-Agent": USER_AGENT}, timeout=20) as client:
                    r = await client.get(self.SEARCH_URL, params=params)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CorpusError(f"Reddit search failed for {query!r}: {e}") from e

        posts: List[Post] = []
        for child in data.get("data", {}).get("children", []):
            p = child.get("data", {})
            created_utc = p.get("created_utc")
            dt = datetime.fromtimestamp(created_utc, tz=timezone.utc) if created_utc else None

            title = normalize_text(p.get("title", ""))
            selftext = normalize_text(p.get("selftext", ""))
            text = f"{title}. {selftext}" if title and selftext else (title or selftext)
            if not text or not p.get("id"):
                continue

            author = p.get("author", "") or ""
            posts.append(
                Post(
                    id=f"rd-{p['id']}",
                    text=text,
                    author=author,
                    handle=author,
                    avatar="",
                    timestamp=dt,
                )
            )

        self._posts = ensure_unique_ids(posts)
        logger.info("Reddit snapshot for %r: %d posts", query, len(self._posts))
        return self.list()
