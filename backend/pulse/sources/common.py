"""
Common utilities for corpus providers.
"""
from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from dateutil import parser as dateparser

from pulse.errors import CorpusError
from pulse.models import Post
from pulse.utils import normalize_text


def make_post_id(text: str, author: str, timestamp: Optional[datetime]) -> str:
    """
    Generate a deterministic unique ID for a post that carries none.

    Args:
        text: Post body
        author: Display author
        timestamp: Publication timestamp, if known

    Returns:
        16-character hexadecimal string ID
    """
    stamp = timestamp.isoformat() if timestamp else ""
    key = f"{author}|{text}|{stamp}".encode("utf-8", "ignore")
    return hashlib.blake2b(key, digest_size=8).hexdigest()


def parse_utc_datetime(value: Union[str, int, float, datetime, None]) -> Optional[datetime]:
    """
    Parse a timestamp and convert it to a UTC datetime.

    Args:
        value: ISO/RFC date string, epoch seconds, datetime, or None

    Returns:
        UTC datetime object, or None if the input is empty
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        parsed = dateparser.parse(str(value))

    if parsed.tzinfo:
        return parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=timezone.utc)


def post_from_record(record: Dict[str, Any]) -> Post:
    """
    Build a Post from a loosely-typed mapping (JSON file or API payload).

    Raises:
        CorpusError: If the record is not a mapping or has no text
    """
    if not isinstance(record, dict):
        raise CorpusError(f"Post record must be an object, got {type(record).__name__}")

    text = record.get("text")
    if not isinstance(text, str) or not text.strip():
        raise CorpusError(f"Post record {record.get('id')!r} has no text")

    author = normalize_text(record.get("author"))
    try:
        timestamp = parse_utc_datetime(record.get("timestamp"))
    except (ValueError, OverflowError) as e:
        raise CorpusError(f"Invalid timestamp for post {record.get('id')!r}: {e}") from e

    post_id = record.get("id")
    if post_id is None or post_id == "":
        post_id = make_post_id(text, author, timestamp)

    return Post(
        id=post_id,
        text=text,
        author=author,
        handle=normalize_text(record.get("handle")),
        avatar=normalize_text(record.get("avatar")),
        timestamp=timestamp,
    )


def ensure_unique_ids(posts: Iterable[Post]) -> List[Post]:
    """
    Check that post ids are unique within one corpus snapshot.

    Raises:
        CorpusError: On the first duplicated id
    """
    seen: set = set()
    unique_posts: List[Post] = []

    for post in posts:
        if post.id in seen:
            raise CorpusError(f"Duplicate post id {post.id!r} in corpus")
        seen.add(post.id)
        unique_posts.append(post)

    return unique_posts
