# pulse/schemas.py
from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from pulse.core.session import SessionView
from pulse.models import Post, SentimentResult

FilterValue = Literal["all", "positive", "negative", "neutral"]


class PostOut(BaseModel):
    id: Union[str, int]
    text: str
    author: str = ""
    handle: str = ""
    avatar: str = ""
    timestamp: Optional[datetime] = None

    @classmethod
    def from_post(cls, post: Post) -> "PostOut":
        return cls(
            id=post.id,
            text=post.text,
            author=post.author,
            handle=post.handle,
            avatar=post.avatar,
            timestamp=post.timestamp,
        )


class SentimentResultOut(BaseModel):
    post_id: Union[str, int]
    label: Literal["positive", "negative", "neutral"]
    score: float = Field(ge=-1.0, le=1.0)

    @classmethod
    def from_result(cls, result: SentimentResult) -> "SentimentResultOut":
        return cls(post_id=result.post_id, label=result.label, score=result.score)


class AnalyzeRequest(BaseModel):
    keyword: str = Field(..., min_length=1, max_length=100)


class FilterRequest(BaseModel):
    filter: FilterValue


class AnalysisView(BaseModel):
    status: Literal["idle", "pending", "succeeded", "failed", "no_matches"]
    keyword: Optional[str] = None
    filter: FilterValue = "all"
    message: str = ""
    analyzed_posts: List[PostOut] = Field(default_factory=list)
    results: List[SentimentResultOut] = Field(default_factory=list)  # same order as analyzed_posts
    counts: Dict[str, int] = Field(default_factory=dict)
    average_score: float = 0.0
    displayed_posts: List[PostOut] = Field(default_factory=list)
    failed_post_id: Optional[Union[str, int]] = None

    @classmethod
    def from_view(cls, view: SessionView, message: str = "") -> "AnalysisView":
        return cls(
            status=view.status.value,
            keyword=view.keyword,
            filter=view.filter,
            message=message,
            analyzed_posts=[PostOut.from_post(p) for p in view.analyzed_posts],
            results=[SentimentResultOut.from_result(view.results[p.id]) for p in view.analyzed_posts],
            counts=view.counts,
            average_score=view.average_score,
            displayed_posts=[PostOut.from_post(p) for p in view.displayed_posts],
            failed_post_id=view.failed_post_id,
        )


class HealthResponse(BaseModel):
    status: str
    as_of: str
    service: str
    classifier: str
