"""
Main FastAPI application and routing layer.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from pulse.config import Settings, get_settings
from pulse.core.classifier import Classifier, FinBertClassifier, build_classifier
from pulse.core.session import AnalysisSession
from pulse.errors import CorpusError
from pulse.models import RunStatus
from pulse.schemas import AnalysisView, AnalyzeRequest, FilterRequest, FilterValue, HealthResponse, PostOut
from pulse.sources.corpus import Corpus, build_corpus
from pulse.sources.reddit import RedditCorpus
from pulse.utils import now_utc

logger = logging.getLogger("uvicorn")


def configure_logging(settings: Settings) -> None:
    """Configure root logging once from LOG_LEVEL/LOG_FORMAT."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=settings.LOG_FORMAT)


def _session(request: Request) -> AnalysisSession:
    return request.app.state.session


def render_view(session: AnalysisSession) -> AnalysisView:
    """
    Build the API view of the session, with a user-facing message.

    Args:
        session: The analysis session

    Returns:
        AnalysisView for the presentation layer
    """
    view = session.snapshot()
    message = ""

    if view.status is RunStatus.NO_MATCHES:
        message = f'No posts matched the keyword "{view.keyword}".'
    elif view.status is RunStatus.FAILED:
        message = "Could not analyze post sentiments. Please try again."
    elif view.status is RunStatus.SUCCEEDED and not view.displayed_posts:
        message = f'No posts found for "{view.filter}" sentiment.'

    return AnalysisView.from_view(view, message=message)


def create_app(
    settings: Optional[Settings] = None,
    corpus: Optional[Corpus] = None,
    classifier: Optional[Classifier] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        corpus: Corpus provider (defaults to ``build_corpus(settings)``)
        classifier: Sentiment classifier (defaults to ``build_classifier(settings)``)

    Returns:
        Configured FastAPI app with a single shared AnalysisSession
    """
    settings = settings or get_settings()
    corpus = corpus if corpus is not None else build_corpus(settings)
    classifier = classifier if classifier is not None else build_classifier(settings)

    app = FastAPI(
        title="Keyword Sentiment API",
        version="0.1.0",
        description="Select posts by keyword, classify their sentiment and aggregate the results",
    )
    app.state.settings = settings
    app.state.session = AnalysisSession(
        corpus,
        classifier,
        reset_filter_on_run=settings.RESET_FILTER_ON_RUN,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def warm_startup():
        """Load a local model in the background so the first run is not slow."""
        if not isinstance(classifier, FinBertClassifier):
            return

        async def load_model():
            start_time = time.perf_counter()
            try:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, classifier.warm_up)
                logger.info("FinBERT model loaded in %.1fs", time.perf_counter() - start_time)
            except Exception as e:
                logger.warning("Model warm-up skipped: %s", e)

        app.state.warmup_task = asyncio.create_task(load_model())

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            as_of=now_utc().isoformat(),
            service="keyword-sentiment-api",
            classifier=type(classifier).__name__,
        )

    @app.get("/posts", response_model=List[PostOut])
    async def list_posts(request: Request):
        """The full corpus, in corpus order."""
        return [PostOut.from_post(post) for post in _session(request).corpus.list()]

    @app.post("/analyze", response_model=AnalysisView)
    async def analyze_keyword(
        body: AnalyzeRequest,
        request: Request,
        wait: bool = Query(True, description="Wait for the run to settle before responding"),
    ):
        """
        Submit a keyword and analyze the sentiment of every matching post.

        Args:
            body: Keyword to select posts with
            wait: When false, respond immediately with the pending run

        Returns:
            AnalysisView of the settled (or pending) run
        """
        keyword = body.keyword.strip()
        if len(keyword) < settings.MIN_KEYWORD_LENGTH:
            raise HTTPException(
                status_code=422,
                detail=f"Keyword must be at least {settings.MIN_KEYWORD_LENGTH} characters.",
            )

        session = _session(request)

        if isinstance(session.corpus, RedditCorpus):
            query = settings.REDDIT_QUERY or keyword
            try:
                await session.corpus.refresh(query)
            except CorpusError as e:
                logger.warning(f"Reddit refresh failed for {query!r}: {e}")
                raise HTTPException(status_code=502, detail=f"Could not load posts: {e}")

        if not wait:
            session.start(keyword)
            return render_view(session)

        try:
            run = session.begin(keyword)
            status = await session.execute(run)
        except Exception as e:
            logger.error(f"Error analyzing keyword {keyword!r}: {e}")
            raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

        if not session.is_current(run.token):
            raise HTTPException(status_code=409, detail="Superseded by a newer keyword submission.")

        if status is RunStatus.FAILED:
            failed = session.current_run.failed_post_id
            raise HTTPException(
                status_code=502,
                detail=f"Analysis failed: could not classify post {failed!r}. Please try again.",
            )

        return render_view(session)

    @app.get("/analysis", response_model=AnalysisView)
    async def get_analysis(
        request: Request,
        filter: Optional[FilterValue] = Query(None, description="Optionally change the sentiment filter"),
    ):
        """Current run state, filtered by the session's sentiment filter."""
        session = _session(request)
        if filter is not None:
            session.set_filter(filter)
        return render_view(session)

    @app.put("/analysis/filter", response_model=AnalysisView)
    async def update_filter(body: FilterRequest, request: Request):
        """Change the sentiment filter without re-running classification."""
        session = _session(request)
        session.set_filter(body.filter)
        return render_view(session)

    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    # For development
    import uvicorn
    uvicorn.run("pulse.main:app", host="0.0.0.0", port=get_settings().PORT, reload=True)
