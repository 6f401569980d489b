"""
Sentiment classifiers.

Every classifier exposes ``async classify(text) -> ClassifierOutput`` and is
treated by the coordinator as an opaque remote capability. A call either
returns a label from the closed set with a score in [-1, 1], or raises.
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from functools import lru_cache
from typing import Any, List, NamedTuple, Optional, Protocol, Tuple

import httpx
from openai import AsyncOpenAI

from pulse.config import Settings
from pulse.errors import ClassificationError
from pulse.models import SENTIMENT_LABELS
from pulse.utils import clamp_to_signed_unit_range, is_finite_number

logger = logging.getLogger(__name__)


class ClassifierOutput(NamedTuple):
    label: str
    score: float


class Classifier(Protocol):
    async def classify(self, text: str) -> ClassifierOutput:
        ...


def validate_output(label: Any, score: Any) -> ClassifierOutput:
    """
    Check a raw classifier answer against the classifier contract.

    Args:
        label: Raw label, matched case-insensitively
        score: Raw score, must be a finite number in [-1, 1]

    Returns:
        Normalized ClassifierOutput

    Raises:
        ClassificationError: If the label or score is out of contract
    """
    normalized = label.strip().lower() if isinstance(label, str) else None
    if normalized not in SENTIMENT_LABELS:
        raise ClassificationError(f"Unknown sentiment label {label!r}")

    if not is_finite_number(score) or not -1.0 <= score <= 1.0:
        raise ClassificationError(f"Sentiment score {score!r} outside [-1, 1]")

    return ClassifierOutput(normalized, float(score))


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = (
    "You are a sentiment analysis engine for short social media posts. "
    "Classify the overall sentiment of the post as positive, negative or neutral "
    "and give a score between -1.0 (very negative) and 1.0 (very positive). "
    "The score must agree with the label: positive > 0, negative < 0, neutral near 0. "
    'Respond with a JSON object only: {"label": "...", "score": 0.0}'
)


class OpenAIClassifier:
    """Chat-completion backed classifier returning a JSON object per post."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.0,
        api_key: Optional[str] = None,
    ):
        self._client = client or AsyncOpenAI(api_key=api_key or None)
        self.model = model
        self.temperature = temperature

    async def classify(self, text: str) -> ClassifierOutput:
        response = await self._client.chat.completions.create(
            model=self.model,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Post:\n{text}"},
            ],
            temperature=self.temperature,
            max_tokens=50,
        )

        content = (response.choices[0].message.content or "").strip()
        try:
            data = json.loads(content)
        except ValueError as e:
            raise ClassificationError(f"Model did not return JSON: {content[:80]!r}") from e

        if not isinstance(data, dict):
            raise ClassificationError("Model did not return a JSON object")

        return validate_output(data.get("label"), data.get("score"))


# ---------------------------------------------------------------------------
# FinBERT (local transformers model)
# ---------------------------------------------------------------------------

@lru_cache(maxsize=4)
def _load_model(model_name: str = "yiyanghkust/finbert-tone") -> Tuple:
    """
    Load a sequence classification model and its tokenizer.

    Returns:
        Tuple of (tokenizer, model)

    Raises:
        RuntimeError: If required dependencies are not installed
    """
    try:
        from transformers import AutoModelForSequenceClassification, AutoTokenizer
        import torch  # noqa: F401
    except ImportError as e:
        raise RuntimeError(
            "FinBERT dependencies are missing. Install the 'finbert' extra.\n"
            "Try: pip install -e '.[finbert]'"
        ) from e

    tokenizer = AutoTokenizer.from_pretrained(model_name)
    model = AutoModelForSequenceClassification.from_pretrained(model_name)
    model.eval()

    return tokenizer, model


def label_from_probabilities(p_neutral: float, p_positive: float, p_negative: float) -> ClassifierOutput:
    """
    Turn FinBERT class probabilities into a label and score.

    The score is p_positive - p_negative clipped to [-1, 1]; the label is the
    most probable class, ties going to neutral.
    """
    score = clamp_to_signed_unit_range(p_positive - p_negative)

    if p_positive > max(p_neutral, p_negative):
        label = "positive"
    elif p_negative > max(p_positive, p_neutral):
        label = "negative"
    else:
        label = "neutral"

    return ClassifierOutput(label, score)


def _predict(model_name: str, text: str) -> ClassifierOutput:
    import torch

    tokenizer, model = _load_model(model_name)
    with torch.no_grad():
        encoded = tokenizer([text], padding=True, truncation=True, max_length=256, return_tensors="pt")
        logits = model(**encoded).logits
        prob = torch.softmax(logits, dim=-1).cpu().numpy()[0]

    # FinBERT label order: [neutral, positive, negative]
    return label_from_probabilities(float(prob[0]), float(prob[1]), float(prob[2]))


class FinBertClassifier:
    """Local FinBERT inference, run in the default executor off the event loop."""

    def __init__(self, model_name: str = "yiyanghkust/finbert-tone"):
        self.model_name = model_name

    def warm_up(self) -> None:
        _load_model(self.model_name)

    async def classify(self, text: str) -> ClassifierOutput:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _predict, self.model_name, text)


# ---------------------------------------------------------------------------
# Remote HTTP endpoint
# ---------------------------------------------------------------------------

class HttpClassifier:
    """POSTs ``{"text": ...}`` to a remote service and reads ``{label, score}`` back."""

    def __init__(self, url: str, timeout: float = 20.0, client: Optional[httpx.AsyncClient] = None):
        if not url:
            raise ValueError("HttpClassifier needs a CLASSIFIER_URL")
        self.url = url
        self.timeout = timeout
        self._client = client

    async def _post(self, payload: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.url, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.url, json=payload)

    async def classify(self, text: str) -> ClassifierOutput:
        try:
            r = await self._post({"text": text})
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPStatusError as e:
            raise ClassificationError(
                f"Classifier returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ClassificationError(f"Classifier request failed: {e}") from e

        if not isinstance(data, dict):
            raise ClassificationError("Classifier response is not a JSON object")

        # Accept the camelCase flow output shape as well
        label = data.get("label", data.get("sentimentLabel"))
        score = data.get("score", data.get("sentimentScore"))
        return validate_output(label, score)


# ---------------------------------------------------------------------------
# Keyword heuristic fallback
# ---------------------------------------------------------------------------

POSITIVE_WORDS: List[str] = [
    "love", "loving", "great", "amazing", "incredible", "impressed", "fast",
    "easier", "solid", "upgrade", "beat", "record", "surge", "strong", "excellent",
    "awesome", "happy", "best", "win", "saved",
]
NEGATIVE_WORDS: List[str] = [
    "hate", "slow", "painfully", "worried", "terrible", "outage", "down", "bug",
    "broken", "confuse", "dropping", "miss", "cut", "downgrade", "lawsuit", "drop",
    "weak", "worst", "awful", "not great",
]


class LexiconClassifier:
    """Word-list heuristic used when no model or API key is available."""

    STEP = 0.3

    def __init__(self, positive_words: Optional[List[str]] = None, negative_words: Optional[List[str]] = None):
        self.positive_words = positive_words or POSITIVE_WORDS
        self.negative_words = negative_words or NEGATIVE_WORDS

    def score_text(self, text: str) -> ClassifierOutput:
        lower = f" {text.lower()} "
        positive = sum(1 for w in self.positive_words if re.search(rf"\b{re.escape(w)}\b", lower))
        negative = sum(1 for w in self.negative_words if re.search(rf"\b{re.escape(w)}\b", lower))

        score = round(clamp_to_signed_unit_range(self.STEP * (positive - negative)), 2)
        if score > 0:
            return ClassifierOutput("positive", score)
        if score < 0:
            return ClassifierOutput("negative", score)
        return ClassifierOutput("neutral", 0.0)

    async def classify(self, text: str) -> ClassifierOutput:
        return self.score_text(text)


def build_classifier(settings: Settings) -> Classifier:
    """
    Create the classifier selected by ``CLASSIFIER_BACKEND``.

    ``auto`` uses OpenAI when an API key is configured and the lexicon
    heuristic otherwise.
    """
    backend = settings.CLASSIFIER_BACKEND
    if backend == "auto":
        backend = "openai" if settings.OPENAI_API_KEY else "lexicon"

    logger.info("Using %s sentiment classifier", backend)

    if backend == "openai":
        return OpenAIClassifier(
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            api_key=settings.OPENAI_API_KEY,
        )
    if backend == "finbert":
        return FinBertClassifier(settings.FINBERT_MODEL)
    if backend == "http":
        return HttpClassifier(settings.CLASSIFIER_URL, timeout=settings.CLASSIFIER_TIMEOUT)
    return LexiconClassifier()
