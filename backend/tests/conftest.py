import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from pulse.core.classifier import ClassifierOutput
from pulse.models import Post
from pulse.sources.corpus import StaticCorpus


class ScriptedClassifier:
    """Answers by exact text; an exception value is raised instead of returned.

    ``gates`` holds an asyncio.Event per text that the call waits on first.
    """

    def __init__(self, outputs: Dict[str, object], gates: Optional[Dict[str, asyncio.Event]] = None):
        self.outputs = outputs
        self.gates = gates or {}
        self.calls: List[str] = []
        self.cancelled: List[str] = []

    async def classify(self, text: str) -> ClassifierOutput:
        self.calls.append(text)
        gate = self.gates.get(text)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(text)
                raise

        output = self.outputs[text]
        if isinstance(output, BaseException):
            raise output
        return output


def make_post(post_id, text, author="Test User"):
    return Post(
        id=post_id,
        text=text,
        author=author,
        handle=author.lower().replace(" ", ""),
        avatar=f"https://i.pravatar.cc/150?u={post_id}",
        timestamp=datetime(2024, 5, 20, 10, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def posts() -> List[Post]:
    return [
        make_post(1, "I love Next.js"),
        make_post(2, "Next.js is slow"),
        make_post(3, "Firebase outage again"),
        make_post(4, "Firebase docs are fine"),
        make_post(5, "NEXT.JS conf tickets are out"),
    ]


@pytest.fixture
def corpus(posts) -> StaticCorpus:
    return StaticCorpus(posts)


@pytest.fixture
def outputs() -> Dict[str, object]:
    return {
        "I love Next.js": ClassifierOutput("positive", 0.8),
        "Next.js is slow": ClassifierOutput("negative", -0.6),
        "Firebase outage again": ClassifierOutput("negative", -0.7),
        "Firebase docs are fine": ClassifierOutput("positive", 0.3),
        "NEXT.JS conf tickets are out": ClassifierOutput("neutral", 0.05),
    }


@pytest.fixture
def classifier(outputs) -> ScriptedClassifier:
    return ScriptedClassifier(outputs)


@pytest.fixture
def scripted():
    return ScriptedClassifier


@pytest.fixture
def post_factory():
    return make_post
