"""Course recommendations from a text-generation model.

The service only builds a plain-text prompt from the learner profile
and returns the model's text unchanged.
"""

from __future__ import annotations

import logging

import httpx

from learner_progress.core.config import LLMConfig
from learner_progress.core.interfaces import ILearnerRepository, ITextGenerator
from learner_progress.domain.learner import Learner

logger = logging.getLogger(__name__)

_PROFILE = """\
You are an educational assistant who recommends courses.

## Learner profile
- Name: {name}
- Completed courses: {completed}
- Accumulated credits: {credits}
"""

_FORMAT = """\
## Response format
For each course give:
1. Course name
2. Why it is relevant for this learner
3. Estimated difficulty (Beginner/Intermediate/Advanced)

Be concise."""


def build_prompt(learner: Learner, context: str | None = None) -> str:
    parts = [
        _PROFILE.format(
            name=learner.name,
            completed=learner.completed_courses,
            credits=learner.credit_balance,
        )
    ]
    if context:
        parts.append(f"## Learner interests\n{context}\n")
        parts.append(
            "## Task\nRecommend 3 specific courses that match these interests "
            "and help the learner progress.\n"
        )
    else:
        parts.append(
            "## Task\nRecommend 3 courses the learner should take next "
            "on their learning path.\n"
        )
    parts.append(_FORMAT)
    return "\n".join(parts)


class RecommendationService:
    def __init__(self, repository: ILearnerRepository, generator: ITextGenerator) -> None:
        self._repository = repository
        self._generator = generator

    def recommend(self, learner_id: int) -> str:
        return self.recommend_with_context(learner_id, None)

    def recommend_with_context(self, learner_id: int, context: str | None) -> str:
        learner = self._repository.load(learner_id)
        prompt = build_prompt(learner, context)
        logger.debug("Recommendation prompt for learner %s: %s", learner_id, prompt)
        text = self._generator.generate(prompt)
        logger.info("Generated recommendations for %s", learner.name)
        return text


class OllamaTextGenerator:
    """``generate(prompt)`` against an Ollama-compatible ``/api/generate``."""

    def __init__(self, config: LLMConfig, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client or httpx.Client(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    def generate(self, prompt: str) -> str:
        response = self._client.post(
            "/api/generate",
            json={"model": self._config.model, "prompt": prompt, "stream": False},
        )
        response.raise_for_status()
        return response.json().get("response", "")

    def close(self) -> None:
        self._client.close()
