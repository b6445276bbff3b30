"""Test course recommendations with a stubbed text generator and HTTP transport."""

import json

import httpx
import pytest

from learner_progress.application.recommendation_service import (
    OllamaTextGenerator,
    RecommendationService,
    build_prompt,
)
from learner_progress.core.config import LLMConfig
from learner_progress.core.errors import LearnerNotFoundError
from learner_progress.domain.learner import Learner


class StubGenerator:
    def __init__(self, reply: str = "1. Data Structures") -> None:
        self.reply = reply
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def learner_id(repository):
    return repository.save(Learner("Ana Silva", credits=12, completed_courses=4)).id


class TestPrompt:
    def test_profile_fields(self):
        prompt = build_prompt(Learner("Ana Silva", credits=12, completed_courses=4))
        assert "Name: Ana Silva" in prompt
        assert "Completed courses: 4" in prompt
        assert "Accumulated credits: 12" in prompt
        assert "learning path" in prompt

    def test_context_changes_task(self):
        prompt = build_prompt(Learner.create("Ana"), context="machine learning")
        assert "machine learning" in prompt
        assert "match these interests" in prompt


class TestService:
    def test_returns_generator_text_unchanged(self, repository, learner_id):
        generator = StubGenerator("  raw model text  ")
        service = RecommendationService(repository, generator)

        assert service.recommend(learner_id) == "  raw model text  "
        assert len(generator.prompts) == 1

    def test_with_context(self, repository, learner_id):
        generator = StubGenerator()
        RecommendationService(repository, generator).recommend_with_context(
            learner_id, "cloud"
        )
        assert "cloud" in generator.prompts[0]

    def test_unknown_learner_skips_generator(self, repository):
        generator = StubGenerator()
        with pytest.raises(LearnerNotFoundError):
            RecommendationService(repository, generator).recommend(99)
        assert generator.prompts == []


class TestOllamaTextGenerator:
    def test_posts_generate_request(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "Take Algorithms next."})

        config = LLMConfig(model="llama3")
        client = httpx.Client(
            base_url=config.base_url, transport=httpx.MockTransport(handler)
        )
        generator = OllamaTextGenerator(config, client=client)

        assert generator.generate("hello") == "Take Algorithms next."
        assert seen["path"] == "/api/generate"
        assert seen["body"] == {"model": "llama3", "prompt": "hello", "stream": False}
        generator.close()

    def test_http_error_propagates(self):
        client = httpx.Client(
            base_url="http://llm",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        generator = OllamaTextGenerator(LLMConfig(), client=client)
        with pytest.raises(httpx.HTTPStatusError):
            generator.generate("hello")
