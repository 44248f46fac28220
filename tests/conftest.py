from types import SimpleNamespace

import pytest

from valuation_copilot.core.cache import clear_cache
from valuation_copilot.core.database import InMemoryKeyValueStore
from valuation_copilot.core.llm_service import LLMService
from valuation_copilot.models.conversation import ConversationState
from valuation_copilot.services.session_service import DealRepository, ValuationSession


@pytest.fixture(autouse=True)
def _clear_memo_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def session(store) -> ValuationSession:
    """Fresh session (SaaS / US Tier 1) backed by an in-memory deal store."""
    return ValuationSession(repository=DealRepository(store))


@pytest.fixture
def idle() -> ConversationState:
    return ConversationState()


class FakeGemini:
    """Stands in for genai.GenerativeModel: records prompts, replays a canned response."""

    def __init__(self, text="", chunks=None, error=None):
        self.text = text
        self.chunks = chunks
        self.error = error
        self.prompts = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        metadata = SimpleNamespace(grounding_chunks=self.chunks) if self.chunks is not None else None
        return SimpleNamespace(
            text=self.text,
            candidates=[SimpleNamespace(grounding_metadata=metadata)],
        )


def make_groq_client(text):
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        return completion

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client, calls


@pytest.fixture
def fake_gemini():
    return FakeGemini(text="SaaS exits trade around 8-12x revenue.")


@pytest.fixture
def gateway(fake_gemini) -> LLMService:
    return LLMService(api_key="test-key", provider="gemini", client=fake_gemini)
