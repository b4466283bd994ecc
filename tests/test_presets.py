import pytest
from google import genai

from credential_rotation.core.manager import ConfigurationError
from credential_rotation.presets.gemini import GeminiManager


class FakeClient:
    def __init__(self, api_key):
        self.api_key = api_key


@pytest.fixture(autouse=True)
def reset_presets():
    GeminiManager.reset()
    yield
    GeminiManager.reset()


def test_gemini_preset_initialization(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "mock-key-1, mock-key-2")

    result = GeminiManager.get_instance({'client_factory': FakeClient})
    assert result.success is True
    manager = result.data
    assert manager.credentials == ['mock-key-1', 'mock-key-2']
    assert manager.get_stats().total == 2


def test_gemini_preset_is_shared(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "mock-key")

    first = GeminiManager.get_instance({'client_factory': FakeClient}).data
    second = GeminiManager.get_instance().data
    assert first is second


def test_gemini_preset_falls_back_to_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "fallback-key")

    result = GeminiManager.get_instance({'client_factory': FakeClient})
    assert result.data.credentials == ['fallback-key']


def test_gemini_preset_without_keys(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    result = GeminiManager.get_instance({'client_factory': FakeClient})
    assert result.success is False
    assert isinstance(result.error, ConfigurationError)


def test_gemini_preset_builds_genai_clients(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "mock-gemini-key")

    result = GeminiManager.get_instance()
    assert result.success is True
    assert isinstance(result.data.manager.clients[0], genai.Client)


@pytest.mark.asyncio
async def test_gemini_preset_execute(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "k1,k2")
    manager = GeminiManager.get_instance({'client_factory': FakeClient}).data

    async def mock_call(client):
        if client.api_key == 'k1':
            raise Exception("429 RESOURCE_EXHAUSTED")
        return "generated"

    result, credential = await manager.execute_with_credential(mock_call)
    assert result == "generated"
    assert credential == "k2"
    assert await manager.execute(mock_call) == "generated"
