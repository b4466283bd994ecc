from typing import Dict, Optional, Any
from google import genai

from .base import BasePreset, PresetOptions, Result


def gemini_client(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


class GeminiManager(BasePreset):
    PROVIDER = 'gemini'

    def __init__(self, raw_credentials: Optional[str], options: PresetOptions):
        super().__init__(raw_credentials, options)

    @staticmethod
    def _get_default_options() -> PresetOptions:
        return PresetOptions(
            env_keys=['GEMINI_API_KEY', 'API_KEY'],
            provider=GeminiManager.PROVIDER,
            client_factory=gemini_client,
            max_attempts=3
        )

    @classmethod
    def get_instance(cls, overrides: Optional[Dict[str, Any]] = None) -> Result:
        return cls.create_instance(cls, cls._get_default_options(), overrides)

    @classmethod
    def reset(cls):
        cls.reset_instance(cls.PROVIDER)
