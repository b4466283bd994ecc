from .base import BasePreset, PresetOptions, Result
from .gemini import GeminiManager, gemini_client

__all__ = [
    'BasePreset',
    'PresetOptions',
    'Result',
    'GeminiManager',
    'gemini_client'
]
