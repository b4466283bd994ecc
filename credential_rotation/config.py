import os
from typing import List, Optional, Sequence

DEFAULT_ENV_KEYS = ('GEMINI_API_KEY', 'API_KEY')


def parse_credentials(raw: Optional[str]) -> List[str]:
    """Split a comma-separated credential string, trimming entries and dropping empty ones."""
    if not raw:
        return []
    return [k.strip() for k in raw.split(',') if k.strip()]


def load_credential_string(env_keys: Sequence[str] = DEFAULT_ENV_KEYS) -> Optional[str]:
    """Return the first non-empty env var in ``env_keys``, or None."""
    for env_name in env_keys:
        val = os.environ.get(env_name, "").strip()
        if val:
            return val
    return None


def mask(credential: str) -> str:
    return f"...{credential[-4:]}"
