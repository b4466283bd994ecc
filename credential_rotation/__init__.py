from .core.manager import CredentialRotationManager, ConfigurationError, PoolExhaustedError
from .core.policies import RotationPolicy, SubstringRotationPolicy, PatternRotationPolicy, CallableRotationPolicy, DEFAULT_ROTATION_TOKENS
from .core.types import RotationStats
from .config import parse_credentials, load_credential_string

__all__ = [
    'CredentialRotationManager',
    'ConfigurationError',
    'PoolExhaustedError',
    'RotationPolicy',
    'SubstringRotationPolicy',
    'PatternRotationPolicy',
    'CallableRotationPolicy',
    'DEFAULT_ROTATION_TOKENS',
    'RotationStats',
    'parse_credentials',
    'load_credential_string'
]
