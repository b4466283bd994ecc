from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union
from loguru import logger

from ..config import load_credential_string, mask
from ..core.manager import CredentialRotationManager, Operation
from ..core.policies import RotationPolicy
from ..core.types import RotationStats

P = TypeVar('P', bound='BasePreset')


class PresetOptions:
    def __init__(
        self,
        env_keys: Sequence[str],
        provider: str = 'default',
        client_factory: Optional[Callable[[str], Any]] = None,
        policy: Union[RotationPolicy, Callable[[BaseException], bool], None] = None,
        max_attempts: int = 3
    ):
        self.env_keys = list(env_keys)
        self.provider = provider
        self.client_factory = client_factory
        self.policy = policy
        self.max_attempts = max_attempts


class Result:
    def __init__(self, success: bool, data: Optional[Any] = None, error: Optional[Exception] = None):
        self.success = success
        self.data = data
        self.error = error


class BasePreset:
    """
    Shared manager per provider.

    Callers obtain the instance through ``get_instance`` and pass it on to
    whatever needs it; nothing is constructed at import time.
    """
    _instances: Dict[str, 'BasePreset'] = {}

    def __init__(self, raw_credentials: Optional[str], options: PresetOptions):
        self.options = options
        provider = options.provider

        if options.client_factory is None:
            raise ValueError(f"[{provider}] No client factory configured")

        self.manager = CredentialRotationManager(
            raw_credentials,
            options.client_factory,
            policy=options.policy,
            max_attempts=options.max_attempts
        )

        self._wire_events()
        logger.info(f"[{provider}] Credential pool ready with {len(self.manager)} keys")

    def _wire_events(self):
        tag = self.options.provider
        self.manager.on('rotated', lambda k, err: logger.warning(f"[{tag}] Key blocked, rotating: {mask(k)}"))
        self.manager.on('blockedReset', lambda: logger.info(f"[{tag}] All keys were blocked, starting over"))
        self.manager.on('poolExhausted', lambda: logger.error(f"[{tag}] ALL KEYS TEMPORARILY UNAVAILABLE!"))
        self.manager.on('executeFailed', lambda k, err: logger.debug(f"[{tag}] Non-rotating failure on {mask(k)}: {err}"))

    @classmethod
    def create_instance(cls, preset_class: Type[P], default_options: PresetOptions, overrides: Optional[Dict[str, Any]] = None) -> Result:
        overrides = overrides or {}
        provider = overrides.get('provider', default_options.provider)

        if provider in cls._instances:
            return Result(True, data=cls._instances[provider])

        env_keys = overrides.get('env_keys', default_options.env_keys)
        raw = load_credential_string(env_keys)

        if raw is None:
            logger.warning(f"[{provider}] No API keys found in env vars: {', '.join(env_keys)}")

        opts = PresetOptions(
            env_keys=env_keys,
            provider=provider,
            client_factory=overrides.get('client_factory', default_options.client_factory),
            policy=overrides.get('policy', default_options.policy),
            max_attempts=overrides.get('max_attempts', default_options.max_attempts)
        )

        try:
            instance = preset_class(raw, opts)
            cls._instances[provider] = instance
            return Result(True, data=instance)
        except Exception as e:
            return Result(False, error=e)

    @classmethod
    def reset_instance(cls, provider: str):
        if provider in cls._instances:
            del cls._instances[provider]

    @classmethod
    def reset_all(cls):
        cls._instances.clear()

    async def execute(self, operation: Operation) -> Any:
        return await self.manager.execute(operation)

    async def execute_with_credential(self, operation: Operation) -> Tuple[Any, str]:
        return await self.manager.execute_with_credential(operation)

    def get_stats(self) -> RotationStats:
        return self.manager.get_stats()

    @property
    def credentials(self) -> List[str]:
        return self.manager.credentials
