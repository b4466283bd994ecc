import inspect
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Set, Tuple, TypeVar, Union
from loguru import logger

from ..config import DEFAULT_ENV_KEYS, load_credential_string, mask, parse_credentials
from .policies import RotationPolicy, resolve_policy
from .types import RotationStats

ClientT = TypeVar('ClientT')
T = TypeVar('T')

Operation = Callable[[ClientT], Union[Awaitable[T], T]]

CONFIG = {
    'MAX_ATTEMPTS': 3,
}


class ConfigurationError(ValueError):
    def __init__(self, message: str = "No usable credentials in the supplied credential string"):
        super().__init__(message)


class PoolExhaustedError(Exception):
    def __init__(self):
        super().__init__("All API keys are temporarily unavailable")


class CredentialRotationManager(Generic[ClientT]):
    """
    Credential Rotation Manager

    Holds an ordered pool of credentials with one client per credential and
    runs operations against them. Quota and rate-limit failures block the
    current credential and move the cursor to the next one; any other failure
    propagates unchanged.

    The cursor and blocked set are shared by every in-flight call. Selection
    and failure bookkeeping never await, so each step is atomic on a single
    event loop, but no lock reserves a credential for one call: two calls may
    pick the same client and both advance the cursor. Rotation is best-effort
    load spreading, not exclusive assignment.
    """

    def __init__(
            self,
            raw_credentials: Optional[str],
            client_factory: Callable[[str], ClientT],
            policy: Union[RotationPolicy, Callable[[BaseException], bool], None] = None,
            max_attempts: int = CONFIG['MAX_ATTEMPTS']
    ):
        if not raw_credentials:
            raise ConfigurationError()

        self.credentials: List[str] = parse_credentials(raw_credentials)
        if not self.credentials:
            raise ConfigurationError()

        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.policy = resolve_policy(policy)
        self.max_attempts = max_attempts
        self.clients: List[ClientT] = [client_factory(k) for k in self.credentials]
        self.cursor = 0
        self.blocked: Set[int] = set()

        self._callbacks: Dict[str, List[Callable]] = {}

        logger.info(f"CredentialRotationManager initialized with {len(self.credentials)} credential(s)")

    @classmethod
    def from_env(
            cls,
            client_factory: Callable[[str], ClientT],
            env_keys: Sequence[str] = DEFAULT_ENV_KEYS,
            **kwargs: Any
    ) -> 'CredentialRotationManager[ClientT]':
        raw = load_credential_string(env_keys)
        if raw is None:
            raise ConfigurationError(f"No API keys found in env vars: {', '.join(env_keys)}")
        return cls(raw, client_factory, **kwargs)

    def __len__(self) -> int:
        return len(self.credentials)

    def on(self, event: str, callback: Callable):
        if event not in self._callbacks:
            self._callbacks[event] = []
        self._callbacks[event].append(callback)

    def _emit(self, event: str, *args, **kwargs):
        if event in self._callbacks:
            for cb in self._callbacks[event]:
                try:
                    cb(*args, **kwargs)
                except Exception as e:
                    logger.error(f"Error in event listener for {event}: {e}")

    def is_rotation_worthy(self, error: BaseException) -> bool:
        return self.policy.is_rotation_worthy(error)

    def get_current_client(self) -> ClientT:
        """
        Return the client at the first unblocked index from the cursor onward.

        The cursor is left on the returned index. When every index is blocked
        the blocked set is cleared and the client at the cursor is returned.
        """
        size = len(self.clients)
        for _ in range(size):
            if self.cursor not in self.blocked:
                return self.clients[self.cursor]
            self.cursor = (self.cursor + 1) % size

        self.blocked.clear()
        logger.info(f"All {size} credentials were blocked, resetting blocked set")
        self._emit('blockedReset')
        return self.clients[self.cursor]

    async def execute(self, operation: Operation[ClientT, T]) -> T:
        result, _ = await self.execute_with_credential(operation)
        return result

    async def execute_with_credential(self, operation: Operation[ClientT, T]) -> Tuple[T, str]:
        if len(self.clients) == 1:
            credential = self.credentials[0]
            try:
                result = await self._invoke(operation, self.clients[0])
            except Exception as e:
                self._emit('executeFailed', credential, e)
                raise
            self._emit('executeSuccess', credential)
            return result, credential

        size = len(self.clients)
        last_error: Optional[BaseException] = None

        for attempt in range(min(self.max_attempts, size)):
            client = self.get_current_client()
            index = self.cursor
            credential = self.credentials[index]

            try:
                result = await self._invoke(operation, client)
            except Exception as e:
                if not self.is_rotation_worthy(e):
                    self._emit('executeFailed', credential, e)
                    raise

                last_error = e
                self.blocked.add(index)
                self.cursor = (index + 1) % size
                logger.warning(f"Rotating away from {mask(credential)} (attempt {attempt + 1}): {e}")
                self._emit('rotated', credential, e)
                continue

            self._emit('executeSuccess', credential)
            return result, credential

        logger.error(f"All {size} credentials exhausted after {min(self.max_attempts, size)} attempts")
        self._emit('poolExhausted')
        raise PoolExhaustedError() from last_error

    async def _invoke(self, operation: Operation[ClientT, T], client: ClientT) -> T:
        result = operation(client)
        if inspect.isawaitable(result):
            result = await result
        return result

    def get_stats(self) -> RotationStats:
        blocked = len(self.blocked)
        return RotationStats(
            total=len(self.credentials),
            available=len(self.credentials) - blocked,
            blocked=blocked,
            cursor=self.cursor,
            current_credential=mask(self.credentials[self.cursor])
        )

    def reset(self):
        self.cursor = 0
        self.blocked.clear()
