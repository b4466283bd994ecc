import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Pattern, Union

DEFAULT_ROTATION_TOKENS = ('RESOURCE_EXHAUSTED', 'quota exceeded', 'rate limit')

QUOTA_PATTERN = re.compile(r'429|quota|exhausted|resource.?exhausted|too.?many.?requests|rate.?limit', re.IGNORECASE)


class RotationPolicy(ABC):
    """Decides whether a failed operation should move on to the next credential."""

    @abstractmethod
    def is_rotation_worthy(self, error: BaseException) -> bool:
        pass

    def __call__(self, error: BaseException) -> bool:
        return self.is_rotation_worthy(error)


class SubstringRotationPolicy(RotationPolicy):
    """Case-sensitive substring match against the error message."""

    def __init__(self, tokens: Iterable[str] = DEFAULT_ROTATION_TOKENS):
        self.tokens = tuple(tokens)

    def is_rotation_worthy(self, error: BaseException) -> bool:
        message = str(error)
        return any(token in message for token in self.tokens)


class PatternRotationPolicy(RotationPolicy):
    """
    Regex match against the error message, plus a 429 status check.

    Looser than the substring policy: it also catches SDK errors that only
    carry an HTTP status and a generic message.
    """

    def __init__(self, pattern: Union[str, Pattern[str]] = QUOTA_PATTERN):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def is_rotation_worthy(self, error: BaseException) -> bool:
        if _status_of(error) == 429:
            return True
        return bool(self.pattern.search(str(error)))


class CallableRotationPolicy(RotationPolicy):
    def __init__(self, predicate: Callable[[BaseException], bool]):
        self.predicate = predicate

    def is_rotation_worthy(self, error: BaseException) -> bool:
        return bool(self.predicate(error))


def _status_of(error: Any) -> Optional[int]:
    # httpx-style errors keep the status on the response
    response = getattr(error, 'response', None)
    if response is not None and getattr(response, 'status_code', None) is not None:
        return response.status_code
    for attr in ('status_code', 'status', 'code'):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def resolve_policy(policy: Union[RotationPolicy, Callable[[BaseException], bool], None]) -> RotationPolicy:
    if policy is None:
        return SubstringRotationPolicy()
    if isinstance(policy, RotationPolicy):
        return policy
    if callable(policy):
        return CallableRotationPolicy(policy)
    raise TypeError(f"Unsupported rotation policy: {policy!r}")
