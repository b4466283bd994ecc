import pytest

from credential_rotation.core.policies import (
    CallableRotationPolicy,
    PatternRotationPolicy,
    SubstringRotationPolicy,
    resolve_policy,
)


@pytest.mark.parametrize("message, expected", [
    ("429 RESOURCE_EXHAUSTED", True),
    ("Daily quota exceeded for model", True),
    ("You hit the rate limit", True),
    ("Quota Exceeded", False),
    ("resource_exhausted", False),
    ("Rate Limit", False),
    ("400 INVALID_ARGUMENT", False),
    ("", False),
])
def test_substring_policy_is_case_sensitive(message, expected):
    assert SubstringRotationPolicy().is_rotation_worthy(Exception(message)) is expected


def test_substring_policy_custom_tokens():
    policy = SubstringRotationPolicy(tokens=['overloaded'])
    assert policy(Exception("model is overloaded"))
    assert not policy(Exception("RESOURCE_EXHAUSTED"))


def test_pattern_policy_matches_loosely():
    policy = PatternRotationPolicy()
    assert policy(Exception("Too Many Requests"))
    assert policy(Exception("Resource Exhausted"))
    assert not policy(Exception("permission denied"))


def test_pattern_policy_reads_response_status():
    class Response:
        status_code = 429

    class HttpError(Exception):
        response = Response()

    assert PatternRotationPolicy(r'never-matches').is_rotation_worthy(HttpError("boom"))


def test_resolve_policy():
    assert isinstance(resolve_policy(None), SubstringRotationPolicy)
    wrapped = resolve_policy(lambda e: True)
    assert isinstance(wrapped, CallableRotationPolicy)
    assert wrapped(Exception("anything"))

    with pytest.raises(TypeError):
        resolve_policy("RESOURCE_EXHAUSTED")
