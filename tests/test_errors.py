from __future__ import annotations

import asyncio

import httpx
import pytest

from writr.errors import (
    APIError,
    ConfigurationError,
    RateLimitError,
    RequestAbortedError,
    WritrError,
)
from writr.providers._errors import (
    extract_retry_after_s,
    extract_status_code,
    wrap_provider_error,
)
from writr.providers.registry import PROVIDERS

pytestmark = pytest.mark.unit


def test_api_error_structured_metadata() -> None:
    err = APIError(
        "boom",
        hint="do this",
        retryable=True,
        status_code=503,
        retry_after_s=2.0,
        provider="anthropic",
        phase="complete",
    )

    assert str(err) == "boom"
    assert err.hint == "do this"
    assert err.retryable is True
    assert err.status_code == 503
    assert err.retry_after_s == 2.0
    assert err.provider == "anthropic"
    assert err.phase == "complete"


def test_api_error_defaults_to_none() -> None:
    err = APIError("fail")
    assert err.hint is None
    assert err.retryable is None
    assert err.status_code is None
    assert err.retry_after_s is None
    assert err.provider is None
    assert err.phase is None


def test_subclass_hierarchy() -> None:
    """Every library error is catchable as WritrError; transport errors as APIError."""
    assert issubclass(ConfigurationError, WritrError)
    assert issubclass(RateLimitError, APIError)
    assert issubclass(RequestAbortedError, APIError)
    assert not issubclass(ConfigurationError, APIError)


# =============================================================================
# Provider Error Mapping
# =============================================================================


class _Resp:
    def __init__(self, status_code: int, headers: dict[str, str] | None = None) -> None:
        self.status_code = status_code
        self.headers = headers or {}


class _SdkError(Exception):
    def __init__(self, message: str, *, response: _Resp | None = None, **attrs: object) -> None:
        super().__init__(message)
        self.response = response
        for k, v in attrs.items():
            setattr(self, k, v)


def test_wrap_provider_error_extracts_status_and_retry_after_from_response_headers() -> None:
    err = wrap_provider_error(
        _SdkError("rate limited", response=_Resp(429, {"Retry-After": "2"})),
        provider="openrouter",
        phase="complete",
    )

    assert isinstance(err, RateLimitError)
    assert err.status_code == 429
    assert err.retry_after_s == 2.0
    assert err.retryable is True
    assert err.provider == "openrouter"
    assert err.phase == "complete"
    assert "429" in str(err)


@pytest.mark.parametrize("status", [408, 409, 500, 502, 503, 504])
def test_retryable_status_codes(status: int) -> None:
    err = wrap_provider_error(_SdkError("x", status_code=status), provider="openai", phase="stream")
    assert err.retryable is True
    assert type(err) is APIError


@pytest.mark.parametrize("status", [400, 404, 422])
def test_client_errors_are_not_retryable(status: int) -> None:
    err = wrap_provider_error(_SdkError("x", status_code=status), provider="openai", phase="stream")
    assert err.retryable is False


def test_network_errors_are_retryable_through_the_exception_chain() -> None:
    request = httpx.Request("POST", "https://api.example.com")
    try:
        try:
            raise httpx.ConnectError("connection refused", request=request)
        except httpx.ConnectError as inner:
            raise RuntimeError("sdk wrapper") from inner
    except RuntimeError as outer:
        err = wrap_provider_error(outer, provider="anthropic", phase="complete")

    assert err.retryable is True
    assert err.status_code is None


@pytest.mark.parametrize(
    ("provider", "env_var"),
    [
        ("anthropic", "ANTHROPIC_API_KEY"),
        ("grok", "XAI_API_KEY"),
        ("google", "GEMINI_API_KEY"),
        ("google-vertex", "GOOGLE_VERTEX_PROJECT"),
    ],
)
def test_auth_failures_name_the_provider_env_var(provider: str, env_var: str) -> None:
    err = wrap_provider_error(_SdkError("unauthorized", status_code=401), provider=provider, phase="complete")
    assert err.hint is not None
    assert env_var in err.hint


@pytest.mark.parametrize("provider", sorted(PROVIDERS))
def test_auth_hint_follows_registry_env_var(provider: str) -> None:
    err = wrap_provider_error(_SdkError("forbidden", status_code=403), provider=provider, phase="stream")
    assert err.hint is not None
    assert PROVIDERS[provider].api_key_env in err.hint


def test_auth_hint_for_unregistered_provider_is_generic() -> None:
    err = wrap_provider_error(_SdkError("unauthorized", status_code=401), provider="acme", phase="complete")
    assert err.hint is not None
    assert "the provider API key" in err.hint


def test_wrap_provider_error_enriches_existing_api_error_without_clobbering() -> None:
    base = APIError("bad request", retryable=False, status_code=400)
    wrapped = wrap_provider_error(base, provider="google", phase="complete")

    assert wrapped is base
    assert wrapped.status_code == 400
    assert wrapped.retryable is False
    assert wrapped.provider == "google"
    assert wrapped.phase == "complete"


def test_wrap_provider_error_reraises_cancelled_error() -> None:
    with pytest.raises(asyncio.CancelledError):
        wrap_provider_error(asyncio.CancelledError(), provider="openai", phase="complete")


def test_extract_status_code_reads_google_style_code_attribute() -> None:
    assert extract_status_code(_SdkError("quota", code=429)) == 429


@pytest.mark.parametrize(
    ("retry_delay", "expected"),
    [("8.5s", 8.5), ("8s", 8.0), ("soon", None)],
)
def test_extract_retry_after_from_google_retry_info(retry_delay: str, expected: float | None) -> None:
    details = {
        "error": {
            "details": [
                {"@type": "type.googleapis.com/google.rpc.RetryInfo", "retryDelay": retry_delay}
            ]
        }
    }
    assert extract_retry_after_s(_SdkError("quota", details=details)) == expected


def test_non_numeric_retry_after_header_is_ignored() -> None:
    exc = _SdkError("busy", response=_Resp(503, {"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"}))
    assert extract_retry_after_s(exc) is None
