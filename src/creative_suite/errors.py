"""
Error taxonomy shared by the inference client, codec, workflows and proxies.

Every error carries a structured ``kind`` so callers branch on the kind
instead of matching message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CREDENTIAL_MISSING = "credential_missing"
    CREDENTIAL_REJECTED = "credential_rejected"
    TRANSPORT = "transport"
    UPSTREAM_STATUS = "upstream_status"
    NO_CONTENT = "no_content"
    MISSING_RESULT = "missing_result"
    SCRIPT_GENERATION = "script_generation"
    AUDIO_GENERATION = "audio_generation"
    MALFORMED_INPUT = "malformed_input"
    UNSUPPORTED_TYPE = "unsupported_type"
    PROXY_CONFIG = "proxy_config"
    MISSING_FIELD = "missing_field"
    POLL_TIMEOUT = "poll_timeout"
    SUPERSEDED = "superseded"


class CreativeSuiteError(Exception):
    """Base class for all errors raised by this package."""

    default_kind: ErrorKind = ErrorKind.UPSTREAM_STATUS

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind


class CredentialError(CreativeSuiteError):
    """No API key is configured or selected."""

    default_kind = ErrorKind.CREDENTIAL_MISSING


class UpstreamError(CreativeSuiteError):
    """Transport failure or non-2xx answer from the remote model."""

    default_kind = ErrorKind.UPSTREAM_STATUS

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, kind=kind)
        self.status_code = status_code

    @property
    def credential_rejected(self) -> bool:
        return self.kind is ErrorKind.CREDENTIAL_REJECTED


class NoContentError(CreativeSuiteError):
    default_kind = ErrorKind.NO_CONTENT


class MissingResultError(CreativeSuiteError):
    default_kind = ErrorKind.MISSING_RESULT


class ScriptGenerationError(CreativeSuiteError):
    default_kind = ErrorKind.SCRIPT_GENERATION


class AudioGenerationError(CreativeSuiteError):
    default_kind = ErrorKind.AUDIO_GENERATION


class MalformedInputError(CreativeSuiteError):
    default_kind = ErrorKind.MALFORMED_INPUT


class UnsupportedTypeError(CreativeSuiteError):
    default_kind = ErrorKind.UNSUPPORTED_TYPE


class ProxyConfigError(CreativeSuiteError):
    """The server-held proxy credential is not configured."""

    default_kind = ErrorKind.PROXY_CONFIG


CredentialNotConfiguredError = ProxyConfigError


class MissingFieldError(CreativeSuiteError):
    default_kind = ErrorKind.MISSING_FIELD


class PollTimeoutError(CreativeSuiteError):
    default_kind = ErrorKind.POLL_TIMEOUT


class SupersededError(CreativeSuiteError):
    """A newer submission replaced the run that raised this."""

    default_kind = ErrorKind.SUPERSEDED


__all__ = [
    "AudioGenerationError",
    "CreativeSuiteError",
    "CredentialError",
    "CredentialNotConfiguredError",
    "ErrorKind",
    "MalformedInputError",
    "MissingFieldError",
    "MissingResultError",
    "NoContentError",
    "PollTimeoutError",
    "ProxyConfigError",
    "ScriptGenerationError",
    "SupersededError",
    "UnsupportedTypeError",
    "UpstreamError",
]
