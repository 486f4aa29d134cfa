"""
Credential providers for the Gemini client.

The client never reads the environment itself; it asks an injected
``CredentialProvider`` for the current key, so tests and the key-selection
flow can swap the source.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from creative_suite.config import Settings, get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialProvider(Protocol):
    """Source of the API key used for inference calls."""

    def has_selected_key(self) -> bool:
        """Whether a key is currently available."""
        ...

    def get_api_key(self) -> str | None:
        """Return the active key, or ``None`` when nothing is selected."""
        ...


class EnvCredentialProvider:
    """Key taken from ``GEMINI_API_KEY`` (or ``API_KEY``)."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def has_selected_key(self) -> bool:
        return bool(self._settings.gemini_api_key)

    def get_api_key(self) -> str | None:
        return self._settings.gemini_api_key


class SelectableCredentialProvider:
    """
    Key chosen at runtime through the key-selection action, falling back to
    another provider (usually the environment) until one is selected.
    """

    def __init__(self, fallback: CredentialProvider | None = None) -> None:
        self._fallback = fallback
        self._selected: str | None = None
        self._revoked = False

    def has_selected_key(self) -> bool:
        return bool(self.get_api_key())

    def get_api_key(self) -> str | None:
        if self._selected:
            return self._selected
        if self._revoked or self._fallback is None:
            return None
        return self._fallback.get_api_key()

    def select_key(self, api_key: str) -> None:
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("API key must not be empty")
        self._selected = api_key
        self._revoked = False
        logger.info("[Credentials] API key selected")

    def clear(self) -> None:
        """Forget the active key, including the fallback, until a new one is selected."""
        self._selected = None
        self._revoked = True
        logger.info("[Credentials] API key cleared")
