"""
Services package.

Provides clean interfaces to external services:
- genai: Google GenAI (Gemini image/script/speech, Veo video)
- siliconflow: SiliconFlow relay used by the proxy endpoints
- credentials: API key providers injected into the GenAI client
"""

from creative_suite.services.credentials import (
    CredentialProvider,
    EnvCredentialProvider,
    SelectableCredentialProvider,
)
from creative_suite.services.genai import GeminiCreativeClient
from creative_suite.services.siliconflow import SiliconFlowForwarder, UpstreamReply

__all__ = [
    "CredentialProvider",
    "EnvCredentialProvider",
    "GeminiCreativeClient",
    "SelectableCredentialProvider",
    "SiliconFlowForwarder",
    "UpstreamReply",
]
