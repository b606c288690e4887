"""
Chat-completion gateways.
"""

from .base import ChatGateway
from .openai_client import OpenAICompatibleClient

__all__ = ["ChatGateway", "OpenAICompatibleClient"]
