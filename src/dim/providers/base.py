"""
Gateway interface for chat-completion providers.
"""

from abc import ABC, abstractmethod

from ..core.types import ChatRequest, ChatResponse


class ChatGateway(ABC):
    """
    Abstract chat-completion gateway.

    Implementations must be safe to call from several worker threads at once;
    the dispatcher shares one instance across every task of a run.
    """

    @abstractmethod
    def complete(self, request: ChatRequest) -> ChatResponse:
        """
        Send one chat-completion request.

        Args:
            request: The request to send

        Returns:
            ChatResponse with the first choice's content

        Raises:
            GatewayError: If the request fails
        """
        pass
