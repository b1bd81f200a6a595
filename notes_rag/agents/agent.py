"""
Answer generator interface and the chat message format it consumes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class ChatMessage:
    """One conversation turn."""
    role: str  # "system", "user" or "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class IAnswerGenerator(ABC):
    """
    Abstract base class for generative models.
    Implementations map an ordered conversation to a natural-language answer.
    """

    def __init__(self, model_name: str):
        self.model_name = model_name

    @abstractmethod
    def generate(self, messages: List[ChatMessage]) -> str:
        """
        Generate an answer for a conversation.

        Args:
            messages: Ordered conversation turns

        Returns:
            The generated text, unmodified
        """
        pass

    def get_status(self) -> Dict[str, Any]:
        """Get current status of this generator."""
        return {
            "model_name": self.model_name,
            "generator_type": self.__class__.__name__,
            "status": "ready"
        }
