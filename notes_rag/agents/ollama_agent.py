"""
Ollama-based answer generator that talks to a local Ollama instance.
"""

import ollama
from datetime import datetime
from typing import Any, Dict, List

from .agent import ChatMessage, IAnswerGenerator
from ..core.errors import GenerationError
from ..util.logging import logger


class OllamaAnswerGenerator(IAnswerGenerator):
    """Answer generator backed by ollama.chat."""

    def __init__(self, model_name: str, options: Dict[str, Any] = None, client: "ollama.Client" = None):
        super().__init__(model_name)
        # Low temperature keeps answers close to the supplied document
        self.options = options if options is not None else {'temperature': 0.2, 'top_p': 0.9}
        self.client = client

    def generate(self, messages: List[ChatMessage]) -> str:
        chat = self.client.chat if self.client is not None else ollama.chat
        start_time = datetime.now()

        try:
            response = chat(
                model=self.model_name,
                messages=[m.to_dict() for m in messages],
                options=self.options
            )
        except ollama.ResponseError as e:
            raise GenerationError(f"Ollama model error: {e}") from e
        except (ConnectionError, OSError) as e:
            raise GenerationError(f"Ollama unavailable: {e}") from e

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)

        # ChatResponse supports mapping access as well as attributes
        content = response['message']['content']
        if content is None:
            raise GenerationError(f"Ollama model {self.model_name} returned no content")

        logger.log_operation("generator.chat", "success", {
            "model": self.model_name,
            "processing_time_ms": processing_time,
            "response_length": len(content)
        })
        return content

    def get_status(self) -> Dict[str, Any]:
        """Get current status with Ollama-specific information."""
        status = super().get_status()
        status['ollama_available'] = check_ollama_health()
        return status


def check_ollama_health() -> bool:
    """Check that the Ollama service answers."""
    try:
        ollama.list()
        return True
    except (ollama.ResponseError, ConnectionError, OSError):
        return False
