"""
Answer generators for the question answering pipeline.
"""

from .agent import ChatMessage, IAnswerGenerator
from .mock_agent import MockAnswerGenerator

__all__ = [
    'ChatMessage',
    'IAnswerGenerator',
    'MockAnswerGenerator'
]
