"""
Mock answer generator that works without external dependencies.
Used for testing, development, and when no model server is available.
"""

from typing import List

from .agent import ChatMessage, IAnswerGenerator


class MockAnswerGenerator(IAnswerGenerator):
    """
    Answers with the first document line, or the no-answer sentinel when the
    conversation carries no document text.
    """

    def __init__(self, model_name: str = "mock-model", no_answer_sentinel: str = "{NONE}", document_label: str = "DOCUMENT:"):
        super().__init__(model_name)
        self.no_answer_sentinel = no_answer_sentinel
        self.document_label = document_label
        self.calls: List[List[ChatMessage]] = []

    def generate(self, messages: List[ChatMessage]) -> str:
        self.calls.append(list(messages))

        for message in messages:
            if message.role == "user" and message.content.startswith(self.document_label):
                document = message.content[len(self.document_label):].strip()
                if document:
                    first_line = document.splitlines()[0].lstrip(". ").strip()
                    return first_line or self.no_answer_sentinel

        return self.no_answer_sentinel
