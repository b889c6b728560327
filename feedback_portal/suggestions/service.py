"""
Suggestion service - drafts a candidate admin reply.

The contract towards callers: always return non-empty text. Any failure
of the generation server is logged and replaced by a fixed polite reply
that names the department.
"""

import logging
from typing import Optional

from feedback_portal.exceptions import SuggestionServiceError
from feedback_portal.suggestions.llm import OllamaLLM
from feedback_portal.suggestions.prompts import (
    SYSTEM_PROMPT,
    TEMPERATURE,
    TOP_P,
    build_reply_prompt,
    fallback_reply,
)


logger = logging.getLogger(__name__)


class SuggestionService:
    """
    Drafts replies with an LLM, falling back to a fixed text.

    Requests are independent; if an admin asks twice for the same
    record, whichever response arrives last is the one they see.
    """

    def __init__(self, llm: Optional[OllamaLLM] = None):
        self.llm = llm or OllamaLLM()

    def is_available(self) -> bool:
        return self.llm.is_available()

    def suggest(self, feedback_content: str, department: str) -> str:
        """
        Draft a reply to one piece of feedback.

        Args:
            feedback_content: What the citizen wrote
            department: Department the feedback is about

        Returns:
            Generated reply, or the fallback text on any failure
        """
        try:
            response = self.llm.generate(
                build_reply_prompt(feedback_content, department),
                system_prompt=SYSTEM_PROMPT,
                temperature=TEMPERATURE,
                top_p=TOP_P,
            )
            text = response.content.strip()
            if not text:
                raise SuggestionServiceError("Ollama returned an empty reply")
            return text
        except SuggestionServiceError as e:
            logger.warning(f"Suggestion failed for {department}, using fallback: {e}")
        except Exception as e:
            logger.exception(f"Unexpected suggestion error for {department}: {e}")

        return fallback_reply(department)
