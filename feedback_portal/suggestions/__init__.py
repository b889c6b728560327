"""Reply drafting through a local LLM, with a fixed fallback text."""

from feedback_portal.suggestions.llm import OllamaLLM
from feedback_portal.suggestions.service import SuggestionService

__all__ = ["OllamaLLM", "SuggestionService"]
