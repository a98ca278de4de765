"""Google Gemini provider package."""

from .adapter import GoogleGeminiAdapter

__all__ = ["GoogleGeminiAdapter"]
