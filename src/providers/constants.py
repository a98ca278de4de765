"""Provider constants and configuration."""
from typing import Dict, Optional

# Provider IDs
PROVIDER_OPENAI = "openai"
PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_GOOGLE = "google"
PROVIDER_LOCAL = "local"
PROVIDER_OTHER = "other"

# Provider names for display
PROVIDER_NAMES: Dict[str, str] = {
    PROVIDER_OPENAI: "OpenAI",
    PROVIDER_ANTHROPIC: "Anthropic",
    PROVIDER_GOOGLE: "Google Gemini",
    PROVIDER_LOCAL: "Local (Ollama, LM Studio, vLLM)",
    PROVIDER_OTHER: "OpenAI-compatible",
}

# Suggested base URLs; "other" has none because it is any compatible endpoint
PROVIDER_DEFAULT_BASE_URLS: Dict[str, Optional[str]] = {
    PROVIDER_OPENAI: "https://api.openai.com/v1",
    PROVIDER_ANTHROPIC: "https://api.anthropic.com/v1",
    PROVIDER_GOOGLE: "https://generativelanguage.googleapis.com/v1beta",
    PROVIDER_LOCAL: "http://localhost:11434",
    PROVIDER_OTHER: None,
}
