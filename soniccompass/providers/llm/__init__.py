from soniccompass.providers.llm.gemini_provider import GeminiSongGenerator
from soniccompass.providers.llm.openai_provider import OpenAISongGenerator

__all__ = ["GeminiSongGenerator", "OpenAISongGenerator"]
