from assistant.tools.gemini import CompletionError, GeminiClient

__all__ = ["CompletionError", "GeminiClient"]
