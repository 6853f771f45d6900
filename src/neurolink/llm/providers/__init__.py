from .gemini import GeminiBackend
from .proxy import ProxyBackend

__all__ = ["GeminiBackend", "ProxyBackend"]
