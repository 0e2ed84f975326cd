from . import chat, search, videos

__all__ = ["chat", "search", "videos"]
