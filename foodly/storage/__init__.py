from .base import TOKEN_KEY, TokenStore
from .file_store import FileTokenStore
from .memory_store import MemoryTokenStore

__all__ = ["TOKEN_KEY", "TokenStore", "FileTokenStore", "MemoryTokenStore"]
