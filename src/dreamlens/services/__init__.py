from .ai_service import AIService
from .config_store import InMemoryConfigStore, SupabaseConfigStore

__all__ = ["AIService", "InMemoryConfigStore", "SupabaseConfigStore"]
