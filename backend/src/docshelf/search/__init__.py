"""Full-text search projection sync"""

from .indexer import SearchIndexPort, LoggingSearchIndex, register_search_sync

__all__ = ["SearchIndexPort", "LoggingSearchIndex", "register_search_sync"]
