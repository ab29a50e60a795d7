"""Nash Cards — Key-Value Storage Layer"""

from nashcards.storage.kv import KeyValueStorage, MemoryStorage, SqlStorage, create_schema

__all__ = ["KeyValueStorage", "MemoryStorage", "SqlStorage", "create_schema"]
