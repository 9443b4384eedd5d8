"""In-memory task storage."""

from prioritylib.providers.storage.memory.provider import MemoryStorageSettings, MemoryTaskStorageProvider

__all__ = ["MemoryStorageSettings", "MemoryTaskStorageProvider"]
