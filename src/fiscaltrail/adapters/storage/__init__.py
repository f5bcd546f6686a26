"""Storage adapters."""

from .memory import MemoryStore
from .yaml_file import YamlFileStore

__all__ = ["MemoryStore", "YamlFileStore"]
