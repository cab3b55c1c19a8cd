"""
Persistence for the clinic's records.
"""
from .store import InMemoryStateStore, JsonFileStateStore, StateStore, build_store

__all__ = [
    "StateStore",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "build_store",
]
