"""Registry resolving engine names from settings into engine handles."""

import threading
from dataclasses import dataclass

from api.base_engine import BaseSearchEngine

_lock = threading.Lock()
_engines: dict[str, BaseSearchEngine] = {}


def register_engine(name: str, engine: BaseSearchEngine) -> None:
    """Make an engine selectable under `name`."""
    with _lock:
        _engines[name.lower()] = engine


def unregister_engine(name: str) -> None:
    with _lock:
        _engines.pop(name.lower(), None)


def registered_engines() -> list[str]:
    with _lock:
        return list(_engines)


@dataclass(frozen=True)
class EngineHandler:
    name: str
    engine: BaseSearchEngine

    @classmethod
    def new(cls, name: str) -> "EngineHandler":
        """
        Resolve a registered engine by name (case-insensitive).

        Raises:
            KeyError: If no engine is registered under that name
        """
        key = name.lower()
        with _lock:
            engine = _engines.get(key)
        if engine is None:
            raise KeyError(f"Unknown search engine '{name}'")
        return cls(name=key, engine=engine)


def unknown_engines(names) -> list[str]:
    """Names from `names` that no registered engine answers to, in the given order."""
    with _lock:
        return [name for name in names if name.lower() not in _engines]
