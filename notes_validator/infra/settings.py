"""Process-level runtime settings read from the environment.

These govern how outbound calls behave, not what the analyzer decides:
how many LLM requests may be in flight, how long one generation may take in
total across retries, and whether a local ``.env`` file is consulted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, TypeVar

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})


def _first_parsed(names: tuple[str, ...], parse: Callable[[str], T], default: T) -> T:
    """First variable in *names* that is set and parses; *default* otherwise."""
    for name in names:
        raw = (os.getenv(name) or "").strip()
        if not raw:
            continue
        try:
            return parse(raw)
        except ValueError:
            continue
    return default


def _flag(raw: str) -> bool:
    return raw.lower() in _TRUE_VALUES


@dataclass(frozen=True)
class InfraSettings:
    """Outbound-call limits for the LLM tier."""

    llm_concurrency: int = 2
    llm_deadline_s: float = 60.0
    skip_dotenv: bool = False

    @classmethod
    def from_env(cls) -> "InfraSettings":
        defaults = cls()
        return cls(
            llm_concurrency=max(
                1, _first_parsed(("NOTES_LLM_CONCURRENCY", "LLM_CONCURRENCY"), int, defaults.llm_concurrency)
            ),
            llm_deadline_s=max(
                0.0, _first_parsed(("NOTES_LLM_DEADLINE_S", "LLM_TIMEOUT_S"), float, defaults.llm_deadline_s)
            ),
            skip_dotenv=_first_parsed(("NOTES_SKIP_DOTENV",), _flag, defaults.skip_dotenv),
        )


@lru_cache(maxsize=1)
def get_infra_settings() -> InfraSettings:
    return InfraSettings.from_env()


__all__ = ["InfraSettings", "get_infra_settings"]
