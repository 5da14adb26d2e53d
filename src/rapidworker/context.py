# context.py
from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional


class _Unset:
    """Marker returned by Context.get() for keys that were never set."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


class Context:
    """
    Variable store for one job execution.

    Built from the job's test variables with the environment variables applied
    on top. Actions write derived values into it so that later actions of the
    same job can read them. A Context is never shared between jobs.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})

    @classmethod
    def create(
        cls,
        test_vars: Optional[Mapping[str, Any]] = None,
        env_vars: Optional[Mapping[str, Any]] = None,
    ) -> Context:
        """Merge both sources; environment values win on key collision."""
        return cls({**(test_vars or {}), **(env_vars or {})})

    def get(self, key: str) -> Any:
        return self.data.get(key, UNSET)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Context({sorted(self.data)})"
