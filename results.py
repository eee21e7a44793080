# results.py — load outcome handed to the page templates
from dataclasses import dataclass, field
from typing import Any


@dataclass
class LoadResult:
    """Loaded data plus the error, if any, so "empty" and "failed" render differently."""
    items: Any = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None
