"""Mutation result domain entity."""

from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a state-changing call such as a cache invalidation."""

    status: Literal["success", "error"]
    data: Any = None
    error: BaseException | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def error_message(self) -> str | None:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__
