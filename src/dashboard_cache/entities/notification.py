"""Notification domain entity."""

import time
from dataclasses import dataclass, field
from typing import Literal

NotificationVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notification:
    """A toast-style message for the user."""

    title: str
    description: str = ""
    variant: NotificationVariant = "default"
    created_at: float = field(default_factory=time.time)

    @property
    def is_destructive(self) -> bool:
        return self.variant == "destructive"
