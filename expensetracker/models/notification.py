"""
Notification Models

Notifications are short header/body messages shown alongside the ledger:
budget warnings generated from the user's data, and tips from a catalog.
Only the data shape lives here; the catalog text is supplied externally.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NotificationType(str, Enum):
    """Kinds of notification."""
    WARNING = "warning"
    TIP = "tip"


class Notification(BaseModel):
    """A single notification."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    header: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short title"
    )
    body: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="Notification text"
    )
    type: NotificationType = Field(
        default=NotificationType.TIP,
        description="Kind of notification"
    )

    def is_same_notification(self, other: "Notification") -> bool:
        """Same header and body, regardless of type."""
        return self.header == other.header and self.body == other.body
