"""
Emoji picker state. At most one picker is open at a time; the session owns it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

QUICK_REACTIONS = (
    "😂", "❤️", "🚀", "😍", "👍", "👎",
    "🔥", "🎉", "😢", "😡", "🤔", "✨",
)


class PickerTarget(Enum):
    """What a selected emoji is applied to"""
    MESSAGE = "message"
    COMPOSER = "composer"


@dataclass(frozen=True)
class ActivePicker:
    target: PickerTarget
    message_id: Optional[str] = None

    def __post_init__(self):
        if self.target is PickerTarget.MESSAGE and not self.message_id:
            raise ValueError("A message picker needs the id of the message it reacts to")
        if self.target is PickerTarget.COMPOSER and self.message_id is not None:
            raise ValueError("A composer picker is not attached to a message")
