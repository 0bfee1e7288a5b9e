from .base import Base
from .user import User
from .commitment import Commitment
from .reminder import Reminder

__all__ = [
    "Base",
    "User",
    "Commitment",
    "Reminder",
]
