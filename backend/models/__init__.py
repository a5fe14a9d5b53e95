"""SQLModel models package."""

from .game import Game
from .user import User

__all__ = ["User", "Game"]
