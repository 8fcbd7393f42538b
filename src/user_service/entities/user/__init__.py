"""User entity module.

This module contains all User-related classes organized by responsibility:
- User, UserCreate, UserUpdate, UserPage: Domain and payload models
- UserTable: Database persistence model
- UserRepository: Data access layer
"""

from .entity import User, UserCreate, UserPage, UserUpdate
from .repository import SortOrder, UserRepository
from .table import UserTable

__all__ = [
    "SortOrder",
    "User",
    "UserCreate",
    "UserPage",
    "UserRepository",
    "UserTable",
    "UserUpdate",
]
