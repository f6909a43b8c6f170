"""Profile entity module.

- Profile: Domain entity
- ProfileTable: Database persistence model
- ProfileRepository: Data access layer
"""

from .entity import Profile, ProfileFields
from .repository import ProfileRepository
from .table import ProfileTable

__all__ = ["Profile", "ProfileFields", "ProfileTable", "ProfileRepository"]
