"""Entities organized by business concept.

Each entity package holds its domain model (entity.py), its persistence
model (table.py) and its data-access layer (repository.py).
"""

from .profile import Profile, ProfileRepository, ProfileTable

__all__ = ["Profile", "ProfileTable", "ProfileRepository"]
