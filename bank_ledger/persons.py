"""
Person Module

Identity of account owners. Persons are value objects: two persons with the
same name and id are the same owner.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Person:
    """Account owner, hashable so it can key the owner index"""
    name: str
    person_id: Optional[str] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Person name is required")

    @property
    def sort_key(self) -> str:
        """Key used when ordering accounts by owner"""
        return self.name

    def __str__(self) -> str:
        return self.name
