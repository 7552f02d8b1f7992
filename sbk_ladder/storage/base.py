from abc import ABC, abstractmethod
from typing import Optional

from ..models import Ladder


class LadderStore(ABC):
    """
    Keyed document store for ladders.

    Implementations raise PersistenceError when the backend fails and
    LadderNotFoundError when update/delete target a missing id.
    """

    @abstractmethod
    def get(self, ladder_id: str) -> Optional[Ladder]:
        ...

    @abstractmethod
    def list(self) -> list[Ladder]:
        """All ladders, oldest first."""

    @abstractmethod
    def create(self, ladder: Ladder) -> Ladder:
        ...

    @abstractmethod
    def update(self, ladder: Ladder) -> Ladder:
        ...

    @abstractmethod
    def delete(self, ladder_id: str) -> None:
        ...


def ladder_to_record(ladder: Ladder) -> dict:
    """Flatten a ladder into a JSON-safe document (steps as a list of dicts)."""
    return ladder.model_dump(mode="json")


def ladder_from_record(record: dict) -> Ladder:
    return Ladder.model_validate(record)
