"""
Ports (interfaces) for review state persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ReviewRecord


class ReviewRepository(ABC):
    """
    Port for loading and storing per-card review records.

    Implementations:
        - InMemoryReviewRepository: Process-local dict store.
        - YamlReviewRepository: Single YAML file on disk.

    Read-modify-write of a single record is not atomic across callers;
    adapters shared between concurrent writers must serialize per card.
    """

    @abstractmethod
    async def get_record(self, card_id: str) -> ReviewRecord | None:
        """
        Fetch the review record for a card.

        Returns:
            The record, or None if the card has never been reviewed or studied.
        """
        pass

    @abstractmethod
    async def get_deck_records(self, deck_id: str) -> list[ReviewRecord]:
        """
        Fetch all review records belonging to a deck.
        """
        pass

    @abstractmethod
    async def save_record(self, record: ReviewRecord) -> None:
        """
        Durably store a record, replacing any previous record for the card.
        """
        pass

    @abstractmethod
    async def get_deck_card_ids(self, deck_id: str) -> list[str]:
        """
        List every card in a deck, reviewed or not.
        """
        pass

    @abstractmethod
    async def add_deck_cards(self, deck_id: str, card_ids: list[str]) -> None:
        """
        Add cards to a deck. Cards already in the deck are ignored.
        """
        pass
