"""
Card Catalog - Static registry of card definitions.

Pure lookup. The catalog is the only structure shared across sessions and
is read-only once constructed.
"""

from __future__ import annotations
from typing import Iterable, Iterator

from ..errors import UnknownCardError
from .cards import BASIC_CARDS, PRESET_DECKS, CardDefinition


class CardCatalog:
    """
    Maps card ids to immutable definitions.

    Usage:
        catalog = default_catalog()
        fireball = catalog.require("basic_spell_1")
        deck = catalog.build_deck(PRESET_DECKS["mage"])
    """

    def __init__(self, cards: Iterable[CardDefinition]):
        self._cards: dict[str, CardDefinition] = {}
        for card in cards:
            if card.card_id in self._cards:
                raise ValueError(f"Duplicate card id: {card.card_id}")
            self._cards[card.card_id] = card

    def get(self, card_id: str) -> CardDefinition | None:
        """Get a card definition, or None."""
        return self._cards.get(card_id)

    def require(self, card_id: str) -> CardDefinition:
        """Get a card definition or raise UnknownCardError."""
        card = self._cards.get(card_id)
        if card is None:
            raise UnknownCardError([card_id])
        return card

    def build_deck(self, card_ids: Iterable[str]) -> list[CardDefinition]:
        """
        Resolve an ordered list of card ids into definitions.

        All unknown ids are reported at once.
        """
        ids = list(card_ids)
        missing = [cid for cid in ids if cid not in self._cards]
        if missing:
            raise UnknownCardError(missing)
        return [self._cards[cid] for cid in ids]

    def cards(self) -> list[CardDefinition]:
        return list(self._cards.values())

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __iter__(self) -> Iterator[CardDefinition]:
        return iter(self._cards.values())

    def __len__(self) -> int:
        return len(self._cards)


_DEFAULT: CardCatalog | None = None


def default_catalog() -> CardCatalog:
    """The built-in card set (shared, read-only)."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = CardCatalog(BASIC_CARDS)
    return _DEFAULT


def preset_deck(name: str) -> list[str]:
    """Card ids of a preset deck."""
    if name not in PRESET_DECKS:
        raise KeyError(f"Unknown preset deck: {name}")
    return list(PRESET_DECKS[name])
