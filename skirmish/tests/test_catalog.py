"""
Tests for the card catalog and the autobattler unit pool.
"""

import dataclasses
import random

import pytest

from ..catalog import (
    Ability,
    BASIC_CARDS,
    COIN,
    PRESET_DECKS,
    CardCatalog,
    CardKind,
    default_catalog,
    generate_opponent_roster,
    preset_deck,
    units_up_to_tier,
)
from ..catalog.cards import FIREBALL, FOOTMAN, CardDefinition
from ..catalog.pool import MAX_ROSTER_SIZE, opponent_max_tier, opponent_roster_size
from ..engine_core.state import DuelState
from ..errors import ErrorKind, UnknownCardError


class TestCardCatalog:
    """Tests for catalog lookups."""

    def test_contains_basic_set(self, catalog):
        assert len(catalog) == 17
        assert COIN.card_id in catalog
        assert catalog.get("basic_spell_1") is FIREBALL

    def test_presets_resolve(self, catalog):
        for name, ids in PRESET_DECKS.items():
            deck = catalog.build_deck(ids)
            assert len(deck) == len(ids), name

    def test_require_unknown(self, catalog):
        with pytest.raises(UnknownCardError) as exc_info:
            catalog.require("nope")

        assert exc_info.value.kind == ErrorKind.UNKNOWN_CARD
        assert exc_info.value.card_ids == ["nope"]

    def test_build_deck_reports_all_missing(self, catalog):
        with pytest.raises(UnknownCardError) as exc_info:
            catalog.build_deck(["basic_minion_1", "x", "basic_spell_1", "y"])

        assert exc_info.value.card_ids == ["x", "y"]

    def test_build_deck_keeps_order(self, catalog):
        deck = catalog.build_deck(["basic_spell_1", "basic_minion_1", "basic_spell_1"])

        assert deck == [FIREBALL, FOOTMAN, FIREBALL]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            CardCatalog([FOOTMAN, FOOTMAN])

    def test_default_catalog_is_shared(self):
        assert default_catalog() is default_catalog()

    def test_preset_deck_copy(self):
        ids = preset_deck("mage")
        ids.clear()

        assert PRESET_DECKS["mage"]

    def test_preset_deck_unknown(self):
        with pytest.raises(KeyError):
            preset_deck("paladin")


class TestDefinitions:
    """Tests for card definition immutability."""

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            FOOTMAN.attack = 9

    def test_base_definition_is_abstract(self):
        with pytest.raises(TypeError):
            CardDefinition(card_id="x", name="X", cost=0)

    def test_clone_shares_definitions(self):
        state = DuelState(duel_id="d")
        state.load_deck(0, [FOOTMAN])

        copy = state.clone()

        assert copy.side(0).deck[0] is not state.side(0).deck[0]
        assert copy.side(0).deck[0].card is FOOTMAN

    def test_kinds(self):
        kinds = {card.kind for card in BASIC_CARDS}
        assert kinds == {CardKind.UNIT, CardKind.SPELL, CardKind.WEAPON}

    def test_ability_tags_match_descriptors(self):
        """A battlecry or deathrattle tag appears exactly when the effect is set."""
        for card in BASIC_CARDS:
            if card.kind != CardKind.UNIT:
                continue
            assert card.has(Ability.BATTLECRY) == (card.battlecry is not None), card.card_id
            assert card.has(Ability.DEATHRATTLE) == (card.deathrattle is not None), card.card_id


class TestUnitPool:
    """Tests for the autobattler pool and opponent generation."""

    @pytest.mark.parametrize("round_number,size", [(1, 1), (2, 2), (3, 2), (4, 3), (12, 7), (40, 7)])
    def test_roster_size(self, round_number, size):
        assert opponent_roster_size(round_number) == size

    @pytest.mark.parametrize("round_number,tier", [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (9, 3)])
    def test_max_tier(self, round_number, tier):
        assert opponent_max_tier(round_number) == tier

    def test_units_up_to_tier(self):
        assert len(units_up_to_tier(1)) == 5
        assert len(units_up_to_tier(3)) == 15

    def test_round_zero_rejected(self):
        with pytest.raises(ValueError):
            generate_opponent_roster(0)

    @pytest.mark.parametrize("round_number", range(1, 10))
    def test_generated_roster_respects_round(self, round_number):
        roster = generate_opponent_roster(round_number, random.Random(round_number))

        assert len(roster) == min(opponent_roster_size(round_number), MAX_ROSTER_SIZE)
        assert all(u.tier <= opponent_max_tier(round_number) for u in roster)

    def test_generation_is_seeded(self):
        first = generate_opponent_roster(6, random.Random(11))
        second = generate_opponent_roster(6, random.Random(11))

        assert first == second
