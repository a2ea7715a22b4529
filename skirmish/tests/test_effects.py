"""
Tests for the effect resolver.
"""

import pytest

from ..catalog import effects
from ..catalog.cards import FOOTMAN, SHIELDED_SQUIRE, STORMWIND_KNIGHT
from ..catalog.effects import EffectKind, SummonSpec, TargetSide
from ..engine_core.state import HERO_TARGET, MAX_HAND_SIZE
from .factories import give_card, place_unit, stock_deck, unit_card


class TestTargeting:
    """Tests for target side resolution."""

    def test_damage_defaults_to_enemy(self):
        assert effects.damage(1).target_side == TargetSide.ENEMY
        assert effects.aoe_damage(1).target_side == TargetSide.ENEMY

    def test_heal_and_buff_default_to_friendly(self):
        assert effects.heal(1).target_side == TargetSide.FRIENDLY
        assert effects.buff(1, 1).target_side == TargetSide.FRIENDLY
        assert effects.buff_all(1, 1).target_side == TargetSide.FRIENDLY

    def test_explicit_side_wins(self, duel, resolver):
        """A friendly-fire damage effect hits the caster's own hero."""
        effect = effects.EffectDescriptor(EffectKind.DAMAGE, value=3, side=TargetSide.FRIENDLY)

        resolver.resolve(duel, effect, source_side=0, target=HERO_TARGET)

        assert duel.side(0).hero.health == 27
        assert duel.side(1).hero.health == 30

    def test_every_kind_has_handler(self, resolver):
        for kind in EffectKind:
            assert resolver._get_handler(kind) is not None


class TestDamage:
    """Tests for damage and aoe."""

    def test_no_clamp(self, duel, resolver):
        """Unit health goes negative; removal is left to cleanup."""
        place_unit(duel, 1, FOOTMAN)

        resolver.resolve(duel, effects.damage(6), source_side=0, target=0)

        unit = duel.side(1).board[0]
        assert unit.health == -4
        assert unit.is_dead

    def test_stale_target_is_noop(self, duel, resolver):
        place_unit(duel, 1, FOOTMAN)

        resolver.resolve(duel, effects.damage(6), source_side=0, target=3)
        resolver.resolve(duel, effects.damage(6), source_side=0, target=None)

        assert duel.side(1).board[0].health == 2
        assert resolver.events == []

    def test_armor_absorbs_first(self, duel, resolver):
        duel.side(1).hero.armor = 3

        resolver.resolve(duel, effects.damage(5), source_side=0, target=HERO_TARGET)

        hero = duel.side(1).hero
        assert hero.armor == 0
        assert hero.health == 28

    def test_aoe_hits_enemy_board_only(self, duel, resolver):
        place_unit(duel, 0, STORMWIND_KNIGHT)
        place_unit(duel, 1, STORMWIND_KNIGHT)
        place_unit(duel, 1, FOOTMAN)

        resolver.resolve(duel, effects.aoe_damage(2), source_side=0)

        assert [u.health for u in duel.side(1).board] == [3, 0]
        assert duel.side(0).board[0].health == 5

    def test_divine_shield_absorbs_spell(self, duel, resolver):
        place_unit(duel, 1, SHIELDED_SQUIRE)

        resolver.resolve(duel, effects.damage(6), source_side=0, target=0)

        squire = duel.side(1).board[0]
        assert squire.health == 1
        assert [e.kind for e in resolver.events] == ["divine_shield_popped"]


class TestHeal:
    """Tests for healing caps."""

    def test_hero_capped_at_max(self, duel, resolver):
        duel.side(0).hero.health = 25

        resolver.resolve(duel, effects.heal(8), source_side=0, target=HERO_TARGET)

        assert duel.side(0).hero.health == 30
        assert resolver.events[-1].data["amount"] == 5

    def test_unit_capped_at_max_health(self, duel, resolver):
        unit = place_unit(duel, 0, STORMWIND_KNIGHT)
        unit.health = 1

        resolver.resolve(duel, effects.heal(8), source_side=0, target=0)

        assert unit.health == 5


class TestBuff:
    """Tests for buffs."""

    def test_buff_raises_max_health(self, duel, resolver):
        unit = place_unit(duel, 0, FOOTMAN)

        resolver.resolve(duel, effects.buff(1, 2), source_side=0, target=0)

        assert unit.attack == 2
        assert unit.health == 4
        assert unit.max_health == 4

    def test_buff_all_skips_source(self, duel, resolver):
        first = place_unit(duel, 0, FOOTMAN)
        source = place_unit(duel, 0, FOOTMAN)

        resolver.resolve(
            duel,
            effects.buff_all(2, 2),
            source_side=0,
            source_instance_id=source.instance_id,
        )

        assert (first.attack, first.health) == (3, 4)
        assert (source.attack, source.health) == (1, 2)


class TestMana:
    """Tests for temporary mana."""

    def test_gain_mana_is_temporary(self, duel, resolver):
        resolver.resolve(duel, effects.gain_mana(1), source_side=0)

        mana = duel.side(0).mana
        assert mana.temporary == 1
        assert mana.current == 10
        assert mana.max == 10
        assert mana.available == 11

    def test_temporary_spent_first(self, duel):
        mana = duel.side(0).mana
        mana.temporary = 1

        mana.spend(3)

        assert mana.temporary == 0
        assert mana.current == 8


class TestDraw:
    """Tests for drawing, fatigue and burning."""

    def test_draws_top_card(self, duel, resolver):
        stock_deck(duel, 0, FOOTMAN, 1)
        stock_deck(duel, 0, STORMWIND_KNIGHT, 1)

        card = resolver.draw(duel, 0)

        assert card.card is FOOTMAN
        assert duel.side(0).hand == [card]
        assert len(duel.side(0).deck) == 1

    def test_fatigue_grows(self, duel, resolver):
        healths = []
        for _ in range(3):
            assert resolver.draw(duel, 0) is None
            healths.append(duel.side(0).hero.health)

        assert healths == [29, 27, 24]
        assert duel.side(0).fatigue == 3

    def test_full_hand_burns(self, duel, resolver):
        for _ in range(MAX_HAND_SIZE):
            give_card(duel, 0, FOOTMAN)
        stock_deck(duel, 0, STORMWIND_KNIGHT, 1)

        assert resolver.draw(duel, 0) is None

        side = duel.side(0)
        assert len(side.hand) == MAX_HAND_SIZE
        assert side.deck == []
        assert resolver.events[-1].kind == "card_burned"

    def test_draw_effect_draws_for_source(self, duel, resolver):
        stock_deck(duel, 1, FOOTMAN, 3)

        resolver.resolve(duel, effects.draw(2), source_side=1)

        assert len(duel.side(1).hand) == 2
        assert duel.side(0).hand == []


class TestSummon:
    """Tests for summon effects."""

    SPEC = SummonSpec(card_id="token", name="Token", attack=2, health=2)

    def test_summon_appends_unit(self, duel, resolver):
        place_unit(duel, 0, FOOTMAN)

        resolver.resolve(duel, effects.summon(self.SPEC), source_side=0)

        board = duel.side(0).board
        assert len(board) == 2
        assert board[1].card_id == "token"
        assert board[1].acted

    @pytest.mark.parametrize("side", [0, 1])
    def test_summon_suppressed_on_full_board(self, duel, resolver, side):
        for _ in range(7):
            place_unit(duel, side, unit_card())

        resolver.resolve(duel, effects.summon(self.SPEC), source_side=side)

        assert len(duel.side(side).board) == 7
        assert resolver.events[-1].kind == "summon_suppressed"
