"""
Roster snapshots for autobattler combat.

A roster is a copy of one side's units going into a combat. The resolver
mutates the copy freely; the caller's board is never aliased.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(eq=False)
class RosterUnit:
    """
    One unit in a combat roster.

    max_health is tracked separately so the health ratio stays meaningful
    during the fight. tier is the unit's weight in the damage calculation.
    Dead units stay in the roster for final-state reporting. Equality is
    identity, so a roster can hold two units with identical stats.
    """
    name: str
    attack: int
    health: int
    max_health: int
    tier: int = 1
    unit_id: str | None = None
    dead: bool = False

    @property
    def alive(self) -> bool:
        return not self.dead and self.health > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "name": self.name,
            "attack": self.attack,
            "health": self.health,
            "max_health": self.max_health,
            "tier": self.tier,
            "dead": self.dead,
        }


def _field(source: Any, name: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


def to_roster_unit(source: Any) -> RosterUnit:
    """
    Copy a unit-like value into a fresh RosterUnit.

    Accepts RosterUnit, pool units, duel unit instances, or dicts with
    name/attack/health and optional max_health/tier (or weight).
    max_health never drops below health.
    """
    health = int(_field(source, "health"))
    tier = _field(source, "tier")
    if tier is None:
        tier = _field(source, "weight", 1)
    max_health = _field(source, "max_health")
    unit_id = _field(source, "unit_id")
    if unit_id is None:
        unit_id = _field(source, "instance_id")
    return RosterUnit(
        name=str(_field(source, "name", "Unit")),
        attack=int(_field(source, "attack")),
        health=health,
        max_health=max(int(max_health), health) if max_health is not None else health,
        tier=int(tier),
        unit_id=str(unit_id) if unit_id is not None else None,
        dead=bool(_field(source, "dead", False)) or health <= 0,
    )


def snapshot_roster(units: Iterable[Any]) -> list[RosterUnit]:
    """Copy a sequence of units into a new roster."""
    return [to_roster_unit(unit) for unit in units]


def living(roster: list[RosterUnit]) -> list[RosterUnit]:
    return [unit for unit in roster if unit.alive]
