"""
Skirmish - Card Duel and Autobattler Engine

An authoritative game-state engine for a two-player collectible-card duel
and a single-player autobattler combat phase, built on shared card/unit
primitives. The engine provides:
- A static card catalog
- A legality-checked duel state machine
- Effect resolution (battlecry, spell, deathrattle) with cleanup cascades
- A probabilistic autobattler combat resolver
- A session registry that hands events to a transport layer
"""

__version__ = "0.1.0"
