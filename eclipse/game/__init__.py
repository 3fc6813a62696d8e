"""Eclipse of Empires rules engine.

A hex-map strategy game for one human and up to three AI empires, built
around secret roles, bluffed territory claims and challenges.
"""

from .game import EclipseGame, IntentResult
from .options import AiTuning, EclipseOptions
from .cards import EVENT_CARDS, Deck, EffectKind, EffectTarget, EventCard, EventEffect
from .objectives import OBJECTIVES, Objective, ObjectiveDeck
from .scoring import ScoreBreakdown
from .state import (
    ActionKind,
    CitizenRole,
    GamePhase,
    GameState,
    HexTile,
    LogEntry,
    LogKind,
    Player,
    RelicPower,
    Resource,
    Stance,
    TileType,
    Trait,
)

__all__ = [
    # Engine
    "EclipseGame",
    "IntentResult",
    "EclipseOptions",
    "AiTuning",
    # Cards and objectives
    "EVENT_CARDS",
    "Deck",
    "EffectKind",
    "EffectTarget",
    "EventCard",
    "EventEffect",
    "OBJECTIVES",
    "Objective",
    "ObjectiveDeck",
    # State
    "ScoreBreakdown",
    "ActionKind",
    "CitizenRole",
    "GamePhase",
    "GameState",
    "HexTile",
    "LogEntry",
    "LogKind",
    "Player",
    "RelicPower",
    "Resource",
    "Stance",
    "TileType",
    "Trait",
]
