"""Event card definitions and deck management for Eclipse of Empires."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from mashumaro.mixins.json import DataClassJSONMixin

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom

logger = logging.getLogger(__name__)


class EffectKind(str, Enum):
    """Effect kinds an event card can carry."""

    RESOURCE_GAIN = "resource_gain"
    RESOURCE_LOSS = "resource_loss"
    FORTIFY_REMOVE = "fortify_remove"  # Destroy one random fort on the map
    TILE_REMOVE = "tile_remove"  # Neutralize one random revealed owned tile
    COMBAT_BONUS = "combat_bonus"
    BLOCK_ATTACK = "block_attack"
    TRADE_FREE = "trade_free"
    DOUBLE_ACTION = "double_action"  # Pay 2 Gold for one extra action
    # Relic powers
    PASSIVE_INCOME = "passive_income"
    FREE_FORTIFY = "free_fortify"
    WARLORD = "warlord"
    TRADE_BARON = "trade_baron"
    DOUBLE_TIME = "double_time"


# Effect kinds that grant a permanent relic power when drawn from a relic
POWER_EFFECTS: frozenset[str] = frozenset(
    {
        EffectKind.PASSIVE_INCOME,
        EffectKind.FREE_FORTIFY,
        EffectKind.WARLORD,
        EffectKind.TRADE_BARON,
        EffectKind.DOUBLE_TIME,
    }
)


class EffectTarget(str, Enum):
    """Who (or which resource) an effect applies to."""

    SELF = "self"
    ALL = "all"
    ENEMY = "enemy"
    GRAIN = "grain"
    GOLD = "gold"


@dataclass
class EventEffect(DataClassJSONMixin):
    """One effect descriptor of an event card."""

    kind: EffectKind
    value: int = 0
    target: EffectTarget = EffectTarget.SELF
    # Human picks the resources; AI takes a floor/ceil Grain/Gold split
    choice: bool = False
    # Extra resource gained alongside the target resource (Blessing of Prosperity)
    bonus: str | None = None


@dataclass
class EventCard(DataClassJSONMixin):
    """An event card with a normal and a relic-powered effect."""

    id: str
    title: str
    normal_text: str
    relic_text: str
    normal_effect: EventEffect
    relic_effect: EventEffect


EVENT_CARDS: list[EventCard] = [
    EventCard(
        "e1",
        "Supply Drop",
        "Gain 2 resources of your choice",
        "Gain 4 resources of your choice",
        EventEffect(EffectKind.RESOURCE_GAIN, 2, EffectTarget.GRAIN, choice=True),
        EventEffect(EffectKind.RESOURCE_GAIN, 4, EffectTarget.GRAIN, choice=True),
    ),
    EventCard(
        "e2",
        "Bandit Raid",
        "Lose 1 Gold",
        "Enemy loses 2 Gold",
        EventEffect(EffectKind.RESOURCE_LOSS, 1, EffectTarget.SELF),
        EventEffect(EffectKind.RESOURCE_LOSS, 2, EffectTarget.ENEMY),
    ),
    EventCard(
        "e3",
        "Blessing of Prosperity",
        "Gain 1 Grain, 1 Stone",
        "Gain Passive Income Power",
        EventEffect(EffectKind.RESOURCE_GAIN, 1, EffectTarget.GRAIN, bonus="stone"),
        EventEffect(EffectKind.PASSIVE_INCOME),
    ),
    EventCard(
        "e4",
        "Earthquake",
        "Destroy 1 Fortification",
        "Gain Free Fortify Power",
        EventEffect(EffectKind.FORTIFY_REMOVE, 1, EffectTarget.ALL),
        EventEffect(EffectKind.FREE_FORTIFY),
    ),
    EventCard(
        "e5",
        "Sudden Reinforcements",
        "+1 Combat Strength (This Round)",
        "Gain Warlord Power",
        EventEffect(EffectKind.COMBAT_BONUS, 1, EffectTarget.SELF),
        EventEffect(EffectKind.WARLORD),
    ),
    EventCard(
        "e6",
        "Merchant Windfall",
        "Gain 2 Gold",
        "Gain Trade Baron Power",
        EventEffect(EffectKind.RESOURCE_GAIN, 2, EffectTarget.GOLD),
        EventEffect(EffectKind.TRADE_BARON),
    ),
    EventCard(
        "e99",
        "Fog of War",
        "Attacks Blocked",
        "Free Fortify Power",
        EventEffect(EffectKind.BLOCK_ATTACK, 0, EffectTarget.ALL),
        EventEffect(EffectKind.FREE_FORTIFY),
    ),
    EventCard(
        "e98",
        "Diplomatic Envoys",
        "+1 Combat Strength",
        "Gain Warlord Power",
        EventEffect(EffectKind.COMBAT_BONUS, 1, EffectTarget.SELF),
        EventEffect(EffectKind.WARLORD),
    ),
    EventCard(
        "e9",
        "Forced March",
        "Double Action (Cost 2 Gold)",
        "Gain Double Time Power",
        EventEffect(EffectKind.DOUBLE_ACTION, 0, EffectTarget.SELF),
        EventEffect(EffectKind.DOUBLE_TIME),
    ),
    EventCard(
        "e8",
        "Golden Age",
        "Gain 2 Gold",
        "Gain Trade Baron Power",
        EventEffect(EffectKind.RESOURCE_GAIN, 2, EffectTarget.GOLD),
        EventEffect(EffectKind.TRADE_BARON),
    ),
]

_CARDS_BY_ID: dict[str, EventCard] = {card.id: card for card in EVENT_CARDS}


def get_event_card(card_id: str) -> EventCard:
    """Look up an event card by id."""
    card = _CARDS_BY_ID.get(card_id)
    if card is None:
        raise ValueError(f"Unknown event card: {card_id}")
    return card


@dataclass
class Deck(DataClassJSONMixin):
    """Event draw pile and discard pile, holding card ids.

    A drawn card goes straight to the discard pile, so the two piles
    together always hold every card of the deck.
    """

    draw_pile: list[str] = field(default_factory=list)
    discard_pile: list[str] = field(default_factory=list)

    def build_standard_deck(self) -> None:
        """Put one copy of every event card in the draw pile."""
        self.draw_pile = [card.id for card in EVENT_CARDS]
        self.discard_pile = []

    def shuffle(self, rng: GameRandom) -> None:
        rng.shuffle(self.draw_pile)

    def draw(self, rng: GameRandom) -> tuple[EventCard, bool]:
        """Draw the top card, reshuffling the discard pile in when empty.

        Returns:
            The card drawn and whether a reshuffle happened first.
        """
        reshuffled = False
        if self.is_empty():
            if self.discard_pile:
                self.draw_pile = self.discard_pile
                self.discard_pile = []
            else:
                # Both piles lost; start over from a fresh deck
                self.build_standard_deck()
            rng.shuffle(self.draw_pile)
            reshuffled = True
            logger.info("Event deck reshuffled from %d discards", len(self.draw_pile))

        card_id = self.draw_pile.pop(0)
        self.discard_pile.append(card_id)
        return get_event_card(card_id), reshuffled

    def is_empty(self) -> bool:
        return len(self.draw_pile) == 0

    def size(self) -> int:
        """Get the number of cards left to draw."""
        return len(self.draw_pile)

    def total(self) -> int:
        """Get the number of cards across both piles."""
        return len(self.draw_pile) + len(self.discard_pile)
