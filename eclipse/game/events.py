"""Event card effects for Eclipse of Empires.

Event cards are resolved in three contexts:
- Global: drawn in the Events phase, normal effect applies to every empire
- Scavenge: drawn from Ruins, normal effect applies to the scavenger only
- Relic: drawn when a relic is unveiled, relic effect applies to the actor
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .cards import POWER_EFFECTS, EffectKind, EffectTarget, EventCard, EventEffect
from .state import (
    LogDetail,
    LogKind,
    PendingChoice,
    RelicPower,
    Resource,
)

if TYPE_CHECKING:
    from ..game_utils.rng import GameRandom
    from .state import GameState, Player

logger = logging.getLogger(__name__)

RELIC_POWER_NAMES: dict[str, str] = {
    RelicPower.PASSIVE_INCOME: "Crown of Prosperity (Passive Income)",
    RelicPower.FREE_FORTIFY: "Mason's Hammer (Free Fortify)",
    RelicPower.WARLORD: "Warlord's Banner (+1 Combat)",
    RelicPower.TRADE_BARON: "Merchant's Seal (Free Trades)",
    RelicPower.DOUBLE_TIME: "Legion's Stride (Double Action)",
}

FORCED_MARCH_COST = 2  # Gold


def draw_event(state: GameState, rng: GameRandom) -> EventCard:
    """Draw an event card, narrating a reshuffle if one happened."""
    card, reshuffled = state.event_deck.draw(rng)
    if reshuffled:
        state.add_log("Event Deck empty. Discard pile reshuffled.", LogKind.INFO)
    return card


# ==========================================================================
# Entry points
# ==========================================================================


def apply_global_event(state: GameState, card: EventCard, rng: GameRandom) -> None:
    """Apply a card's normal effect to every surviving empire."""
    state.active_event = card.id
    state.add_log(
        f"GLOBAL EVENT: {card.title} - {card.normal_text}",
        LogKind.EVENT,
        detail=LogDetail(card=card.title),
    )
    targets = state.get_active_players()
    _apply_effect(state, card, card.normal_effect, None, targets, rng, resume_turn=False)


def apply_scavenge_event(
    state: GameState, card: EventCard, player: Player, rng: GameRandom
) -> None:
    """Apply a card's normal effect to one empire scavenging Ruins."""
    _apply_effect(state, card, card.normal_effect, player, [player], rng, resume_turn=True)


def trigger_relic_event(state: GameState, player: Player, rng: GameRandom) -> EventCard:
    """Draw a card and apply its relic effect to a player unveiling a relic."""
    card = draw_event(state, rng)
    player.stats.relic_events_triggered += 1
    effect = card.relic_effect

    if effect.kind in POWER_EFFECTS:
        power = RelicPower(EffectKind(effect.kind).value)
        player.relic_power = power
        state.add_log(
            f"{player.name} claims the {RELIC_POWER_NAMES[power]}! (Replaces previous power)",
            LogKind.EVENT,
            actor_id=player.id,
            detail=LogDetail(card=card.title),
        )
        logger.debug("Player %d now holds relic power %s", player.id, power)
        return card

    state.add_log(
        f"RELIC EVENT ({player.name}): {card.title} - {card.relic_text}",
        LogKind.EVENT,
        actor_id=player.id,
        detail=LogDetail(card=card.title),
    )
    _apply_effect(state, card, effect, player, [player], rng, resume_turn=True, relic=True)
    return card


# ==========================================================================
# Effect dispatch
# ==========================================================================


def _apply_effect(
    state: GameState,
    card: EventCard,
    effect: EventEffect,
    actor: Player | None,
    targets: list[Player],
    rng: GameRandom,
    resume_turn: bool,
    relic: bool = False,
) -> None:
    kind = EffectKind(effect.kind)

    if kind == EffectKind.RESOURCE_GAIN:
        for player in targets:
            _gain(state, card, effect, player, resume_turn)

    elif kind == EffectKind.RESOURCE_LOSS:
        if effect.target == EffectTarget.ENEMY:
            rivals = [
                p for p in state.get_active_players() if actor is None or p.id != actor.id
            ]
            if rivals:
                victim = rng.choice(rivals)
                victim.resources.remove(Resource.GOLD, effect.value)
                state.add_log(
                    f"Sabotage: {victim.name} lost {effect.value} Gold!",
                    LogKind.INFO,
                    actor_id=actor.id if actor else None,
                    target_id=victim.id,
                )
        else:
            for player in targets:
                lost = player.resources.remove(Resource.GOLD, effect.value)
                if lost:
                    state.add_log(f"{player.name} loses {lost} Gold.", LogKind.INFO)

    elif kind == EffectKind.FORTIFY_REMOVE:
        forts = [t for t in state.tiles.values() if t.fortification is not None]
        if forts:
            tile = rng.choice(forts)
            tile.fortification = None
            state.add_log(f"Earthquake destroys Fortification at {tile.label}", LogKind.COMBAT)

    elif kind == EffectKind.TILE_REMOVE:
        revealed = [
            t for t in state.tiles.values() if t.is_revealed and t.owner_id is not None
        ]
        if revealed:
            tile = rng.choice(revealed)
            owner = state.get_player(tile.owner_id)
            tile.clear_owner()
            owner.stats.tiles_lost += 1
            state.add_log(
                f"Natural Disaster: {owner.name}'s tile at {tile.label} destroyed.",
                LogKind.COMBAT,
                target_id=owner.id,
            )

    elif kind == EffectKind.COMBAT_BONUS:
        for player in targets:
            player.status.combat_bonus += effect.value
            state.add_log(
                f"{player.name} gains +{effect.value} Combat Strength.", LogKind.INFO
            )

    elif kind == EffectKind.BLOCK_ATTACK:
        for player in state.players:
            player.status.can_attack = False
        if relic and actor is not None:
            actor.status.can_attack = True
            state.add_log(
                f"Quiet Eclipse: Only {actor.name} may attack this round!", LogKind.INFO
            )
        else:
            state.add_log("Quiet Eclipse: All attacks blocked this round.", LogKind.INFO)

    elif kind == EffectKind.TRADE_FREE:
        for player in targets:
            player.status.free_trades += effect.value
            state.add_log(
                f"{player.name} gains {effect.value} Free Trade actions.", LogKind.INFO
            )

    elif kind == EffectKind.DOUBLE_ACTION:
        for player in targets:
            if player.resources.has(Resource.GOLD, FORCED_MARCH_COST):
                player.resources.remove(Resource.GOLD, FORCED_MARCH_COST)
                player.status.extra_actions = 1
                state.add_log(
                    f"{player.name} pays {FORCED_MARCH_COST} Gold "
                    "for Forced March (Double Action).",
                    LogKind.INFO,
                )
            else:
                state.add_log(f"{player.name} could not afford Forced March.", LogKind.INFO)

    # Power kinds outside a relic context grant a one-round version of the power
    elif kind == EffectKind.PASSIVE_INCOME:
        for player in targets:
            player.status.passive_income = True
            state.add_log(f"{player.name} gains Passive Income.", LogKind.INFO)

    elif kind == EffectKind.FREE_FORTIFY:
        for player in targets:
            player.status.free_fortify = True
            state.add_log(f"{player.name} can Fortify for free this round.", LogKind.INFO)

    elif kind == EffectKind.WARLORD:
        for player in targets:
            player.status.combat_bonus += 1
            state.add_log(f"{player.name} gains +1 Combat Strength.", LogKind.INFO)

    elif kind == EffectKind.TRADE_BARON:
        for player in targets:
            player.status.free_trades += 1
            state.add_log(f"{player.name} gains 1 Free Trade action.", LogKind.INFO)

    elif kind == EffectKind.DOUBLE_TIME:
        for player in targets:
            player.status.extra_actions = 1
            state.add_log(f"{player.name} may act twice this round.", LogKind.INFO)

    else:
        raise ValueError(f"Unhandled effect kind: {kind}")


def _gain(
    state: GameState,
    card: EventCard,
    effect: EventEffect,
    player: Player,
    resume_turn: bool,
) -> None:
    amount = effect.value
    if effect.choice and player.is_human:
        state.pending_choice = PendingChoice(
            player_id=player.id,
            card_id=card.id,
            remaining=amount,
            resume_turn=resume_turn,
        )
        return

    if effect.target == EffectTarget.GRAIN and not effect.choice:
        player.gain(Resource.GRAIN, amount)
        if effect.bonus:
            player.gain(effect.bonus, amount)
    else:
        # Split gains lean toward Gold
        player.gain(Resource.GRAIN, amount // 2)
        player.gain(Resource.GOLD, amount - amount // 2)


def choose_event_resource(state: GameState, player: Player, resource: str) -> str | None:
    """Take one unit of a chosen resource for a pending event. Returns error or None."""
    pending = state.pending_choice
    if pending is None:
        return "no-pending-choice"
    if pending.player_id != player.id:
        return "not-your-turn"
    try:
        chosen = Resource(resource)
    except ValueError:
        return "invalid-resource"

    player.gain(chosen, 1)
    pending.remaining -= 1
    state.add_log(
        f"{player.name} chose 1 {chosen.value.capitalize()} from Event.",
        LogKind.INFO,
        actor_id=player.id,
    )
    if pending.remaining <= 0:
        state.pending_choice = None
    return None
