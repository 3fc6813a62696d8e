"""Game state definitions for Eclipse of Empires."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum

from mashumaro.config import BaseConfig
from mashumaro.mixins.json import DataClassJSONMixin

from ..game_utils.countdown import CountdownTimer
from ..game_utils.turn_management_mixin import TurnManagementMixin
from .cards import Deck
from .objectives import ObjectiveDeck
from .options import EclipseOptions


class TileType(str, Enum):
    """Terrain kinds a hex can hold."""

    PLAINS = "plains"  # Produces Grain
    MOUNTAINS = "mountains"  # Produces Stone
    GOLDMINE = "goldmine"  # Produces Gold
    RELIC_SITE = "relic_site"  # Produces Relic, triggers a relic event when revealed
    RUINS = "ruins"  # Scavenged for an event card, then collapses to Plains
    CAPITAL = "capital"  # Produces 1 Grain, 1 Stone and 1 Gold


class Resource(str, Enum):
    """Resources held by a player."""

    GRAIN = "grain"
    STONE = "stone"
    GOLD = "gold"
    RELIC = "relic"


class CitizenRole(str, Enum):
    """Roles chosen secretly each round."""

    MERCHANT = "merchant"  # Trade Grain for Gold
    BUILDER = "builder"  # Fortify owned tiles
    WARRIOR = "warrior"  # Attack adjacent rival tiles
    EXPLORER = "explorer"  # Claim adjacent neutral tiles


class GamePhase(str, Enum):
    """Round phases."""

    INCOME = "income"
    CITIZEN_CHOICE = "citizen_choice"
    ACTION = "action"  # Turn-cycling until everyone passes
    EVENTS = "events"
    SCORING = "scoring"
    END_GAME = "end_game"


class ActionKind(str, Enum):
    """Actions the resolver understands."""

    TRADE = "trade"
    FORTIFY = "fortify"
    ATTACK = "attack"
    EXPLORE = "explore"  # Claim or scavenge
    ACTIVATE_RELIC = "activate_relic"
    MARKET = "market"  # Emergency exchange, any role


class RelicPower(str, Enum):
    """Permanent powers granted by relic events. One held at a time."""

    PASSIVE_INCOME = "passive_income"  # +1 Grain, +1 Gold income
    FREE_FORTIFY = "free_fortify"  # First fortify of the round is free
    WARLORD = "warlord"  # +1 attack strength
    TRADE_BARON = "trade_baron"  # One free trade each round
    DOUBLE_TIME = "double_time"  # One extra action each round


class Stance(str, Enum):
    """Diplomatic stance of an AI toward the human."""

    NEUTRAL = "neutral"
    HOSTILE = "hostile"
    WAR = "war"


class Trait(str, Enum):
    """AI personality traits."""

    EXPANSIONIST = "expansionist"
    CAUTIOUS = "cautious"
    AGGRESSIVE = "aggressive"
    VENGEFUL = "vengeful"
    GREEDY = "greedy"
    TREACHEROUS = "treacherous"
    PARANOID = "paranoid"
    DEFENSIVE = "defensive"


class LogKind(str, Enum):
    """Narration categories for the game log."""

    INFO = "info"
    COMBAT = "combat"
    EVENT = "event"
    PHASE = "phase"
    BLUFF = "bluff"
    ALERT = "alert"


# Resource produced by each tile type (Capital and Ruins handled separately)
TILE_RESOURCE: dict[TileType, Resource] = {
    TileType.PLAINS: Resource.GRAIN,
    TileType.MOUNTAINS: Resource.STONE,
    TileType.GOLDMINE: Resource.GOLD,
    TileType.RELIC_SITE: Resource.RELIC,
}

CAPITAL_YIELD = [Resource.GRAIN, Resource.STONE, Resource.GOLD]

# Tile multiset per 25 hexes
TILE_COUNTS: dict[TileType, int] = {
    TileType.PLAINS: 16,
    TileType.MOUNTAINS: 10,
    TileType.GOLDMINE: 4,
    TileType.RUINS: 4,
    TileType.RELIC_SITE: 2,
}

# Victory points
TILE_VP: dict[TileType, int] = {
    TileType.PLAINS: 1,
    TileType.MOUNTAINS: 1,
    TileType.GOLDMINE: 1,
    TileType.RELIC_SITE: 2,
    TileType.RUINS: 0,
    TileType.CAPITAL: 2,
}
FORTIFICATION_VP = 1
RELIC_TOKEN_VP = 2

# Action base costs: action -> (resource, amount). Fatigue adds 1 after the first action.
ACTION_COSTS: dict[ActionKind, tuple[Resource, int]] = {
    ActionKind.TRADE: (Resource.GRAIN, 2),
    ActionKind.FORTIFY: (Resource.STONE, 2),
    ActionKind.ATTACK: (Resource.GRAIN, 1),
    ActionKind.EXPLORE: (Resource.GRAIN, 1),
}

# Role each role-bound action requires
ACTION_ROLES: dict[ActionKind, CitizenRole] = {
    ActionKind.TRADE: CitizenRole.MERCHANT,
    ActionKind.FORTIFY: CitizenRole.BUILDER,
    ActionKind.ATTACK: CitizenRole.WARRIOR,
    ActionKind.EXPLORE: CitizenRole.EXPLORER,
}

MARKET_RATE = 3  # Units paid for 1 unit at the emergency market
SURPLUS_GRAIN = 4  # Above this much Grain any role may trade
CHALLENGE_FINE = 2  # Gold paid by a false accuser under casual rules
STARTING_RESOURCES: dict[Resource, int] = {
    Resource.GRAIN: 2,
    Resource.STONE: 1,
    Resource.GOLD: 1,
    Resource.RELIC: 0,
}

# Bonus starting resources from the hex a capital replaced
CAPITAL_SITE_BONUS: dict[TileType, dict[Resource, int]] = {
    TileType.PLAINS: {Resource.GRAIN: 2},
    TileType.MOUNTAINS: {Resource.STONE: 2},
    TileType.GOLDMINE: {Resource.GOLD: 2},
    TileType.RELIC_SITE: {Resource.GOLD: 1, Resource.STONE: 1},
}
DEFAULT_SITE_BONUS: dict[Resource, int] = {Resource.GRAIN: 1, Resource.STONE: 1}


@dataclass
class Faction(DataClassJSONMixin):
    """Identity of an empire. Has no effect on rules."""

    name: str
    title: str
    personality: str


FACTIONS: list[Faction] = [
    Faction("Terran Republic", "The United Colonies", "balanced"),
    Faction("Mars Confederacy", "Red Dust Raiders", "aggressive"),
    Faction("Venusian Syndicate", "Cloud City Trade", "expansionist"),
    Faction("Jovian Empire", "Gas Giant Kings", "defensive"),
]

FACTION_TRAITS: dict[str, list[Trait]] = {
    "Terran Republic": [Trait.EXPANSIONIST, Trait.CAUTIOUS],
    "Mars Confederacy": [Trait.AGGRESSIVE, Trait.VENGEFUL],
    "Venusian Syndicate": [Trait.GREEDY, Trait.TREACHEROUS],
    "Jovian Empire": [Trait.PARANOID, Trait.DEFENSIVE],
}


@dataclass
class Fortification(DataClassJSONMixin):
    """A fort built on a tile."""

    owner_id: int
    level: int = 1


@dataclass
class HexTile(DataClassJSONMixin):
    """A single hex of the map."""

    q: int
    r: int
    id: str
    col: int  # Offset coordinates, 1-based, for narration
    row: int
    true_type: TileType
    public_type: TileType  # As declared/shown to everyone
    is_revealed: bool = False
    owner_id: int | None = None
    fortification: Fortification | None = None

    @property
    def is_bluffed(self) -> bool:
        """Check if the public type disagrees with the true type."""
        return self.public_type != self.true_type

    @property
    def label(self) -> str:
        """Get the offset coordinates used in log text."""
        return f"[{self.col},{self.row}]"

    def clear_owner(self) -> None:
        """Make the tile neutral. Forts cannot exist on neutral tiles."""
        self.owner_id = None
        self.fortification = None

    def reveal(self) -> None:
        """Expose the true type to everyone."""
        self.is_revealed = True
        self.public_type = self.true_type


@dataclass
class ResourcePool(DataClassJSONMixin):
    """Non-negative resource counts."""

    grain: int = 0
    stone: int = 0
    gold: int = 0
    relic: int = 0

    def get(self, resource: str) -> int:
        """Get the count of a resource."""
        return getattr(self, Resource(resource).value)

    def add(self, resource: str, amount: int = 1) -> None:
        """Add to a resource. Negative amounts are clamped at zero."""
        name = Resource(resource).value
        setattr(self, name, max(0, getattr(self, name) + amount))

    def remove(self, resource: str, amount: int = 1) -> int:
        """Remove up to amount of a resource. Returns how much was removed."""
        taken = min(self.get(resource), amount)
        self.add(resource, -taken)
        return taken

    def has(self, resource: str, amount: int) -> bool:
        """Check if at least amount of a resource is held."""
        return self.get(resource) >= amount

    def total(self) -> int:
        """Total units held across all resources."""
        return self.grain + self.stone + self.gold + self.relic


@dataclass
class PlayerStats(DataClassJSONMixin):
    """Lifetime counters used by objectives."""

    battles_won: int = 0
    tiles_revealed: int = 0
    tiles_lost: int = 0
    attacks_made: int = 0
    unique_players_attacked: list[int] = field(default_factory=list)
    relic_events_triggered: int = 0
    relic_sites_revealed: int = 0
    max_resources_held: int = 4

    def record_attack(self, defender_id: int) -> None:
        """Count an attack against a rival."""
        self.attacks_made += 1
        if defender_id not in self.unique_players_attacked:
            self.unique_players_attacked.append(defender_id)


@dataclass
class PlayerStatus(DataClassJSONMixin):
    """Round-scoped effects. Reset at the start of every round."""

    can_attack: bool = True
    combat_bonus: int = 0
    free_trades: int = 0
    free_fortify: bool = False
    extra_actions: int = 0
    turn_lost: bool = False  # Auto-pass at the next turn (false accusation penalty)
    passive_income: bool = False

    def reset(self) -> None:
        """Clear all round-scoped effects."""
        self.can_attack = True
        self.combat_bonus = 0
        self.free_trades = 0
        self.free_fortify = False
        self.extra_actions = 0
        self.turn_lost = False
        self.passive_income = False


@dataclass
class AiState(DataClassJSONMixin):
    """Persistent psychology of an AI empire."""

    fear: int = 0
    suspicion: int = 0
    stance: Stance = Stance.NEUTRAL
    traits: list[Trait] = field(default_factory=list)
    pending_dialogue: str | None = None

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits


@dataclass
class Player(DataClassJSONMixin):
    """An empire, human or AI."""

    id: int
    name: str
    faction: Faction
    is_human: bool = False
    resources: ResourcePool = field(default_factory=ResourcePool)
    relic_power: RelicPower | None = None
    selected_citizen: CitizenRole | None = None
    vp: int = 0
    secret_objectives: list[str] = field(default_factory=list)  # Objective ids
    stats: PlayerStats = field(default_factory=PlayerStats)
    status: PlayerStatus = field(default_factory=PlayerStatus)
    actions_taken: int = 0
    has_passed: bool = False
    is_eliminated: bool = False
    ai_state: AiState | None = None
    # Bot pacing (logical clock)
    bot_think_ticks: int = 0
    bot_pending_action: str | None = None

    @property
    def is_bot(self) -> bool:
        return not self.is_human

    @property
    def fatigue(self) -> int:
        """Extra cost applied to every action after the first this round."""
        return 1 if self.actions_taken > 0 else 0

    def update_max_resources(self) -> None:
        """Track the largest stockpile ever held."""
        self.stats.max_resources_held = max(
            self.stats.max_resources_held, self.resources.total()
        )

    def gain(self, resource: str, amount: int = 1) -> None:
        """Add resources and update the stockpile record."""
        self.resources.add(resource, amount)
        self.update_max_resources()


@dataclass
class PendingChallenge(DataClassJSONMixin):
    """An AI claim waiting for the human to trust or challenge it."""

    declarer_id: int
    tile_id: str
    declared_type: TileType
    true_type: TileType
    timer: CountdownTimer = field(default_factory=CountdownTimer)


@dataclass
class PendingDeclaration(DataClassJSONMixin):
    """A human claim waiting for the declared tile type."""

    player_id: int
    tile_id: str


@dataclass
class PendingChoice(DataClassJSONMixin):
    """An event waiting for the human to pick resources."""

    player_id: int
    card_id: str
    remaining: int
    resume_turn: bool = False  # True when raised during the Action phase


@dataclass
class DiceDetail(DataClassJSONMixin):
    """Strength and die results of one battle."""

    att: int
    def_: int
    att_roll: int
    def_roll: int

    class Config(BaseConfig):
        aliases = {"def_": "def"}
        serialize_by_alias = True


@dataclass
class LogDetail(DataClassJSONMixin):
    """Structured data attached to a log entry."""

    dice: DiceDetail | None = None
    card: str | None = None
    tile_type: TileType | None = None
    declared_type: TileType | None = None


@dataclass
class LogEntry(DataClassJSONMixin):
    """One line of player-facing narration."""

    turn: int
    text: str
    kind: LogKind = LogKind.INFO
    actor_id: int | None = None
    target_id: int | None = None
    detail: LogDetail | None = None


@dataclass
class GameState(TurnManagementMixin, DataClassJSONMixin):
    """Root aggregate of a game. Mutated only by the engine's transitions."""

    class Config(BaseConfig):
        # Serialize all fields (don't omit defaults - breaks state restoration)
        serialize_by_alias = True

    options: EclipseOptions = field(default_factory=EclipseOptions)
    phase: GamePhase = GamePhase.INCOME
    round: int = 1
    turn_order: list[int] = field(default_factory=list)
    turn_order_index: int = 0
    pass_order: list[int] = field(default_factory=list)
    players: list[Player] = field(default_factory=list)
    tiles: dict[str, HexTile] = field(default_factory=dict)
    logs: list[LogEntry] = field(default_factory=list)

    # Suspension points
    pending_challenge: PendingChallenge | None = None
    pending_declaration: PendingDeclaration | None = None
    pending_choice: PendingChoice | None = None

    # Decks
    event_deck: Deck = field(default_factory=Deck)
    active_event: str | None = None  # Card id drawn this Events phase
    objective_deck: ObjectiveDeck = field(default_factory=ObjectiveDeck)
    public_objectives: list[str] = field(default_factory=list)

    def copy(self) -> GameState:
        """Get an independent snapshot of this state."""
        return copy.deepcopy(self)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    def get_player(self, player_id: int | None) -> Player | None:
        """Get a player by id."""
        if player_id is None or player_id < 0 or player_id >= len(self.players):
            return None
        return self.players[player_id]

    @property
    def human(self) -> Player | None:
        """Get the human seat, if any."""
        for player in self.players:
            if player.is_human:
                return player
        return None

    def get_active_players(self) -> list[Player]:
        """Get players that have not been eliminated."""
        return [p for p in self.players if not p.is_eliminated]

    def get_tile(self, tile_id: str | None) -> HexTile | None:
        """Get a tile by id."""
        if tile_id is None:
            return None
        return self.tiles.get(tile_id)

    def owned_tiles(self, player_id: int) -> list[HexTile]:
        """Get all tiles owned by a player."""
        return [t for t in self.tiles.values() if t.owner_id == player_id]

    def fortified_tiles(self, player_id: int) -> list[HexTile]:
        """Get all tiles carrying a fort built by a player."""
        return [
            t
            for t in self.tiles.values()
            if t.fortification and t.fortification.owner_id == player_id
        ]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.END_GAME

    @property
    def is_suspended(self) -> bool:
        """Check if the engine is waiting on a sub-flow to finish."""
        return (
            self.pending_challenge is not None
            or self.pending_declaration is not None
            or self.pending_choice is not None
        )

    # ==========================================================================
    # Log
    # ==========================================================================

    def add_log(
        self,
        text: str,
        kind: LogKind = LogKind.INFO,
        actor_id: int | None = None,
        target_id: int | None = None,
        detail: LogDetail | None = None,
    ) -> LogEntry:
        """Append a narration entry for the current round.

        An AI actor's pending dialogue line is spoken here, then cleared.
        """
        actor = self.get_player(actor_id)
        if actor and actor.ai_state and actor.ai_state.pending_dialogue:
            text = f'"{actor.ai_state.pending_dialogue}" - {text}'
            actor.ai_state.pending_dialogue = None
        entry = LogEntry(
            turn=self.round,
            text=text,
            kind=kind,
            actor_id=actor_id,
            target_id=target_id,
            detail=detail,
        )
        self.logs.append(entry)
        return entry
