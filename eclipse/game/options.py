"""Game options and AI tuning parameters for Eclipse of Empires."""

from dataclasses import dataclass, field

from mashumaro.mixins.json import DataClassJSONMixin

from ..game_utils.options import (
    GameOptions,
    IntOption,
    MenuOption,
    BoolOption,
    option_field,
)

RULESET_STANDARD = "standard"  # False accusers lose their next turn
RULESET_CASUAL = "casual"  # False accusers pay 2 Gold reparations

DIFFICULTY_STANDARD = "standard"
DIFFICULTY_HARD = "hard"


@dataclass
class AiTuning(DataClassJSONMixin):
    """Probabilities and thresholds that shape AI behavior.

    These are balance values rather than rules, so they live in one place
    and can be overridden per game.
    """

    # Challenging a human claim
    challenge_base: float = 0.05
    challenge_suspicion_threshold: int = 60
    challenge_suspicion_bonus: float = 0.3
    challenge_paranoid_bonus: float = 0.3
    challenge_greedy_bonus: float = 0.1
    challenge_hard_bonus: float = 0.2

    # Turn decisions
    bluff_chance: float = 0.4
    relic_unveil_chance: float = 0.3
    vengeance_chance: float = 0.7
    ruin_preference: float = 0.6
    builder_chance: float = 0.6
    warrior_chance: float = 0.6

    # Psychology
    fear_ratio_high: float = 1.2
    fear_ratio_low: float = 0.8
    fear_rise: int = 5
    fear_fall: int = 2
    suspicion_ratio: float = 1.5
    suspicion_rise: int = 2
    paranoid_suspicion: int = 10
    cautious_fear: int = 5
    hard_drift: int = 2
    hard_vp_lead: int = 5
    hard_starting_mood: int = 20
    war_threshold: int = 80
    hostile_threshold: int = 50


@dataclass
class EclipseOptions(GameOptions):
    """Options for an Eclipse of Empires game."""

    player_count: int = option_field(
        IntOption(default=4, min_val=2, max_val=4, label="Number of empires")
    )
    total_rounds: int = option_field(
        IntOption(default=5, min_val=1, max_val=10, label="Eclipses per game")
    )
    ruleset: str = option_field(
        MenuOption(
            default=RULESET_STANDARD,
            choices=[RULESET_STANDARD, RULESET_CASUAL],
            label="Ruleset",
        )
    )
    ai_difficulty: str = option_field(
        MenuOption(
            default=DIFFICULTY_STANDARD,
            choices=[DIFFICULTY_STANDARD, DIFFICULTY_HARD],
            label="AI difficulty",
        )
    )
    challenge_window_seconds: int = option_field(
        IntOption(default=5, min_val=1, max_val=30, label="Challenge window (seconds)")
    )
    bot_think_ticks: int = option_field(
        IntOption(default=30, min_val=0, max_val=100, label="AI thinking delay (ticks)")
    )
    spectate: bool = option_field(
        BoolOption(default=False, label="All empires controlled by AI")
    )
    auto_advance: bool = option_field(
        BoolOption(default=False, label="Advance phases automatically")
    )

    # Not exposed through set_option
    tuning: AiTuning = field(default_factory=AiTuning)

    @property
    def is_casual(self) -> bool:
        return self.ruleset == RULESET_CASUAL

    @property
    def is_hard(self) -> bool:
        return self.ai_difficulty == DIFFICULTY_HARD
