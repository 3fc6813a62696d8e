"""Shared game utilities."""

from .bot_helper import BotHelper
from .countdown import TICKS_PER_SECOND, CountdownTimer
from .options import BoolOption, GameOptions, IntOption, MenuOption, option_field
from .rng import GameRandom, ScriptedRandom
from .turn_management_mixin import TurnManagementMixin

__all__ = [
    "BotHelper",
    "TICKS_PER_SECOND",
    "CountdownTimer",
    "BoolOption",
    "GameOptions",
    "IntOption",
    "MenuOption",
    "option_field",
    "GameRandom",
    "ScriptedRandom",
    "TurnManagementMixin",
]
