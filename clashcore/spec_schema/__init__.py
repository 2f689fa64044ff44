"""
Spec Schema - Authored game data and its structured effect language.

The data is an immutable, versioned snapshot:
- game_data: frozen definitions for characters, cards, statuses, keywords
- effect_dsl: tagged effect-tree variants and their factories
- schemas: pydantic contract for the JSON export
- validation: load-time integrity checks
"""

from .effect_dsl import Effect, EffectType, Timing, Amount, Condition
from .game_data import (
    GameData,
    CardDefinition,
    CharacterDefinition,
    StatusDefinition,
    KeywordDefinition,
    Speed,
)
from .validation import ValidationResult, validate_game_data, require_valid
from .schemas import GameDataModel, load_game_data, load_game_data_file

__all__ = [
    "Effect",
    "EffectType",
    "Timing",
    "Amount",
    "Condition",
    "GameData",
    "CardDefinition",
    "CharacterDefinition",
    "StatusDefinition",
    "KeywordDefinition",
    "Speed",
    "ValidationResult",
    "validate_game_data",
    "require_valid",
    "GameDataModel",
    "load_game_data",
    "load_game_data_file",
]
