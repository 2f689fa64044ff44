"""
Standard - The built-in data set.

Key pieces:
- A full status catalogue covering every status family the engine models
- Lifecycle and clash keywords
- Six characters whose cards exercise the whole effect DSL
- Demo rosters for an unattended match

This module contains:
- Status and keyword definitions
- Character rosters
- create_standard_data(), the validated GameData snapshot
"""

from ...spec_schema.game_data import GameData
from ...spec_schema.validation import require_valid
from .roster import DEMO_ROSTERS, STANDARD_CHARACTERS
from .statuses import STANDARD_KEYWORDS, STANDARD_STATUSES, standard_statuses

STANDARD_VERSION = "standard-1.0.0"


def create_standard_data() -> GameData:
    """Build and validate the standard GameData snapshot."""
    statuses, keywords = standard_statuses()
    data = GameData(
        version=STANDARD_VERSION,
        characters=STANDARD_CHARACTERS,
        statuses=statuses,
        keywords=keywords,
    )
    require_valid(data)
    return data


__all__ = [
    "create_standard_data",
    "standard_statuses",
    "STANDARD_CHARACTERS",
    "STANDARD_STATUSES",
    "STANDARD_KEYWORDS",
    "STANDARD_VERSION",
    "DEMO_ROSTERS",
]
