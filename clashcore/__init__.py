"""
Clashcore - Deterministic combat resolution for a card-driven team battle game.

The engine loads an immutable snapshot of authored game data and provides:
- Match setup from a seed and two rosters
- Priority/zone scheduling with simultaneous clash resolution
- Structured effect interpretation and status bookkeeping
- Transcripts that replay byte-for-byte
"""

__version__ = "0.1.0"
