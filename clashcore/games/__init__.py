"""
Games module - Authored data sets for the combat core.

Each data set has its own subpackage with:
- Status and keyword catalogue
- Character roster and card definitions
- A factory returning a validated GameData snapshot
"""
