"""
cs2coach Domains - Match correlation analysis.

This module contains:
- identity: Stable player ids and fragment reconciliation
- rounds: Round segmentation
- windows: Temporal window queries over the ledger
- combat: Trade kills, opening duels, clutches
- utility: Flash assists and grenade damage
- economy: Equipment value at the buy cutoff
"""

__all__: list[str] = []
