"""
LogSight Domains - Situational analysis modules.

This module contains:
- combat: Opening duels, clutches, multi-kills
- utility: Flashbang attribution and effectiveness
"""

__all__: list[str] = []
