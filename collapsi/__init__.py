"""
Collapsi - Toroidal Card Grid Game Engine

A deterministic rules engine for the two-player game Collapsi, played on a
wraparound 4x4 grid of cards that collapse once left behind.
The engine provides:
- Board construction and wraparound adjacency
- Move validation for fixed-distance and joker cards
- Stepwise joker movement
- Move execution, turn switching and win detection
- Snapshot serialization and an HTTP API
"""

__version__ = "0.1.0"
