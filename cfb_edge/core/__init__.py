"""Core mathematics, records and configuration for the CFB Edge engine.

This package contains pure building blocks:

- ``odds_math``     — American odds → implied probability, payout, EV
- ``spread_model``  — fixed-sigma normal cover probability
- ``records``       — frozen value records flowing through one evaluation pass
- ``engine_config`` — engine options (sigma, top-N, match policy)
- ``errors``        — the engine's exception hierarchy

Nothing in this package imports from ``cfb_edge.services``.
All modules are side-effect-free and unit-testable in isolation.
"""
