"""
Mint Lite - State Synchronization Core

The reactive layer of a personal-finance client whose backends are
simulated: in-memory data providers with injected latency and failures,
and presentation controllers that keep observable state correct under
concurrent mutation, debounced search and teardown.

DESIGN PRINCIPLES:
1. Entities are validated once, at construction, and never mutated
2. Providers write their collection before they publish
3. Controllers never outlive their subscriptions
4. Every failure is local to one operation
"""

__version__ = "1.0.0"
__author__ = "Mint Lite Team"
