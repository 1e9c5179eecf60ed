"""
Tourify Backend — Application Package
======================================

What: REST backend for the Tourify product-tour builder.
How:  Layered the same way throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │   Services (Tour / Share / Media)   │  ← ownership checks, invariants
    ├─────────────────────────────────────┤
    │   Tour Repository + ORM Models      │  ← persistence, cascades
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    A tour document is tour → steps[] (ordered by step_order) → annotations[].
"""

__version__ = "1.0.0"
