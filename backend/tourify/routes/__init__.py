# Routes package init
"""
Tourify Backend — API Routes
=============================

Routers:
    tours      → /api/tours/...          owner-scoped tour CRUD, step edits, sharing
    public     → /api/view/...           anonymous reads (published / share token)
    media      → /api/media/...          upload signatures and asset registry
    analytics  → /api/analytics          per-owner counters
    health     → /health                 liveness + database probe
"""
