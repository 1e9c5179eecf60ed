# Services package init
"""
Tourify Backend — Services Layer
=================================

What:  Business rules between the HTTP routes and the database.
How:   Stateless service singletons; every call receives the request's
       AsyncSession and, for owner-scoped operations, the verified requester id.

Service Inventory:
    - coordinates:        pixel ↔ percentage conversion and clamping
    - step_editor:        single-step rules (media swap, annotations)
    - tour_repository:    persistence of the tour aggregate
    - TourService:        owner-scoped tour CRUD and step edits
    - ShareService:       share descriptors and the anonymous read paths
    - passwords:          share-link password hashing
    - MediaService:       upload signatures and the media asset registry
    - AnalyticsService:   per-owner counters
"""
