"""Services Layer — one async service module per entity.

Invariants:
    - Every service function takes the request's AsyncSession as first argument
    - Services raise PortalError subclasses; routes never build error responses
    - Writes commit inside the service; callers never see a half-applied change
"""
