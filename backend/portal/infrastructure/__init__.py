"""Infrastructure Layer — database sessions, credentials and logging.

Invariants:
    - Library exceptions (SQLAlchemy, PyJWT) mapped to PortalError subclasses here
"""
