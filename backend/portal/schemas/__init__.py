"""Pydantic Schemas — request body validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary; services receive clean values
    - Domain enums from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Responses are built by services/serializers.py, not response_model classes
"""
