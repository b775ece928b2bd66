"""School Portal Backend — REST API for school administration.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
