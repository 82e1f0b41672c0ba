"""Infrastructure Layer — storage, migrations and cross-cutting concerns.

Invariants:
    - All database errors mapped to core/errors.py types before leaving this layer
"""
