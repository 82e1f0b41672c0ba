"""Database Infrastructure — async session factory, SQLAlchemy Base and migration steps.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All sessions are async (AsyncSession)
"""
