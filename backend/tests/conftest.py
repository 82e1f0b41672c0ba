"""Root conftest — shared test configuration."""

import os

# Tests never migrate a real database on import of the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test-users.db")
os.environ.setdefault("MIGRATE_ON_STARTUP", "false")
os.environ.setdefault("LOG_FORMAT", "text")
