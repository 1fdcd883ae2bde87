"""Root conftest — shared test configuration."""

import os

# Settings are read once per process; set test values before app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_FORMAT", "text")
