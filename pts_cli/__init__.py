"""pts - render code from live MySQL, PostgreSQL and SQLite table structures."""

__version__ = "0.1.0"
