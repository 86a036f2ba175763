"""Schema comparison, table filtering and test-data generation for MySQL-compatible databases."""

__version__ = "0.1.0"