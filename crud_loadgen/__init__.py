"""Concurrent CRUD load harness for MySQL-protocol databases."""

__version__ = "0.1.0"
