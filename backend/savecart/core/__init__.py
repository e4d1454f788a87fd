"""Core cross-cutting definitions (exceptions)."""
