"""Yarn Berry lockfile grammar and serialization."""
