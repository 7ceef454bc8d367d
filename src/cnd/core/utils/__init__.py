"""Shared utilities for cnd core (I/O, paths, merging, logging)."""
