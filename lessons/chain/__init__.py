"""Blockchain node I/O and indexing scenarios."""
