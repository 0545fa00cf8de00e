"""Threads, queues and locks."""
