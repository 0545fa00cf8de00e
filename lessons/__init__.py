"""Learning demos: small runnable examples selected by name from the CLI."""

__version__ = "0.1.0"
