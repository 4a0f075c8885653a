"""routemap — a persistent, directed, weighted location graph."""

__version__ = "0.1.0"
