"""LHTRPG rules engine: character data model and derived battle statistics."""

__version__ = "0.1.0"
