"""Seed a vector-searchable collection with model-synthesized domain records."""

__version__ = "0.1.0"
