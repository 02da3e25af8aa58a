"""Simulation core for a single-player last-stand shooter: vectors, scenario director, troop AI, game systems, wire protocol, events and in-memory storage."""

__version__ = "0.1.0"