"""logic — World generation and population.

Top-level modules
-----------------
terrain         — per-biome tile grid generation
creatures       — archetype registry and biome spawn tables
spawning        — deterministic placement / snapshot restore
entity_factory  — entity creation from archetypes, and snapshots back
"""
