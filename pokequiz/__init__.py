"""
Pokequiz - Silhouette guessing game backend.

A player is shown the silhouette of a creature picked at random from the
PokeAPI catalog and has to name it. The package provides:
- A TTL read-through cache over the remote catalog
- Candidate selection by region and form flags
- Per-session guess throttling and answer matching
- A small REST API for the web frontend
"""

__version__ = "0.1.0"
