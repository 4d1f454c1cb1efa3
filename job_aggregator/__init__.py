"""Job aggregator package.

The package is structured around one canonical record:
- `models.py` defines the schema every board is normalized into.
- `sources/` contains per-board connectors that fetch and map jobs.
- `normalize.py` contains deterministic parsing and heuristics.
- `cache.py`, `aggregator.py` and `resolver.py` merge and serve the results.
- `api.py` exposes them over HTTP.
"""
