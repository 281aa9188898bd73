"""
Dishbook: an in-memory recipe catalog.

Responsibilities:
- Store categories, dishes and the user's per-dish overlays.
- Serve filtered, sorted and joined views plus library stats.
- Recommend a random dish with a bounded history.
"""
