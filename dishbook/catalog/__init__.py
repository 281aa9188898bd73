"""
Dish catalog: entity store and query engine.

Responsibilities:
- Own the category, dish and user-overlay collections.
- Enforce one overlay per dish and cascade overlay removal on dish delete.
- Answer joined, filtered and sorted views plus aggregate stats on demand.
"""
