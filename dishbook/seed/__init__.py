"""
Seed data for the dish catalog.

Responsibilities:
- Ship a small bundled dataset (categories, preset dishes, sample overlays).
- Parse and validate a seed JSON file into catalog records.
"""
