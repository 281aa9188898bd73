"""
Random dish recommendations.

Responsibilities:
- Pick one dish uniformly at random, preferring the user's own library.
- Fall back to the full catalog when the library is empty.
- Keep the current pick plus a bounded, newest-first history.
"""
