"""
Tag-based recommendation engine.

Responsibilities:
- Accept a user's preference tags.
- Score every site by tag overlap plus a rating bonus.
- Fall back to the highest rated sites when there is nothing to match on.
- Compute category-weighted similarity between sites.
"""
