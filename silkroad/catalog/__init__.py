"""
Site and tag catalog.

Responsibilities:
- Load the seed Silk Road catalog (sites + tags) from CSV.
- Serve lookups and tag filtering to the API and the recommendation engine.
- Apply admin create/update/delete operations, cascading tag deletes.
"""
