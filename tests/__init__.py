"""
couchdoc Test Suite.

This package contains:
- unit/: Unit tests (no external dependencies)
- integration/: Integration tests (client against an in-memory CouchDB)
- e2e/: End-to-end tests (real CouchDB)
"""
