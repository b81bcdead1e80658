"""Bundled migration version modules."""
