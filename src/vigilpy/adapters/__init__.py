"""Adapters implementing core ports and framework integrations."""
