"""Encoders for monitoring data."""
