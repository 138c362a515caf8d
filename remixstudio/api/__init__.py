"""Remix Studio HTTP API."""
