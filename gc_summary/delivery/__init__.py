"""Digest delivery sinks."""
