"""Core diff-and-digest engine."""
