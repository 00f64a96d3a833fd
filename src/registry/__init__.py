"""Artifact repository access."""
