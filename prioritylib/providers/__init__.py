"""Collaborator contracts and adapters."""
