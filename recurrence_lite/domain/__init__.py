"""Recurrence domain: spec models, expansion engine and its collaborators."""
