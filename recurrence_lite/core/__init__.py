"""Core infrastructure for recurrence_lite (configuration, HTTP client)."""
