"""HTTP API for recurrence_lite."""
