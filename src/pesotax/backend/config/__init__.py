"""Year-based configuration for bracket tables and statutory rules."""
