"""Upload locally committed branches for code review."""
