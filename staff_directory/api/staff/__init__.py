"""Staff records module."""
