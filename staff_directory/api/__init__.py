"""Staff Directory API package."""
