"""Staff Directory API tests."""
