"""Customer and back-office accounts."""
