"""Payment gateway bridge."""
