"""Order placement and tracking."""
