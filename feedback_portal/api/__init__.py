"""HTTP service for the feedback portal."""
