"""Directory listing and ordering of slideshow items."""
