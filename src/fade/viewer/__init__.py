"""PyQt6 front end for the slideshow."""
