"""
Fade - timed image slideshow with favorite/trash curation.

Shows a directory of images as a cross-fading slideshow, with single,
comparison and triptych views and a three-state tagging workflow that is
persisted as filesystem tags.
"""

__version__ = "0.1.0"
