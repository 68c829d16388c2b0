"""Exceptions raised by the slideshow core."""


class FadeError(Exception):
    """Base class for slideshow errors."""


class EmptyPlaylistError(FadeError):
    """The directory holds no displayable images."""

    def __init__(self, directory: str = ""):
        self.directory = directory
        super().__init__(f"No images found in {directory}" if directory else "No images found")
