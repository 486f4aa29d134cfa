"""Creative Suite: image-to-video, image-to-image and image-to-audio workflows."""

__version__ = "0.1.0"
