"""Interactive video backend: playback/authoring engine plus its HTTP surface."""

__version__ = "1.0.0"
