"""PrepTrack - exam preparation tracker for NEET/JEE students."""

__version__ = "0.1.0"
