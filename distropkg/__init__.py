"""distropkg — distribution detection and native package management."""

__version__ = "0.1.0"
