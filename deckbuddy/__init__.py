"""Building blocks for Steam control, PC power state, display resolution and autostart on Linux."""

__version__ = "0.1.0"