"""lazybeads: a keyboard- and mouse-driven terminal dashboard for beads issues."""

__version__ = "0.4.0"
