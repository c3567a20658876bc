"""
photostrip: countdown-driven photo booth sessions.

A session captures one mirrored still per pose of the active layout and the
finished set is composed into a printable strip.
"""

__version__ = "0.1.0"
