"""Core package initializer for plandraft.

Holds the engine layers that know nothing about gestures or transports:
    from plandraft.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
