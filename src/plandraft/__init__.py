"""plandraft package bootstrap.

The lesson-plan draft editor engine: an undo/redo history over plan
snapshots, a debounced autosave pipeline and a drag-and-drop step sequencer.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
