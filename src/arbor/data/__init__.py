"""Directory model of a data root and the loader that produces it."""

from arbor.data.loader import load_tree
from arbor.data.models import Case, DirNode, GroupConfig, PresetterRef

__all__ = ["Case", "DirNode", "GroupConfig", "PresetterRef", "load_tree"]
