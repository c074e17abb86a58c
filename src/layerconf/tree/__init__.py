"""
ConfigTree: immutable configuration tree with recursive fallback merging.

Example:
    >>> from layerconf.tree import ConfigTree
    >>> app = ConfigTree({"server": {"port": 8080}})
    >>> defaults = ConfigTree({"server": {"port": 80, "host": "0.0.0.0"}})
    >>> app.with_fallback(defaults)["server"]
    FrozenMapping({'port': 8080, 'host': '0.0.0.0'})
"""

from layerconf.tree._core import ConfigTree
from layerconf.tree._frozen import FrozenMapping, FrozenSequence, freeze, thaw

__all__ = ["ConfigTree", "FrozenMapping", "FrozenSequence", "freeze", "thaw"]
