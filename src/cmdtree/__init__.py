"""cmdtree — nested command trees filled from flags or interactive prompts.

Each node of the tree contributes typed state to a context that is
threaded down to its children and finally consumed by a leaf action.
"""

from cmdtree.version import __version__

__all__: list[str] = ["__version__"]
