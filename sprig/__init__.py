"""
sprig - a small local version-control engine.

Content-addressed blobs and commits, branches, a staging area and a
three-way merge over whole files, all stored under a `.sprig/` directory.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from sprig.config import config

__all__ = ["config", "__version__"]
