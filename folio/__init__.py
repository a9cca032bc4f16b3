"""
folio - a versioned document engine.

A single working buffer plus an append-only graph of immutable versions
organized into branches, with commit, rollback, checkout, rebase and diff.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from folio.config import config

__all__ = ["config", "__version__"]
