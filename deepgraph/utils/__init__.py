"""
Utils module for deepgraph.
"""

from .logging import MultilineFormatter, setup_logging
from .utils import describe, feed_keys

__all__ = ["describe", "feed_keys", "setup_logging", "MultilineFormatter"]
