__version__ = "0.1.0"

from .app.main import analyze, analyze_local, create_share, get_share, generate_snapshot

__all__ = [
    "__version__",
    "analyze",
    "analyze_local",
    "create_share",
    "get_share",
    "generate_snapshot",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
