"""Voice model cache management for pipertts."""

import tempfile
from pathlib import Path

from .tracker import ModelCacheTracker

__all__ = ["ModelCacheTracker", "get_model_cache_dir"]


def get_model_cache_dir(configured: Path | None = None) -> Path:
    """Get or create the host directory Piper models are downloaded into.

    Args:
        configured: Directory from configuration. Falls back to
            <tmpdir>/piper-models when not set.

    Returns:
        Path to the model cache directory
    """
    cache_dir = configured or Path(tempfile.gettempdir()) / "piper-models"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
