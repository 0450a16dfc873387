"""In-memory record of which voice models have been prepared."""

import threading


class ModelCacheTracker:
    """Tracks voices whose model files have been downloaded this process.

    State is volatile. After a restart every voice is prepared again on
    first use, even if its files are still in the model cache directory.
    """

    def __init__(self) -> None:
        self._ready: set[str] = set()
        self._lock = threading.Lock()

    def is_ready(self, voice_id: str) -> bool:
        with self._lock:
            return voice_id in self._ready

    def mark_ready(self, voice_id: str) -> None:
        with self._lock:
            self._ready.add(voice_id)

    def reset(self) -> None:
        with self._lock:
            self._ready.clear()

    def __contains__(self, voice_id: object) -> bool:
        with self._lock:
            return voice_id in self._ready

    def __len__(self) -> int:
        with self._lock:
            return len(self._ready)
