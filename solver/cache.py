"""FeasibilityCache – Memo-Tabelle mit Ablaufzeit pro Eintrag.

Speichert Antworten auf "passt Stunde X in Slot Y" sowie sortierte
Kurslisten. Der Cache ist reine Beschleunigung: ein Miss bedeutet
Neuberechnung, nie einen Fehler. Eine Instanz darf von mehreren Läufen
gleichzeitig genutzt werden (Zugriffe über ein Lock serialisiert).
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Optional

from config.schema import CacheConfig

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    expired: int = 0
    size: int = 0


class FeasibilityCache:
    """Key → (Wert, Ablaufzeitpunkt).

    Lebenszyklus: anlegen → nutzen → close(). Auch als Context-Manager
    verwendbar. Nach close() verhält sich der Cache wie ein leerer Cache:
    get() liefert immer None, set() wird ignoriert.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or CacheConfig()
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = Lock()
        self._stats = CacheStats()
        self._last_sweep = clock()
        self._closed = False

    # ─── TTLs ───

    @property
    def conflict_ttl(self) -> float:
        return self.config.conflict_ttl_seconds

    @property
    def static_ttl(self) -> float:
        return self.config.static_ttl_seconds

    @property
    def course_list_ttl(self) -> float:
        return self.config.course_list_ttl_seconds

    # ─── Zugriff ───

    def get(self, key: str) -> Optional[Any]:
        """Wert oder None bei Miss. Abgelaufene Einträge werden dabei entfernt."""
        now = self._clock()
        with self._lock:
            if self._closed:
                return None
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return None
            value, expires_at = entry
            if expires_at <= now:
                del self._entries[key]
                self._stats.expired += 1
                self._stats.misses += 1
                return None
            self._stats.hits += 1
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Speichert value für ttl Sekunden. None wird nicht gespeichert."""
        if value is None:
            return
        now = self._clock()
        with self._lock:
            if self._closed:
                return
            self._entries[key] = (value, now + ttl)
            if now - self._last_sweep >= self.config.sweep_interval_seconds:
                self._sweep_locked(now)

    def get_or_compute(self, key: str, ttl: float, compute: Callable[[], Any]) -> Any:
        """Liefert den gecachten Wert oder berechnet und speichert ihn."""
        value = self.get(key)
        if value is None:
            value = compute()
            self.set(key, value, ttl)
        return value

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Entfernt alle abgelaufenen Einträge. Gibt deren Anzahl zurück."""
        now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        stale = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in stale:
            del self._entries[key]
        self._stats.expired += len(stale)
        self._last_sweep = now
        if stale:
            logger.debug(f"Cache-Bereinigung: {len(stale)} abgelaufene Einträge entfernt")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # ─── Status ───

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                expired=self._stats.expired,
                size=len(self._entries),
            )

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ─── Lebenszyklus ───

    def close(self) -> None:
        with self._lock:
            self._entries.clear()
            self._closed = True

    def __enter__(self) -> "FeasibilityCache":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FeasibilityCache({len(self)} Einträge)"
