"""
Configuration centralisée du logging pour le bot Discord.

Objectifs :
- Un seul setup idempotent (évite la duplication des handlers)
- Déduplication des messages identiques répétés dans une fenêtre courte
  (le sweep périodique réémet les mêmes lignes à chaque passage)
- Format uniforme configurable via variables d'environnement
"""
from __future__ import annotations

import logging
import threading
import os
import time

_INITIALIZED = False

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
DEFAULT_DEDUP_WINDOW = 60.0


def parse_dedup_window(raw: str | None) -> float | None:
    """Fenêtre de déduplication en secondes (0 désactive) ; None si la valeur est invalide."""
    raw = (raw or "").strip()
    if not raw:
        return DEFAULT_DEDUP_WINDOW
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


class DeduplicateFilter(logging.Filter):
    """Ignore un enregistrement identique vu il y a moins de `window` secondes."""

    def __init__(self, window: float = DEFAULT_DEDUP_WINDOW, clock=time.monotonic):
        super().__init__()
        self.window = window
        self._clock = clock
        self._lock = threading.Lock()
        self._seen: dict[tuple, float] = {}

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if self.window <= 0 or record.levelno >= logging.ERROR:
            return True
        # Déduplication basée sur le message rendu (args interpolés)
        try:
            rendered = record.getMessage()
        except Exception:  # noqa: BLE001
            rendered = str(record.msg)
        key = (record.name, record.levelno, rendered)
        now = self._clock()
        with self._lock:
            last = self._seen.get(key)
            if last is not None and now - last < self.window:
                return False
            # Limite la croissance mémoire (reset si trop gros)
            if len(self._seen) >= 5000:
                self._seen.clear()
            self._seen[key] = now
        return True


def setup_logging(force: bool = False) -> None:
    global _INITIALIZED
    if _INITIALIZED and not force:
        return

    raw_window = os.getenv("LOG_DEDUP_WINDOW")
    window = parse_dedup_window(raw_window)

    root = logging.getLogger()
    if force:
        # Purge tous les handlers existants
        for h in list(root.handlers):
            root.removeHandler(h)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    # Uniformise le format, le filtre et le niveau de log
    for h in root.handlers:
        if not any(isinstance(f, DeduplicateFilter) for f in h.filters):
            h.addFilter(DeduplicateFilter(DEFAULT_DEDUP_WINDOW if window is None else window))
        h.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root.setLevel(getattr(logging, DEFAULT_LEVEL, logging.INFO))
    # discord.py est très bavard en DEBUG
    logging.getLogger("discord").setLevel(max(root.level, logging.INFO))
    if window is None:
        logging.getLogger(__name__).warning(
            "LOG_DEDUP_WINDOW invalide (%r), fenêtre par défaut %ss", raw_window, DEFAULT_DEDUP_WINDOW
        )
    _INITIALIZED = True


__all__ = ["setup_logging", "DeduplicateFilter", "parse_dedup_window"]
