#!/usr/bin/env python3
"""
qv_node/whitelist/client.py
---------------------------

Access allow-list for state-changing calls.

The remote service returns a JSON array whose entries are either plain
address strings or objects with an ``address`` field. Addresses are
compared lower-cased.

WhitelistCache keeps the last good list for ``ttl_sec`` (5 minutes by
default) and refreshes lazily on the next lookup after it expires:
- fetch fails, a previous list exists  -> keep serving the previous list
- fetch fails, nothing fetched yet      -> empty list (deny everyone)
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional

import httpx

log = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 5 * 60


def _normalize(entries: Any) -> FrozenSet[str]:
    if not isinstance(entries, list):
        raise ValueError(f"whitelist payload must be a list, got {type(entries).__name__}")
    out = set()
    for entry in entries:
        addr = entry.get("address") if isinstance(entry, dict) else entry
        if isinstance(addr, str) and addr.strip():
            out.add(addr.strip().lower())
    return frozenset(out)


class WhitelistCache:
    def __init__(
        self,
        url: str,
        ttl_sec: float = DEFAULT_TTL_SEC,
        timeout_sec: float = 5.0,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.ttl_sec = float(ttl_sec)
        self.timeout_sec = float(timeout_sec)
        self._client = client
        self._clock = clock

        self._lock = threading.Lock()
        self._cache: Optional[FrozenSet[str]] = None
        self._fetched_at = 0.0

    def _fetch(self) -> FrozenSet[str]:
        if self._client is not None:
            r = self._client.get(self.url, timeout=self.timeout_sec)
        else:
            with httpx.Client(timeout=self.timeout_sec) as client:
                r = client.get(self.url)
        r.raise_for_status()
        return _normalize(r.json())

    def addresses(self) -> FrozenSet[str]:
        with self._lock:
            now = self._clock()
            if self._cache is not None and (now - self._fetched_at) < self.ttl_sec:
                return self._cache
            try:
                self._cache = self._fetch()
                self._fetched_at = now
                log.debug("[whitelist] refreshed %d addresses", len(self._cache))
            except (httpx.HTTPError, ValueError) as e:
                log.warning("[whitelist] fetch failed: %s", e)
                if self._cache is None:
                    return frozenset()
            return self._cache

    def is_whitelisted(self, address: str) -> bool:
        if not address:
            return False
        return address.strip().lower() in self.addresses()

    def status(self) -> Dict[str, Any]:
        return {
            "source": self.url,
            "loaded": self._cache is not None,
            "size": len(self._cache or ()),
        }


class StaticWhitelist:
    """Fixed allow-list from config (or tests); never touches the network."""

    def __init__(self, addresses: Iterable[str]) -> None:
        self._addresses = frozenset(a.strip().lower() for a in addresses if a and a.strip())

    def is_whitelisted(self, address: str) -> bool:
        return bool(address) and address.strip().lower() in self._addresses

    def status(self) -> Dict[str, Any]:
        return {"source": "static", "loaded": True, "size": len(self._addresses)}


class OpenWhitelist:
    """Gate disabled (local development): every address is allowed."""

    def is_whitelisted(self, address: str) -> bool:
        return True

    def status(self) -> Dict[str, Any]:
        return {"source": "disabled", "loaded": True, "size": 0}


def build_whitelist(cfg: Dict[str, Any]):
    wl = cfg.get("whitelist", {})
    if not wl.get("enabled", True):
        log.warning("[whitelist] gate disabled; all addresses may mutate state")
        return OpenWhitelist()
    static = wl.get("static") or []
    if static:
        return StaticWhitelist(static)
    return WhitelistCache(
        url=str(wl.get("url")),
        ttl_sec=float(wl.get("ttl_sec", DEFAULT_TTL_SEC)),
        timeout_sec=float(wl.get("timeout_sec", 5.0)),
    )
