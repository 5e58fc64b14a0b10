"""Content-addressed cache for rendered slide images.

Entries are keyed by a fingerprint of (markup, render options), so a
slide is only re-rendered when its markup or options change.

Structure (optional disk tier):
    cache/rendered/
        <fingerprint>.meta.json   # format, size, created_at
        <fingerprint>.bin         # image bytes

The cache is pass-through: any fault is recorded as a `cache` error and
treated as a miss, and the pipeline works the same with `enabled=False`.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from ..constants import CACHE_TTL_SECONDS, RENDER_CACHE_MAX_SIZE
from ..monitoring.errors import CacheError
from .models import CachedImage, RenderedImage, RenderOptions

if TYPE_CHECKING:
    from ..monitoring.monitor import ErrorMonitor

_logger = logging.getLogger("carousel.render")


def fingerprint(markup: str, options: RenderOptions) -> str:
    """SHA-256 over the canonical JSON of markup and options."""
    payload = json.dumps(
        {"markup": markup, "options": options.model_dump(mode="json")},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class RenderCache:
    """Two-tier (memory + optional disk) cache of rendered images.

    Usage:
        cache = RenderCache(max_size=100, max_age=3600)
        fp = fingerprint(markup, options)
        image = cache.get(fp) or cache.store(fp, await renderer.render(markup, options))
    """

    def __init__(
        self,
        max_size: int = RENDER_CACHE_MAX_SIZE,
        max_age: float = CACHE_TTL_SECONDS,
        disk_dir: Path | None = None,
        enabled: bool = True,
        monitor: ErrorMonitor | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.max_size = max_size
        self.max_age = max_age
        self.disk_dir = Path(disk_dir) if disk_dir else None
        self.enabled = enabled
        self.monitor = monitor
        self._clock = clock
        self._lock = threading.Lock()
        self._memory: OrderedDict[str, CachedImage] = OrderedDict()
        self._hits = 0
        self._misses = 0

    # =========================================================================
    # Public API
    # =========================================================================

    def get(self, fp: str) -> CachedImage | None:
        """Return a non-expired image, or None. Expired entries are evicted."""
        if not self.enabled:
            return None

        now = self._clock()
        with self._lock:
            image = self._memory.get(fp)
            if image is not None:
                if self._is_expired(image, now):
                    del self._memory[fp]
                else:
                    self._hits += 1
                    return image

        image = self._read_disk(fp, now)
        with self._lock:
            if image is None:
                self._misses += 1
                return None
            self._hits += 1
            self._insert(fp, image)
        return image

    def set(self, fp: str, image: CachedImage) -> None:
        """Store an image, evicting the oldest entries past max_size."""
        if not self.enabled:
            return
        with self._lock:
            self._insert(fp, image)
        self._write_disk(fp, image)

    def store(self, fp: str, rendered: RenderedImage) -> CachedImage:
        """Wrap a fresh render as a CachedImage stamped now, and store it."""
        image = CachedImage(
            data=rendered.data,
            format=rendered.format,
            width=rendered.width,
            height=rendered.height,
            fingerprint=fp,
            created_at=self._clock(),
        )
        self.set(fp, image)
        return image

    def cleanup(self) -> dict[str, int]:
        """Evict expired entries from both tiers."""
        now = self._clock()
        with self._lock:
            expired = [fp for fp, image in self._memory.items() if self._is_expired(image, now)]
            for fp in expired:
                del self._memory[fp]

        removed_disk = 0
        if self.disk_dir is not None and self.disk_dir.exists():
            for meta_path in self.disk_dir.glob("*.meta.json"):
                fp = meta_path.name[: -len(".meta.json")]
                try:
                    meta = json.loads(meta_path.read_text(encoding="utf-8"))
                    if now - float(meta["created_at"]) > self.max_age:
                        self._remove_disk(fp)
                        removed_disk += 1
                except (OSError, ValueError, KeyError, TypeError) as e:
                    self._report_fault(f"cleanup failed for {fp[:12]}: {e}")

        if expired or removed_disk:
            _logger.info(f"CACHE | CLEANUP | memory:{len(expired)} | disk:{removed_disk}")
        return {"removed_memory": len(expired), "removed_disk": removed_disk}

    def clear(self) -> None:
        """Drop every entry from both tiers."""
        with self._lock:
            self._memory.clear()
            self._hits = 0
            self._misses = 0
        if self.disk_dir is not None and self.disk_dir.exists():
            for path in list(self.disk_dir.glob("*.meta.json")) + list(self.disk_dir.glob("*.bin")):
                try:
                    path.unlink()
                except OSError as e:
                    self._report_fault(f"clear failed for {path.name}: {e}")

    def stats(self) -> dict:
        with self._lock:
            lookups = self._hits + self._misses
            stats = {
                "enabled": self.enabled,
                "memory_entries": len(self._memory),
                "max_size": self.max_size,
                "max_age_seconds": self.max_age,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / lookups, 3) if lookups else 0.0,
                "disk_enabled": self.disk_dir is not None,
            }
        if self.disk_dir is not None:
            stats["disk_entries"] = (
                len(list(self.disk_dir.glob("*.meta.json"))) if self.disk_dir.exists() else 0
            )
        return stats

    # =========================================================================
    # Internals
    # =========================================================================

    def _is_expired(self, image: CachedImage, now: float) -> bool:
        return now - image.created_at > self.max_age

    def _insert(self, fp: str, image: CachedImage) -> None:
        # Caller holds the lock
        self._memory[fp] = image
        self._memory.move_to_end(fp)
        while len(self._memory) > self.max_size:
            self._memory.popitem(last=False)

    def _paths(self, fp: str) -> tuple[Path, Path]:
        return self.disk_dir / f"{fp}.meta.json", self.disk_dir / f"{fp}.bin"

    def _read_disk(self, fp: str, now: float) -> CachedImage | None:
        if self.disk_dir is None:
            return None
        meta_path, data_path = self._paths(fp)
        if not meta_path.exists():
            return None
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
            created_at = float(meta["created_at"])
            if now - created_at > self.max_age:
                self._remove_disk(fp)
                return None
            return CachedImage(
                data=data_path.read_bytes(),
                format=meta["format"],
                width=int(meta["width"]),
                height=int(meta["height"]),
                fingerprint=fp,
                created_at=created_at,
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            self._report_fault(f"read failed for {fp[:12]}: {e}")
            return None

    def _write_disk(self, fp: str, image: CachedImage) -> None:
        if self.disk_dir is None:
            return
        meta_path, data_path = self._paths(fp)
        meta = {
            "format": image.format,
            "width": image.width,
            "height": image.height,
            "size": len(image.data),
            "created_at": image.created_at,
        }
        try:
            self.disk_dir.mkdir(parents=True, exist_ok=True)
            data_path.write_bytes(image.data)
            meta_path.write_text(json.dumps(meta), encoding="utf-8")
        except OSError as e:
            self._report_fault(f"write failed for {fp[:12]}: {e}")

    def _remove_disk(self, fp: str) -> None:
        for path in self._paths(fp):
            path.unlink(missing_ok=True)

    def _report_fault(self, message: str) -> None:
        error = CacheError(message)
        if self.monitor is not None:
            self.monitor.record_error(error, context={"component": "render_cache"})
        else:
            _logger.warning(f"CACHE | FAULT | {message}")
