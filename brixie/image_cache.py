"""
Image cache - set images kept in memory and on disk.

Provides:
- MemoryImageCache: small in-memory cache with LRU eviction
- DiskImageCache: persistent disk cache capped at a total byte size
- ImageCache: Memory -> Disk fallback
- ImageService: cache-first image download
"""

import asyncio
import hashlib
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import aiohttp

logger = logging.getLogger(__name__)


class ImageCacheBackend(ABC):
    """Abstract base class for image cache backends."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get image bytes from cache."""
        pass

    @abstractmethod
    def set(self, key: str, data: bytes) -> None:
        """Store image bytes in cache."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryImageCache(ImageCacheBackend):
    """Fast in-memory cache with LRU eviction."""

    def __init__(self, max_items: int = 100):
        self.max_items = max_items
        self._cache: dict[str, bytes] = {}
        self._access_order: list[str] = []  # Track access order for LRU

    def get(self, key: str) -> bytes | None:
        if key not in self._cache:
            return None

        # Move to end for LRU
        self._access_order.remove(key)
        self._access_order.append(key)
        return self._cache[key]

    def set(self, key: str, data: bytes) -> None:
        while len(self._cache) >= self.max_items and key not in self._cache:
            self._evict_oldest()

        self._cache[key] = data
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        if key in self._access_order:
            self._access_order.remove(key)

    def clear(self) -> None:
        self._cache.clear()
        self._access_order.clear()

    def _evict_oldest(self):
        """Evict least recently used entry."""
        if self._access_order:
            oldest_key = self._access_order.pop(0)
            self._cache.pop(oldest_key, None)

    @property
    def size(self) -> int:
        return len(self._cache)


class DiskImageCache(ImageCacheBackend):
    """Persistent disk cache. Least recently used files go first once over max_bytes."""

    def __init__(self, cache_dir: Path, max_bytes: int = 50 * 1024 * 1024):
        self.cache_dir = cache_dir
        self.max_bytes = max_bytes
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        """Convert cache key to file path."""
        hashed = hashlib.sha256(key.encode()).hexdigest()[:32]
        return self.cache_dir / f"{hashed}.img"

    def get(self, key: str) -> bytes | None:
        path = self._key_to_path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Unreadable image cache file {path.name}: {e}")
            path.unlink(missing_ok=True)
            return None

        # Touch so eviction sees this file as recently used
        try:
            os.utime(path)
        except OSError:
            pass
        return data

    def set(self, key: str, data: bytes) -> None:
        if len(data) > self.max_bytes:
            logger.debug(f"Image of {len(data)} bytes exceeds cache size, not cached")
            return

        path = self._key_to_path(key)
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.warning(f"Could not write image cache file {path.name}: {e}")
            return
        self._enforce_limit(keep=path)

    def delete(self, key: str) -> None:
        self._key_to_path(key).unlink(missing_ok=True)

    def clear(self) -> None:
        """Clear all cached files."""
        for file in self.cache_dir.glob("*.img"):
            file.unlink(missing_ok=True)

    @property
    def total_bytes(self) -> int:
        return sum(f.stat().st_size for f in self.cache_dir.glob("*.img"))

    def _enforce_limit(self, keep: Path | None = None) -> int:
        """Remove least recently used files until under max_bytes. Returns count removed."""
        files = []
        for file in self.cache_dir.glob("*.img"):
            try:
                stat = file.stat()
            except FileNotFoundError:
                continue
            files.append((stat.st_mtime, stat.st_size, file))

        total = sum(size for _, size, _ in files)
        removed = 0
        for _, size, file in sorted(files, key=lambda f: f[0]):
            if total <= self.max_bytes:
                break
            if file == keep:
                continue
            file.unlink(missing_ok=True)
            total -= size
            removed += 1
        return removed


class ImageCache(ImageCacheBackend):
    """Two-tier cache: memory (fast) -> disk (persistent)."""

    def __init__(
        self,
        cache_dir: Path,
        memory_items: int = 100,
        max_bytes: int = 50 * 1024 * 1024
    ):
        self.memory = MemoryImageCache(max_items=memory_items)
        self.disk = DiskImageCache(cache_dir, max_bytes=max_bytes)

    def get(self, key: str) -> bytes | None:
        if (data := self.memory.get(key)) is not None:
            return data

        if (data := self.disk.get(key)) is not None:
            # Promote to memory for faster subsequent access
            self.memory.set(key, data)
            return data

        return None

    def set(self, key: str, data: bytes) -> None:
        self.memory.set(key, data)
        self.disk.set(key, data)

    def delete(self, key: str) -> None:
        self.memory.delete(key)
        self.disk.delete(key)

    def clear(self) -> None:
        self.memory.clear()
        self.disk.clear()


class ImageService:
    """Downloads set images, serving from the cache when possible."""

    def __init__(self, cache: ImageCacheBackend, timeout: int = 30):
        self.cache = cache
        self.timeout = timeout

    async def get(self, url: str) -> bytes | None:
        """Get image bytes for a URL. Download failures yield None."""
        if (data := self.cache.get(url)) is not None:
            return data

        data = await self._download(url)
        if data:
            self.cache.set(url, data)
        return data

    async def _download(self, url: str) -> bytes | None:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status != 200:
                        logger.warning(f"Image download failed for {url}: HTTP {resp.status}")
                        return None
                    return await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Image download failed for {url}: {e}")
            return None


def create_image_service(
    cache_dir: str | Path,
    memory_items: int = 100,
    max_bytes: int = 50 * 1024 * 1024,
    timeout: int = 30,
) -> ImageService:
    """Factory function to create an ImageService with a tiered cache."""
    cache = ImageCache(
        cache_dir=Path(cache_dir),
        memory_items=memory_items,
        max_bytes=max_bytes
    )
    return ImageService(cache, timeout=timeout)
