# src/storage/documents.py
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from redis.asyncio import Redis

KEY_PREFIX = "pricealert"

def key(container: str, name: str, prefix: str = KEY_PREFIX) -> str:
    # {prefix}:{container}/{name}
    return f"{prefix}:{container}/{name}"

class RedisDocumentStore:
    """
    JSON documents as plain Redis string keys. Overwrite on write, no TTL.
    """
    def __init__(self, r: Redis, prefix: str = KEY_PREFIX):
        self.r = r
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = KEY_PREFIX) -> "RedisDocumentStore":
        return cls(Redis.from_url(url), prefix=prefix)

    async def read(self, container: str, name: str) -> Optional[str]:
        raw = await self.r.get(key(container, name, self.prefix))
        if raw is None:
            return None
        if isinstance(raw, (bytes, bytearray)):
            return raw.decode("utf-8")
        return str(raw)

    async def write(self, container: str, name: str, text: str) -> None:
        await self.r.set(key(container, name, self.prefix), text)

    async def close(self) -> None:
        await self.r.aclose()

class FileDocumentStore:
    """
    Documents as files under {root}/{container}/{name}. Handy for local runs.
    Writes replace the file atomically (temp file + rename).
    """
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, container: str, name: str) -> Path:
        return self.root / container / name

    async def read(self, container: str, name: str) -> Optional[str]:
        return await asyncio.to_thread(self._read_sync, self._path(container, name))

    async def write(self, container: str, name: str, text: str) -> None:
        await asyncio.to_thread(self._write_sync, self._path(container, name), text)

    async def close(self) -> None:
        return None

    @staticmethod
    def _read_sync(p: Path) -> Optional[str]:
        try:
            return p.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @staticmethod
    def _write_sync(p: Path, text: str) -> None:
        p.parent.mkdir(parents=True, exist_ok=True)  # create container if missing
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(p)
