"""
Local Filesystem Media Adapter.

Implements MediaUploadPort on the local filesystem for development and
single-server deployments.

Invariants:
- Stored bytes are never overwritten; every upload gets a fresh key
- sha256 recorded in the metadata equals the sha256 of the stored bytes
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import os
import uuid
from pathlib import Path

from closeup.rules.models import MediaRules


class MediaStoreError(Exception):
    """Base exception for media store failures."""


class LocalMediaStore:
    """
    Local filesystem implementation of MediaUploadPort.

    Stores each image with an accompanying metadata JSON.
    Directory structure: {base_path}/{storage_prefix}/{owner_id}/{uuid}.{ext}

    Example URL: "http://localhost:8000/media/posts_media/u1/3f2a....jpg"
    """

    def __init__(
        self,
        base_path: str | Path,
        public_base_url: str,
        *,
        rules: MediaRules | None = None,
        create_dirs: bool = True,
    ) -> None:
        """
        Initialize local media storage.

        Args:
            base_path: Root directory for stored media
            public_base_url: URL prefix under which base_path is served
            rules: Media rules (storage prefix, file extension)
            create_dirs: Whether to create base_path if it doesn't exist
        """
        self.base_path = Path(base_path)
        self.public_base_url = public_base_url.rstrip("/")
        self.rules = rules or MediaRules()

        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_for(self, owner_id: str) -> str:
        # Sanitize owner id to prevent directory traversal
        safe_owner = owner_id.replace("..", "").replace("/", "_").strip() or "anonymous"
        return f"{self.rules.storage_prefix}/{safe_owner}/{uuid.uuid4()}.{self.rules.file_extension}"

    def _key_to_paths(self, key: str) -> tuple[Path, Path]:
        data_path = self.base_path / key
        meta_path = data_path.with_name(f"{data_path.name}.meta.json")
        return data_path, meta_path

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def _write(self, key: str, data: bytes, content_type: str, owner_id: str) -> None:
        data_path, meta_path = self._key_to_paths(key)
        if data_path.exists():
            raise MediaStoreError(f"Key already exists: {key}")

        data_path.parent.mkdir(parents=True, exist_ok=True)
        with open(data_path, "wb") as f:
            f.write(data)

        with open(meta_path, "w") as f:
            json.dump(
                {
                    "key": key,
                    "owner_id": owner_id,
                    "size_bytes": len(data),
                    "content_type": content_type,
                    "sha256": hashlib.sha256(data).hexdigest(),
                },
                f,
            )

    async def upload(self, data: bytes, *, content_type: str, owner_id: str) -> str:
        """Store image bytes and return their public URL."""
        if not data:
            raise MediaStoreError("Refusing to store an empty image")
        key = self._key_for(owner_id)
        await asyncio.to_thread(self._write, key, data, content_type, owner_id)
        return self.url_for(key)

    def read(self, key: str) -> tuple[bytes, dict]:
        """Return stored bytes and metadata, verifying integrity."""
        data_path, meta_path = self._key_to_paths(key)
        if not data_path.exists():
            raise MediaStoreError(f"Key not found: {key}")

        with open(data_path, "rb") as f:
            data = f.read()
        with open(meta_path) as f:
            meta = json.load(f)

        actual = hashlib.sha256(data).hexdigest()
        if actual != meta["sha256"]:
            raise MediaStoreError(f"Integrity check failed: expected {meta['sha256']}, got {actual}")
        return data, meta

    def key_from_url(self, url: str) -> str | None:
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]


def create_local_media_store(
    base_path: str | Path | None = None,
    public_base_url: str | None = None,
    *,
    rules: MediaRules | None = None,
    path_env_var: str = "CLOSEUP_MEDIA_PATH",
    url_env_var: str = "CLOSEUP_MEDIA_URL",
    default_path: str = "./media",
    default_url: str = "http://localhost:8000/media",
) -> LocalMediaStore:
    """
    Factory function to create LocalMediaStore from config.

    Explicit arguments override the environment variables.
    """
    if base_path is None:
        base_path = os.environ.get(path_env_var, default_path)
    if public_base_url is None:
        public_base_url = os.environ.get(url_env_var, default_url)

    return LocalMediaStore(base_path, public_base_url, rules=rules)
