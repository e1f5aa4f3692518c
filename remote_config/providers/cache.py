"""
Configuration Cache Providers

MemoryCacheProvider keeps the last configuration for the process lifetime.
FileCacheProvider persists it to disk for offline starts and keeps a short
version history.
"""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic_core import to_jsonable_python

from remote_config.common.logging_setup import get_service_logger

logger = get_service_logger("providers.cache")


class MemoryCacheProvider:
    """Single in-memory slot"""

    def __init__(self) -> None:
        self._value: Any | None = None

    async def read(self) -> Any | None:
        return self._value

    async def write(self, value: Any | None) -> None:
        self._value = value


class FileCacheProvider:
    """
    Local file cache.

    Stores:
    - Current configuration (current.json)
    - Version history (last max_versions writes)

    Configurations are stored as JSON; pydantic models and other values
    pydantic can serialize are converted on write and read back as plain
    data. Write failures are logged, never raised. Disk access runs in a
    worker thread.
    """

    CURRENT_FILE = "current.json"

    def __init__(
        self,
        cache_dir: Path,
        max_versions: int = 5,
    ):
        self.cache_dir = Path(cache_dir)
        self.max_versions = max_versions
        self._current: Any | None = None
        self._loaded = False

        self.cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def current_path(self) -> Path:
        return self.cache_dir / self.CURRENT_FILE

    async def read(self) -> Any | None:
        """
        Read configuration from cache.

        Returns:
            Cached configuration, or None if nothing usable is on disk
        """
        if self._loaded:
            return self._current

        self._current = await asyncio.to_thread(self._read_file, self.current_path)
        self._loaded = True
        return self._current

    async def write(self, value: Any | None) -> None:
        """Write configuration to disk and record a version copy"""
        self._current = value
        self._loaded = True

        cached_at = datetime.now(timezone.utc).isoformat()
        entry = {"cached_at": cached_at, "configuration": value}

        try:
            await asyncio.to_thread(self._save, entry)
        except (OSError, TypeError, ValueError) as e:
            logger.error(
                f"Error saving config to cache: {e}",
                extra={"cache_dir": str(self.cache_dir)},
            )
            return

        logger.info(
            f"Config saved to cache (version: {cached_at})",
            extra={"version": cached_at},
        )

    def _save(self, entry: dict) -> None:
        self._write_file(self.current_path, entry)

        safe_timestamp = entry["cached_at"].replace(":", "-").replace("+", "_")
        self._write_file(self.cache_dir / f"v_{safe_timestamp}.json", entry)

        self._cleanup_old_versions()

    def get_versions(self) -> list[dict[str, str]]:
        """
        Get list of available config versions.

        Returns:
            List of version info dicts with cached_at and file, newest first
        """
        versions = []
        for version_file in sorted(self.cache_dir.glob("v_*.json"), reverse=True):
            try:
                with open(version_file, "r", encoding="utf-8") as f:
                    entry = json.load(f)
                versions.append({
                    "cached_at": entry.get("cached_at", ""),
                    "file": version_file.name,
                })
            except (json.JSONDecodeError, OSError):
                continue

        return versions

    def _read_file(self, path: Path) -> Any | None:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                entry = json.load(f)
            return entry.get("configuration") if isinstance(entry, dict) else None
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading cached config {path.name}: {e}")
            return None

    def _write_file(self, path: Path, entry: dict) -> None:
        # Write-and-rename so readers never see a partial file
        temp_path = path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(entry, f, indent=2, default=to_jsonable_python)
            temp_path.replace(path)
        finally:
            temp_path.unlink(missing_ok=True)

    def _cleanup_old_versions(self) -> None:
        """Remove old version files beyond max_versions"""
        version_files = sorted(self.cache_dir.glob("v_*.json"), reverse=True)

        if len(version_files) > self.max_versions:
            for old_file in version_files[self.max_versions:]:
                old_file.unlink()
                logger.debug(f"Removed old config version: {old_file.name}")
