"""Storage for generated profiles.

Two modes:
- ``download``: nothing is written; ``save`` returns the serialized JSON so
  the client can offer it as a file download, and ``list`` is always empty.
- ``filesystem``: profiles are written to a local directory keyed by filename
  and ``list`` summarizes every ``*.json`` file found there.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Literal

from app.schemas.profile import ProfileSummary, SaveProfileResult

logger = logging.getLogger(__name__)

StorageMode = Literal["download", "filesystem"]


def normalize_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a bare ``*.json`` name.

    Directory components are dropped so saves stay inside the store.

    Raises:
        ValueError: If nothing usable is left.
    """
    name = Path(filename.replace("\\", "/")).name.strip()
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid filename: {filename!r}")
    return name if name.endswith(".json") else f"{name}.json"


def serialize_profile(profile: dict[str, Any]) -> str:
    return json.dumps(profile, indent=2, ensure_ascii=False)


class ProfileStore:
    """Save and list generated profiles.

    Args:
        mode: ``download`` or ``filesystem``.
        directory: Target directory for ``filesystem`` mode.
    """

    def __init__(self, mode: StorageMode = "filesystem", directory: Path | None = None):
        if mode == "filesystem" and directory is None:
            raise ValueError("filesystem storage requires a directory")
        self.mode = mode
        self.directory = directory

    async def save(self, profile: dict[str, Any], filename: str) -> SaveProfileResult:
        """Persist (or package for download) a profile.

        Raises:
            ValueError: If the filename is unusable.
        """
        name = normalize_filename(filename)
        content = serialize_profile(profile)

        if self.mode == "download":
            return SaveProfileResult(
                message="Profile ready for download",
                filename=name,
                content=content,
                size=len(content.encode("utf-8")),
            )

        filepath = await asyncio.to_thread(self._write, name, content)
        logger.info("Saved profile %s to %s", profile.get("id"), filepath)
        return SaveProfileResult(
            message="Profile saved successfully",
            filename=name,
            filepath=str(filepath),
        )

    def _write(self, name: str, content: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        filepath = self.directory / name
        filepath.write_text(content, encoding="utf-8")
        return filepath

    async def list_profiles(self) -> list[ProfileSummary]:
        """Summaries of stored profiles, sorted by filename."""
        if self.mode == "download":
            return []
        return await asyncio.to_thread(self._read_summaries)

    def _read_summaries(self) -> list[ProfileSummary]:
        if not self.directory.is_dir():
            return []

        summaries = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                profile = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable profile %s: %s", path.name, e)
                continue
            if not isinstance(profile, dict):
                logger.warning("Skipping %s: not a JSON object", path.name)
                continue
            summaries.append(
                ProfileSummary(
                    filename=path.name,
                    id=profile.get("id"),
                    name=profile.get("name"),
                    title=profile.get("title"),
                    version=profile.get("version"),
                    status=profile.get("status"),
                )
            )
        return summaries
