"""Local filesystem storage for place photos.

Layout under ``root``:

- places/{filename}                 public, served as /uploads/places/{filename}
- .staging/{batch_id}/{filename}    batches waiting for their place to commit
"""

from __future__ import annotations

import os
import shutil
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

PUBLIC_URL_PREFIX = "/uploads/places"


@dataclass(frozen=True)
class PhotoBlob:
    """Validated photo bytes ready to be written."""

    filename: str
    content_type: str
    data: bytes

    @property
    def url(self) -> str:
        return public_url(self.filename)


@dataclass
class StagedBatch:
    """Handle for one staged photo batch."""

    batch_id: str
    filenames: List[str]
    promoted: List[str] = field(default_factory=list)

    @property
    def urls(self) -> List[str]:
        return [public_url(name) for name in self.filenames]


def public_url(filename: str) -> str:
    return f"{PUBLIC_URL_PREFIX}/{filename}"


def new_batch_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}"


class LocalPhotoStorage:
    """Stage, promote and discard photo batches on the local disk."""

    def __init__(self, root: str | Path = "uploads") -> None:
        self.root = Path(root)
        self.public_dir = self.root / "places"
        self.staging_dir = self.root / ".staging"

    def stage(self, blobs: List[PhotoBlob]) -> StagedBatch:
        batch = StagedBatch(batch_id=new_batch_id(), filenames=[b.filename for b in blobs])
        batch_dir = self.staging_dir / batch.batch_id
        batch_dir.mkdir(parents=True, exist_ok=True)
        try:
            for blob in blobs:
                (batch_dir / blob.filename).write_bytes(blob.data)
        except OSError:
            shutil.rmtree(batch_dir, ignore_errors=True)
            raise
        return batch

    def promote(self, batch: StagedBatch) -> None:
        """Move staged files into the public area (same-filesystem rename)."""
        self.public_dir.mkdir(parents=True, exist_ok=True)
        batch_dir = self.staging_dir / batch.batch_id
        for filename in batch.filenames:
            os.replace(batch_dir / filename, self.public_dir / filename)
            batch.promoted.append(filename)
        shutil.rmtree(batch_dir, ignore_errors=True)

    def discard(self, batch: StagedBatch) -> None:
        for filename in batch.promoted:
            (self.public_dir / filename).unlink(missing_ok=True)
        batch.promoted.clear()
        shutil.rmtree(self.staging_dir / batch.batch_id, ignore_errors=True)

    def list_public(self) -> List[str]:
        if not self.public_dir.exists():
            return []
        return sorted(p.name for p in self.public_dir.iterdir() if p.is_file())

    def delete_public(self, filename: str) -> None:
        (self.public_dir / filename).unlink(missing_ok=True)

    def list_staged_batches(self, older_than_seconds: float = 0) -> List[str]:
        """Batch ids whose staging directory is older than the given age."""
        if not self.staging_dir.exists():
            return []
        cutoff = time.time() - older_than_seconds
        return sorted(
            d.name for d in self.staging_dir.iterdir()
            if d.is_dir() and d.stat().st_mtime <= cutoff
        )

    def remove_staged_batch(self, batch_id: str) -> None:
        shutil.rmtree(self.staging_dir / batch_id, ignore_errors=True)
