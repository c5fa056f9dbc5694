"""S3 storage for place photos.

- uploads/places/{filename}                 public objects
- uploads/.staging/{batch_id}/{filename}    batches waiting for their place to commit
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.photo_storage import PhotoBlob, StagedBatch, new_batch_id

PUBLIC_PREFIX = "uploads/places/"
STAGING_PREFIX = "uploads/.staging/"


class S3StorageError(OSError):
    """S3 call failure, surfaced as an I/O error like the local backend's."""


class S3PhotoStorage:
    """Same batch protocol as ``LocalPhotoStorage``, backed by an S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region: str = "sa-east-1",
        s3_client=None,
    ) -> None:
        self.bucket_name = bucket_name
        self.s3_client = s3_client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region,
        )

    @staticmethod
    def _staged_key(batch_id: str, filename: str) -> str:
        return f"{STAGING_PREFIX}{batch_id}/{filename}"

    def _call(self, operation: str, **kwargs):
        try:
            return getattr(self.s3_client, operation)(Bucket=self.bucket_name, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise S3StorageError(f"S3 {operation} failed: {exc}") from exc

    def stage(self, blobs: List[PhotoBlob]) -> StagedBatch:
        batch = StagedBatch(batch_id=new_batch_id(), filenames=[])
        try:
            for blob in blobs:
                self._call(
                    "put_object",
                    Key=self._staged_key(batch.batch_id, blob.filename),
                    Body=blob.data,
                    ContentType=blob.content_type,
                )
                batch.filenames.append(blob.filename)
        except S3StorageError:
            self.discard(batch)
            raise
        return batch

    def promote(self, batch: StagedBatch) -> None:
        for filename in batch.filenames:
            staged_key = self._staged_key(batch.batch_id, filename)
            self._call(
                "copy_object",
                Key=f"{PUBLIC_PREFIX}{filename}",
                CopySource={"Bucket": self.bucket_name, "Key": staged_key},
            )
            batch.promoted.append(filename)
            self._call("delete_object", Key=staged_key)

    def discard(self, batch: StagedBatch) -> None:
        # best effort: a leftover object is picked up by the cleanup script
        for filename in batch.filenames:
            try:
                self._call("delete_object", Key=self._staged_key(batch.batch_id, filename))
            except S3StorageError:
                continue
        for filename in batch.promoted:
            try:
                self.delete_public(filename)
            except S3StorageError:
                continue
        batch.promoted.clear()

    def _iter_objects(self, prefix: str):
        paginator = self.s3_client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                yield from page.get("Contents", [])
        except (BotoCoreError, ClientError) as exc:
            raise S3StorageError(f"S3 list_objects_v2 failed: {exc}") from exc

    def list_public(self) -> List[str]:
        return sorted(obj["Key"][len(PUBLIC_PREFIX):] for obj in self._iter_objects(PUBLIC_PREFIX))

    def delete_public(self, filename: str) -> None:
        self._call("delete_object", Key=f"{PUBLIC_PREFIX}{filename}")

    def list_staged_batches(self, older_than_seconds: float = 0) -> List[str]:
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=older_than_seconds)
        batch_ids = set()
        for obj in self._iter_objects(STAGING_PREFIX):
            if obj["LastModified"] <= cutoff:
                batch_ids.add(obj["Key"][len(STAGING_PREFIX):].split("/", 1)[0])
        return sorted(batch_ids)

    def remove_staged_batch(self, batch_id: str) -> None:
        for obj in list(self._iter_objects(f"{STAGING_PREFIX}{batch_id}/")):
            self._call("delete_object", Key=obj["Key"])
