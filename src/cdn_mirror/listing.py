"""Enumerate object keys in an S3 bucket."""

from __future__ import annotations

from typing import Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError


class ListingError(RuntimeError):
    """Raised when the bucket cannot be listed; aborts the whole run."""


def create_s3_client(region: str | None = None, profile: str | None = None):
    try:
        session = boto3.Session(profile_name=profile, region_name=region)
        return session.client("s3")
    except (BotoCoreError, ClientError) as exc:
        raise ListingError(f"Unable to create S3 client: {exc}") from exc


def iter_object_keys(client, bucket: str, prefix: str = "") -> Iterator[str]:
    """Yield every key under ``prefix``, page by page, in listing order.

    Pages are fetched lazily so processing starts after the first page arrives.
    """

    paginator = client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=bucket, Prefix=prefix)
    try:
        for page in pages:
            for obj in page.get("Contents", []):
                yield obj["Key"]
    except (BotoCoreError, ClientError) as exc:
        raise ListingError(f"Failed to get page for s3://{bucket}/{prefix}: {exc}") from exc
