from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


DEFAULT_LOCAL_SYNC_DIR = Path("./syncedFiles")

BUCKET_ENV = "CDN_MIRROR_BUCKET"
CLOUDFRONT_DOMAIN_ENV = "CLOUDFRONT_DOMAIN"
SYNC_DIR_ENV = "CDN_MIRROR_SYNC_DIR"


@dataclass(frozen=True)
class SyncConfig:
    """Run-wide settings, built once from the command line and passed down."""

    bucket: str
    prefix: str
    cdn_domain: str
    local_sync_dir: Path


def parse_bucket_arg(value: str) -> tuple[str, str]:
    """Split ``bucket[/prefix]`` on the first slash.

    Everything after the first ``/`` is returned untouched as the prefix.
    """

    bucket, _, prefix = value.partition("/")
    return bucket, prefix


def normalize_cdn_domain(value: str) -> str:
    domain = value.strip().rstrip("/")
    if not domain:
        return ""
    if domain.startswith("http://") or domain.startswith("https://"):
        return domain
    return f"https://{domain}"
