"""Per-object sync decisions and the sequential sync loop."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

import httpx

from .config import SyncConfig
from .fetch import content_length, download
from .listing import iter_object_keys


class SyncAction(enum.Enum):
    SKIP = "skip"
    DOWNLOAD = "download"


class SyncOutcome(enum.Enum):
    SKIPPED = "skipped"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncTarget:
    key: str
    relative_path: str
    local_path: Path
    url: str


@dataclass
class SyncSummary:
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.downloaded + self.skipped + self.failed

    def record(self, outcome: SyncOutcome) -> None:
        if outcome is SyncOutcome.DOWNLOADED:
            self.downloaded += 1
        elif outcome is SyncOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


def relative_key(prefix: str, key: str) -> str:
    """Strip ``prefix`` from ``key`` only where it ends at a ``/`` boundary.

    With prefix ``logs``, ``logs/a.txt`` becomes ``a.txt`` while the sibling
    ``logs2/a.txt`` is kept whole.
    """

    if key == prefix:
        return ""
    if prefix and key.startswith(prefix) and (prefix.endswith("/") or key[len(prefix)] == "/"):
        key = key[len(prefix):]
    return key.lstrip("/")


def resolve_target(config: SyncConfig, key: str) -> SyncTarget:
    """Map an object key to its local path and CDN URL.

    The local path and the URL always share the same relative part.
    """

    relative = relative_key(config.prefix, key)
    if not relative:
        raise ValueError(f"Key {key!r} has no path below prefix {config.prefix!r}")

    root = config.local_sync_dir.resolve()
    local_path = (root / relative).resolve()
    if root not in local_path.parents:
        raise ValueError(f"Key {key!r} resolves outside {root}")

    url = f"{config.cdn_domain}/{quote(relative, safe='/')}"
    return SyncTarget(key=key, relative_path=relative, local_path=local_path, url=url)


def probe_remote_size(client: httpx.Client, url: str) -> int | None:
    response = client.head(url)
    response.raise_for_status()
    return content_length(response)


def decide(target: SyncTarget, client: httpx.Client) -> SyncAction:
    if not target.local_path.is_file():
        return SyncAction.DOWNLOAD

    remote_size = probe_remote_size(client, target.url)
    if remote_size is not None and target.local_path.stat().st_size == remote_size:
        return SyncAction.SKIP
    return SyncAction.DOWNLOAD


def sync_object(
    config: SyncConfig,
    key: str,
    client: httpx.Client,
    *,
    show_progress: bool = True,
) -> SyncOutcome:
    """Bring one object up to date. Failures are logged and reported, never raised."""

    if key.endswith("/"):
        print(f"Skipping folder placeholder: {key}")
        return SyncOutcome.SKIPPED

    try:
        target = resolve_target(config, key)
    except ValueError as exc:
        print(f"Failed to map key to a local path: {exc}")
        return SyncOutcome.FAILED

    try:
        target.local_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        print(f"Failed to create directory for file: {target.local_path}, error: {exc}")
        return SyncOutcome.FAILED

    try:
        action = decide(target, client)
    except httpx.HTTPError as exc:
        print(f"Failed to get file header for {target.url}: {exc}")
        return SyncOutcome.FAILED
    except OSError as exc:
        print(f"Failed to stat local file {target.local_path}: {exc}")
        return SyncOutcome.FAILED

    if action is SyncAction.SKIP:
        print(f"No changes detected, skipping: {target.local_path}")
        return SyncOutcome.SKIPPED

    print(f"Downloading: {target.url}")
    try:
        written = download(client, target.url, target.local_path, show_progress=show_progress)
    except httpx.HTTPError as exc:
        print(f"Failed to download file {target.url}: {exc}")
        return SyncOutcome.FAILED
    except OSError as exc:
        print(f"Failed to write file {target.local_path}: {exc}")
        return SyncOutcome.FAILED

    print(f"Downloaded {target.url} -> {target.local_path} ({written} bytes)")
    return SyncOutcome.DOWNLOADED


def run_sync(
    config: SyncConfig,
    s3_client,
    http_client: httpx.Client,
    *,
    show_progress: bool = True,
) -> SyncSummary:
    """List the bucket and sync every key in listing order.

    Raises ``OSError`` if the sync root cannot be created and ``ListingError``
    if a listing page fails; per-key problems only show up in the summary.
    """

    config.local_sync_dir.mkdir(parents=True, exist_ok=True)

    summary = SyncSummary()
    for key in iter_object_keys(s3_client, config.bucket, config.prefix):
        print(f"Processing {key}")
        summary.record(sync_object(config, key, http_client, show_progress=show_progress))
    return summary
