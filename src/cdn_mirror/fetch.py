"""Stream CDN objects to disk with a progress bar."""

from __future__ import annotations

from pathlib import Path

import httpx
from tqdm import tqdm


CHUNK_SIZE = 64 * 1024


def create_http_client(transport: httpx.BaseTransport | None = None) -> httpx.Client:
    # Ask for identity encoding so streamed byte counts match Content-Length.
    return httpx.Client(
        follow_redirects=True,
        headers={"Accept-Encoding": "identity"},
        transport=transport,
    )


def content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        length = int(raw)
    except ValueError:
        return None
    return length if length >= 0 else None


def download(
    client: httpx.Client,
    url: str,
    destination: Path,
    *,
    show_progress: bool = True,
) -> int:
    """Fetch ``url`` into ``destination``, replacing any existing content.

    Returns the number of bytes written. Errors propagate to the caller; a
    failure mid-stream leaves the partially written file in place.
    """

    written = 0
    with client.stream("GET", url) as response:
        response.raise_for_status()
        with destination.open("wb") as handle, tqdm(
            total=content_length(response),
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            desc=destination.name,
            disable=not show_progress,
        ) as bar:
            for chunk in response.iter_raw(CHUNK_SIZE):
                handle.write(chunk)
                written += len(chunk)
                bar.update(len(chunk))
    return written
