#!/usr/bin/env python3
"""Mirror an S3 bucket (or prefix) to a local directory through its CDN."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from cdn_mirror.config import (
    BUCKET_ENV,
    CLOUDFRONT_DOMAIN_ENV,
    DEFAULT_LOCAL_SYNC_DIR,
    SYNC_DIR_ENV,
    SyncConfig,
    normalize_cdn_domain,
    parse_bucket_arg,
)
from cdn_mirror.fetch import create_http_client
from cdn_mirror.listing import ListingError, create_s3_client
from cdn_mirror.sync import run_sync


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sync objects from an S3 bucket into a local directory, fetching content through CloudFront."
    )
    parser.add_argument(
        "-bucketName",
        "--bucketName",
        "--bucket-name",
        dest="bucket_name",
        default=os.environ.get(BUCKET_ENV, ""),
        help=f"The S3 bucket and optional prefix as 'bucket-name/prefix-path' (or set {BUCKET_ENV})",
    )
    parser.add_argument(
        "-cloudFrontDomain",
        "--cloudFrontDomain",
        "--cloudfront-domain",
        dest="cloudfront_domain",
        default=os.environ.get(CLOUDFRONT_DOMAIN_ENV, ""),
        help=f"The CloudFront domain mapping to the bucket, e.g. 'https://sub.domain.com' (or set {CLOUDFRONT_DOMAIN_ENV})",
    )
    parser.add_argument(
        "-localSyncDir",
        "--localSyncDir",
        "--local-sync-dir",
        dest="local_sync_dir",
        default=os.environ.get(SYNC_DIR_ENV, str(DEFAULT_LOCAL_SYNC_DIR)),
        help="Local directory to sync files to (default: ./syncedFiles)",
    )
    parser.add_argument("--region", default=None, help="AWS region for the listing client")
    parser.add_argument("--profile", default=None, help="AWS credentials profile")
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not draw download progress bars",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    bucket, prefix = parse_bucket_arg(args.bucket_name)
    bucket = bucket.strip()
    cdn_domain = normalize_cdn_domain(args.cloudfront_domain)
    if not bucket or not cdn_domain:
        print("Error: bucketName and cloudFrontDomain are required.")
        parser.print_help()
        return 1

    config = SyncConfig(
        bucket=bucket,
        prefix=prefix,
        cdn_domain=cdn_domain,
        local_sync_dir=Path(args.local_sync_dir),
    )

    try:
        s3_client = create_s3_client(region=args.region, profile=args.profile)
    except ListingError as exc:
        print(exc)
        return 1

    with create_http_client() as http_client:
        try:
            summary = run_sync(config, s3_client, http_client, show_progress=not args.no_progress)
        except ListingError as exc:
            print(exc)
            return 1
        except OSError as exc:
            print(f"Failed to create local directory {config.local_sync_dir}: {exc}")
            return 1
        except KeyboardInterrupt:
            print("Interrupted.")
            return 130

    print(
        f"Processed {summary.total} objects from s3://{bucket}/{prefix}".rstrip("/")
        + f": {summary.downloaded} downloaded, {summary.skipped} skipped, {summary.failed} failed"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
