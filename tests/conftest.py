import sys
from pathlib import Path

import boto3
import httpx
import pytest
from botocore.stub import Stubber


PROJECT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from cdn_mirror.fetch import create_http_client  # noqa: E402


class FakeCdn:
    """In-memory CloudFront stand-in served through httpx.MockTransport."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.failing: set[str] = set()
        self.requests: list[tuple[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        if path in self.failing:
            raise httpx.ConnectError("connection refused", request=request)
        body = self.objects.get(path)
        if body is None:
            return httpx.Response(404)
        if request.method == "HEAD":
            return httpx.Response(200, headers={"Content-Length": str(len(body))})
        return httpx.Response(
            200,
            headers={"Content-Length": str(len(body))},
            stream=httpx.ByteStream(body),
        )

    def methods_for(self, path: str) -> list[str]:
        return [method for method, seen in self.requests if seen == path]

    def client(self) -> httpx.Client:
        return create_http_client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def cdn():
    return FakeCdn()


@pytest.fixture
def http_client(cdn):
    with cdn.client() as client:
        yield client


@pytest.fixture
def s3_stub():
    client = boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
