"""
Tests for the classification service client.
"""

import httpx
import pytest

from bookmap_watcher.classifier_client import StockPriceClient
from bookmap_watcher.errors import ClassificationServiceError

ENDPOINT = "http://classifier.test/api/detect-stock-price"
PNG = b"\x89PNG\r\n\x1a\nfake"


def _client(handler):
    return StockPriceClient(ENDPOINT, timeout_s=1.0, transport=httpx.MockTransport(handler))


def test_classify_posts_png_and_parses_price():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"stockPrice": 5123.75})

    with _client(handler) as client:
        price = client.classify(PNG)

    assert price == 5123.75
    assert seen == {"method": "POST", "content_type": "image/png", "body": PNG}


def test_integer_price_is_accepted():
    with _client(lambda request: httpx.Response(200, json={"stockPrice": 42})) as client:
        assert client.classify(PNG) == 42.0


def test_non_200_status_raises():
    with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(ClassificationServiceError, match="status 503"):
            client.classify(PNG)


def test_invalid_json_raises():
    with _client(lambda request: httpx.Response(200, content=b"not json")) as client:
        with pytest.raises(ClassificationServiceError, match="decode"):
            client.classify(PNG)


@pytest.mark.parametrize("payload", [{}, {"price": 1.0}, {"stockPrice": "1.0"}, {"stockPrice": True}, [1.0]])
def test_malformed_payload_raises(payload):
    with _client(lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(ClassificationServiceError):
            client.classify(PNG)


def test_network_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(ClassificationServiceError, match="failed to send"):
            client.classify(PNG)
