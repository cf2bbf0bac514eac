"""
Client for the remote stock-price classification service.

Wire contract:
    POST <endpoint>, body = raw PNG bytes, Content-Type: image/png
    200 → {"stockPrice": <float>}

Anything else (network failure, non-200 status, undecodable body,
missing or non-numeric field) raises ClassificationServiceError for
that call only.

The returned price is informational. It is logged by the poll
controller and does not take part in the alert decision.
"""

import logging
from typing import Optional

import httpx

from bookmap_watcher.config import ClassifierConfig
from bookmap_watcher.errors import ClassificationServiceError

logger = logging.getLogger(__name__)


class StockPriceClient:
    """Synchronous httpx client for the classification endpoint.

    Usage:
        with StockPriceClient(endpoint, timeout_s=5.0) as client:
            price = client.classify(png_bytes)
    """

    def __init__(
        self,
        endpoint: str,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            endpoint: Full URL of the classification service.
            timeout_s: Request timeout; None waits indefinitely.
            transport: Optional httpx transport, used by tests.
        """
        self._endpoint = endpoint
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_s),
            follow_redirects=True,
            transport=transport,
        )
        logger.info("StockPriceClient initialized: endpoint=%s, timeout=%s", endpoint, timeout_s)

    @classmethod
    def from_config(cls, config: ClassifierConfig) -> "StockPriceClient":
        return cls(config.endpoint, timeout_s=config.timeout_s)

    def classify(self, png: bytes) -> float:
        """Send a PNG image and return the detected stock price.

        Raises:
            ClassificationServiceError: On any transport, status or
                                        decoding failure.
        """
        headers = {"Content-Type": "image/png", "Accept": "application/json"}
        try:
            response = self._client.post(self._endpoint, content=png, headers=headers)
        except httpx.HTTPError as e:
            raise ClassificationServiceError(
                f"failed to send request to AI service: {e}"
            ) from e

        if response.status_code != httpx.codes.OK:
            raise ClassificationServiceError(
                f"AI service returned status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ClassificationServiceError(f"failed to decode AI response: {e}") from e

        if not isinstance(payload, dict) or "stockPrice" not in payload:
            raise ClassificationServiceError(
                f"AI response missing 'stockPrice': {payload!r}"
            )

        price = payload["stockPrice"]
        # bool is an int subclass; reject it explicitly
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise ClassificationServiceError(
                f"AI response 'stockPrice' is not a number: {price!r}"
            )
        return float(price)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "StockPriceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
