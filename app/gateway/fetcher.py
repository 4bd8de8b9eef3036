import httpx

from app.gateway.models import FetchedBlob
from app.logging.logger import Log
from app.recovery.exceptions import FetchExhausted, NoGatewaysConfigured


class GatewayFetcher:
    """Fetches a blob from an ordered list of content-addressed gateways.

    Each gateway is tried once, in order; the first HTTP 200 wins. Worst-case
    latency is bounded by ``len(gateway_urls) * timeout_seconds``.
    """

    def __init__(
        self,
        gateway_urls: list[str],
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not gateway_urls:
            raise NoGatewaysConfigured("At least one gateway URL must be configured")
        self._gateway_urls = list(gateway_urls)
        self._timeout_seconds = timeout_seconds
        self._client = client or httpx.Client(follow_redirects=True)

    @property
    def gateway_urls(self) -> list[str]:
        return list(self._gateway_urls)

    def fetch(self, content_ref: str) -> FetchedBlob:
        """Return the body of the first gateway answering 200.

        Raises:
            FetchExhausted: if every gateway failed or the reference is empty.
        """
        ref = content_ref.strip()
        if not ref:
            raise FetchExhausted(content_ref)

        failures: list[str] = []
        for base_url in self._gateway_urls:
            url = f"{base_url}{ref}"
            Log.debug(f"Fetching {url}")
            try:
                response = self._client.get(url, timeout=self._timeout_seconds)
            except httpx.TimeoutException:
                Log.warning(f"Gateway {base_url} timed out, trying next")
                failures.append(f"{base_url}: timeout")
                continue
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                Log.warning(f"Gateway {base_url} error: {exc}, trying next")
                failures.append(f"{base_url}: {exc.__class__.__name__}")
                continue

            if response.status_code != 200:
                Log.warning(
                    f"Gateway {base_url} returned {response.status_code}, trying next"
                )
                failures.append(f"{base_url}: HTTP {response.status_code}")
                continue

            Log.info(f"Downloaded {len(response.content)} bytes from {base_url}")
            return FetchedBlob(content_ref=ref, content=response.content, endpoint=base_url)

        raise FetchExhausted(ref, failures)

    def close(self) -> None:
        self._client.close()
