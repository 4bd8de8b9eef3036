from app.config.settings import Settings
from app.gateway.fetcher import GatewayFetcher


class GatewayFetcherFactory:
    """Creates the gateway fetcher from settings."""

    @classmethod
    def create(cls, settings: Settings) -> GatewayFetcher:
        """Raises NoGatewaysConfigured when settings list no gateway."""
        return GatewayFetcher(
            gateway_urls=settings.gateway_urls,
            timeout_seconds=settings.gateway_timeout_seconds,
        )
