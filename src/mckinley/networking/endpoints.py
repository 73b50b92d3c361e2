"""Statically defined API endpoints and the environment base URL table."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from urllib.parse import urljoin, urlsplit

from mckinley.config import Settings


class APIEnvironment(str, Enum):
    """Deployment stage whose base URL table is active."""

    ALPHA = "alpha"  # Development
    BETA = "beta"  # Staging
    PRE_PROD = "pre_prod"  # Pre-production
    PROD = "prod"  # Production


# Header set sent with every endpoint call unless the endpoint overrides it
DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "access-control-allow-headers": "Origin, X-Requested-With, Content-Type, Accept",
        "access-control-allow-methods": "GET, POST, PUT",
        "access-control-allow-origin": "*",
        "server": "cloudflare-nginx",
    }
)


@dataclass(frozen=True)
class Endpoint:
    """A named API target.

    ``relative_path`` is either an absolute URL or a path joined onto the
    active environment's base URL.
    """

    name: str
    relative_path: str
    headers: Mapping[str, str] = field(default_factory=lambda: DEFAULT_HEADERS)


LOGIN = Endpoint(name="login", relative_path="https://reqres.in/")

DEFAULT_ENDPOINTS: tuple[Endpoint, ...] = (LOGIN,)


class UnknownEndpointError(KeyError):
    """No endpoint is registered under the requested name."""


class EndpointRegistry:
    """Read-only name -> Endpoint table bound to one API environment."""

    def __init__(
        self,
        environment: APIEnvironment,
        base_urls: Mapping[str, str],
        endpoints: Iterable[Endpoint] = DEFAULT_ENDPOINTS,
    ) -> None:
        self.environment = environment
        self.base_url = base_urls.get(environment.value, "")
        self._endpoints: Mapping[str, Endpoint] = MappingProxyType(
            {endpoint.name: endpoint for endpoint in endpoints}
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, endpoints: Iterable[Endpoint] = DEFAULT_ENDPOINTS
    ) -> "EndpointRegistry":
        return cls(
            environment=APIEnvironment(settings.api_environment),
            base_urls=settings.base_urls,
            endpoints=endpoints,
        )

    @property
    def names(self) -> list[str]:
        return list(self._endpoints)

    def resolve(self, name: str) -> Endpoint:
        try:
            return self._endpoints[name]
        except KeyError:
            raise UnknownEndpointError(name) from None

    def url_for(self, endpoint: Endpoint) -> str | None:
        """Absolute http(s) URL for ``endpoint``, or None if it cannot be formed."""
        url = endpoint.relative_path
        if not urlsplit(url).scheme:
            if not self.base_url:
                return None
            url = urljoin(self.base_url, url)

        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return None
        return url
