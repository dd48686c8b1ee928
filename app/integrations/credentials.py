"""Marketplace tables and the immutable catalog credential set."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from app.config import DEFAULT_MARKETPLACE, PAAPI_SETTINGS

DEFAULT_BASE_URL = "https://webservices.amazon.com/paapi5"
DEFAULT_REGION = "us-east-1"

# marketplace -> AWS region used in the credential scope
MARKETPLACE_REGIONS: dict[str, str] = {
    "www.amazon.com": "us-east-1",
    "www.amazon.co.uk": "eu-west-1",
    "www.amazon.de": "eu-west-1",
    "www.amazon.fr": "eu-west-1",
    "www.amazon.it": "eu-west-1",
    "www.amazon.es": "eu-west-1",
    "www.amazon.in": "eu-west-1",
    "www.amazon.ca": "us-east-1",
    "www.amazon.com.au": "us-west-2",
    "www.amazon.co.jp": "us-west-2",
    "www.amazon.com.br": "us-east-1",
    "www.amazon.com.mx": "us-east-1",
    "www.amazon.nl": "eu-west-1",
    "www.amazon.sg": "us-west-2",
    "www.amazon.ae": "eu-west-1",
    "www.amazon.sa": "eu-west-1",
    "www.amazon.se": "eu-west-1",
    "www.amazon.com.tr": "eu-west-1",
    "www.amazon.pl": "eu-west-1",
    "www.amazon.eg": "eu-west-1",
    "www.amazon.be": "eu-west-1",
    "www.amazon.ie": "eu-west-1",
}

# Every marketplace is served from webservices.<domain>/paapi5
MARKETPLACE_BASE_URLS: dict[str, str] = {
    marketplace: f"https://webservices.{marketplace[len('www.'):]}/paapi5"
    for marketplace in MARKETPLACE_REGIONS
}


def region_for_marketplace(marketplace: str) -> str:
    return MARKETPLACE_REGIONS.get(marketplace, DEFAULT_REGION)


def base_url_for_marketplace(marketplace: str) -> str:
    return MARKETPLACE_BASE_URLS.get(marketplace, DEFAULT_BASE_URL)


@dataclass(frozen=True)
class Credentials:
    """Catalog API credential set, built once and injected into the client.

    ``region`` and ``base_url`` are derived from the marketplace unless given.
    """
    access_key: str | None
    secret_key: str | None = field(default=None, repr=False)
    partner_tag: str | None = None
    marketplace: str = DEFAULT_MARKETPLACE
    region: str = ""
    base_url: str = ""

    def __post_init__(self) -> None:
        if not self.region:
            object.__setattr__(self, "region", region_for_marketplace(self.marketplace))
        if not self.base_url:
            object.__setattr__(self, "base_url", base_url_for_marketplace(self.marketplace))

    @classmethod
    def from_env(cls) -> "Credentials":
        marketplace = str(PAAPI_SETTINGS.get("marketplace") or DEFAULT_MARKETPLACE)
        return cls(
            access_key=os.getenv("AWS_ACCESS_KEY") or None,
            secret_key=os.getenv("AWS_SECRET_KEY") or None,
            partner_tag=os.getenv("AWS_PARTNER_TAG") or None,
            marketplace=marketplace,
            region=str(PAAPI_SETTINGS.get("region_override") or ""),
        )

    @property
    def host(self) -> str:
        return urlsplit(self.base_url).netloc

    @property
    def base_path(self) -> str:
        return urlsplit(self.base_url).path.rstrip("/")

    def missing(self) -> list[str]:
        fields = {
            "access_key": self.access_key,
            "secret_key": self.secret_key,
            "partner_tag": self.partner_tag,
        }
        return [name for name, value in fields.items() if not value]

    @property
    def is_complete(self) -> bool:
        return not self.missing()


__all__ = [
    "Credentials",
    "MARKETPLACE_REGIONS",
    "MARKETPLACE_BASE_URLS",
    "region_for_marketplace",
    "base_url_for_marketplace",
]
