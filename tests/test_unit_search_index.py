import pytest

from app.integrations.credentials import Credentials, base_url_for_marketplace, region_for_marketplace
from app.integrations.search_index import SEARCH_INDEX_VOCABULARY, SMART_MAP, resolve_search_index


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Mobiles", "Electronics"),  # exact key
        ("laptops", "Computers"),  # case-insensitive key
        ("Smart LED TV 55 inch", "Electronics"),  # contains key
        ("Video Games & Consoles", "VideoGames"),  # longest key wins over "Games"
        ("Women's Clothing", "Apparel"),
        ("Pet Supplies and Food", "PetSupplies"),
        ("Something unheard of", "All"),
    ],
)
def test_resolve_search_index(label, expected):
    assert resolve_search_index(label) == expected


@pytest.mark.parametrize("label", [None, ""])
def test_resolve_search_index_empty_input_is_wildcard(label):
    assert resolve_search_index(label) == "All"


def test_resolution_is_total_and_idempotent():
    for label in list(SMART_MAP) + ["xyz", "  ", "tv stand", "Kitchen & Dining"]:
        first = resolve_search_index(label)
        assert first in SEARCH_INDEX_VOCABULARY
        assert resolve_search_index(label) == first


def test_marketplace_tables():
    assert base_url_for_marketplace("www.amazon.in") == "https://webservices.amazon.in/paapi5"
    assert base_url_for_marketplace("www.amazon.co.uk") == "https://webservices.amazon.co.uk/paapi5"
    assert base_url_for_marketplace("www.unknown.example") == "https://webservices.amazon.com/paapi5"
    assert region_for_marketplace("www.amazon.co.jp") == "us-west-2"
    assert region_for_marketplace("www.amazon.com.br") == "us-east-1"
    assert region_for_marketplace("www.amazon.in") == "eu-west-1"
    assert region_for_marketplace("www.unknown.example") == "us-east-1"


def test_credentials_derivation_and_missing_fields():
    creds = Credentials(access_key="a", secret_key=None, partner_tag="", marketplace="www.amazon.de")
    assert creds.host == "webservices.amazon.de"
    assert creds.base_path == "/paapi5"
    assert creds.region == "eu-west-1"
    assert creds.missing() == ["secret_key", "partner_tag"]
    assert not creds.is_complete
    assert Credentials(access_key="a", secret_key="b", partner_tag="c", region="us-west-2").region == "us-west-2"


def test_credentials_from_env(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY", "ak")
    monkeypatch.setenv("AWS_SECRET_KEY", "sk")
    monkeypatch.delenv("AWS_PARTNER_TAG", raising=False)
    creds = Credentials.from_env()
    assert creds.access_key == "ak"
    assert creds.missing() == ["partner_tag"]
    assert "sk" not in repr(creds)
