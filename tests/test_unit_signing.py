import hashlib
import re
from datetime import datetime, timezone

from app.integrations.credentials import Credentials
from app.integrations.signing import (
    build_headers,
    canonicalize_headers,
    derive_signing_key,
    sha256_hex,
    sign_request,
)
from app.utils.time import amz_timestamp

CREDS = Credentials(
    access_key="AKIDEXAMPLE",
    secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
    partner_tag="tag-21",
    marketplace="www.amazon.com",
)
BODY = '{"Keywords":"laptop","SearchIndex":"All"}'
TS = "20240101T120000Z"


def _sign(body=BODY, timestamp=TS, creds=CREDS):
    return sign_request(
        "POST",
        "/paapi5/searchitems",
        build_headers("SearchItems", timestamp),
        body,
        "webservices.amazon.com",
        creds,
    )


def test_derive_signing_key_matches_published_vector():
    key = derive_signing_key("wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY", "20120215", "us-east-1", "iam")
    assert key.hex() == "f4780e2d9f65fa895f9c67b32ce1baf0b0d8a43505a000a1a9e090d414db404d"


def test_amz_timestamp_is_compact_utc():
    moment = datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
    assert amz_timestamp(moment) == "20240101T120000Z"
    assert re.fullmatch(r"\d{8}T\d{6}Z", amz_timestamp())


def test_canonical_headers_are_lowercased_sorted_and_trimmed():
    block, signed = canonicalize_headers({"X-Amz-Date": "  20240101T120000Z ", "Host": "h", "Content-Type": "a"})
    assert signed == "content-type;host;x-amz-date"
    assert block == "content-type:a\nhost:h\nx-amz-date:20240101T120000Z\n"


def test_canonical_request_layout():
    signed = _sign()
    lines = signed.canonical_request.split("\n")
    assert lines[0] == "POST"
    assert lines[1] == "/paapi5/searchitems"
    assert lines[2] == ""
    assert lines[3] == "content-encoding:amz-1.0"
    assert lines[4] == "content-type:application/json; charset=utf-8"
    assert lines[5] == "host:webservices.amazon.com"
    assert lines[6] == f"x-amz-date:{TS}"
    assert lines[7] == "x-amz-target:com.amazon.paapi5.v1.ProductAdvertisingAPIv1.SearchItems"
    # blank line closes the header block
    assert lines[8] == ""
    assert lines[9] == "content-encoding;content-type;host;x-amz-date;x-amz-target"
    assert lines[10] == hashlib.sha256(BODY.encode()).hexdigest()


def test_string_to_sign_uses_credential_scope():
    signed = _sign()
    assert signed.string_to_sign.split("\n") == [
        "AWS4-HMAC-SHA256",
        TS,
        "20240101/us-east-1/ProductAdvertisingAPI/aws4_request",
        sha256_hex(signed.canonical_request),
    ]


def test_authorization_header_format():
    signed = _sign()
    assert re.fullmatch(
        r"AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/20240101/us-east-1/ProductAdvertisingAPI/aws4_request, "
        r"SignedHeaders=content-encoding;content-type;host;x-amz-date;x-amz-target, "
        r"Signature=[0-9a-f]{64}",
        signed.authorization,
    )
    assert signed.headers["Authorization"] == signed.authorization


def test_signing_is_deterministic():
    assert _sign().authorization == _sign().authorization


def test_signature_depends_on_body_time_and_region():
    base = _sign().authorization
    assert _sign(body=BODY + " ").authorization != base
    assert _sign(timestamp="20240101T120001Z").authorization != base
    india = Credentials(access_key="AKIDEXAMPLE", secret_key=CREDS.secret_key, partner_tag="t", marketplace="www.amazon.in")
    assert india.region == "eu-west-1"
    assert _sign(creds=india).authorization != base
