"""AWS Signature Version 4 for the Product Advertising API.

Pure functions: the same (method, path, headers, body, host, credentials)
always yields the same Authorization header. The timestamp is read from the
``x-amz-date`` header, which callers set before signing.
"""
from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Mapping

from app.integrations.credentials import Credentials

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "ProductAdvertisingAPI"
TARGET_PREFIX = "com.amazon.paapi5.v1.ProductAdvertisingAPIv1"
CONTENT_TYPE = "application/json; charset=utf-8"
CONTENT_ENCODING = "amz-1.0"


@dataclass(frozen=True)
class SignedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: str
    authorization: str
    signed_headers: str
    canonical_request: str
    string_to_sign: str


def sha256_hex(data: str | bytes) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date: str, region: str, service: str = SERVICE) -> bytes:
    k_date = _hmac(f"AWS4{secret_key}".encode("utf-8"), date)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, "aws4_request")


def canonicalize_headers(headers: Mapping[str, str]) -> tuple[str, str]:
    """Return (canonical header block, signed header list).

    Names are lower-cased and sorted; values are trimmed. Each line ends with
    a newline, so the block itself ends with one.
    """
    lowered = {name.lower(): str(value).strip() for name, value in headers.items()}
    names = sorted(lowered)
    block = "".join(f"{name}:{lowered[name]}\n" for name in names)
    return block, ";".join(names)


def build_headers(operation: str, timestamp: str) -> dict[str, str]:
    return {
        "content-encoding": CONTENT_ENCODING,
        "content-type": CONTENT_TYPE,
        "x-amz-date": timestamp,
        "x-amz-target": f"{TARGET_PREFIX}.{operation}",
    }


def sign_request(
    method: str,
    path: str,
    headers: Mapping[str, str],
    body: str,
    host: str,
    credentials: Credentials,
) -> SignedRequest:
    timestamp = next((v for k, v in headers.items() if k.lower() == "x-amz-date"), None)
    if not timestamp:
        raise ValueError("x-amz-date header must be set before signing")
    date = timestamp[:8]

    headers_with_host = {**headers, "host": host}
    canonical_headers, signed_headers = canonicalize_headers(headers_with_host)

    canonical_request = "\n".join([
        method,
        path,
        "",  # query string is always empty
        canonical_headers,
        signed_headers,
        sha256_hex(body),
    ])

    credential_scope = f"{date}/{credentials.region}/{SERVICE}/aws4_request"
    string_to_sign = "\n".join([
        ALGORITHM,
        timestamp,
        credential_scope,
        sha256_hex(canonical_request),
    ])

    signing_key = derive_signing_key(credentials.secret_key or "", date, credentials.region)
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    authorization = (
        f"{ALGORITHM} Credential={credentials.access_key}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )
    return SignedRequest(
        method=method,
        path=path,
        headers={**headers, "Authorization": authorization},
        body=body,
        authorization=authorization,
        signed_headers=signed_headers,
        canonical_request=canonical_request,
        string_to_sign=string_to_sign,
    )


__all__ = [
    "ALGORITHM",
    "SERVICE",
    "SignedRequest",
    "build_headers",
    "canonicalize_headers",
    "derive_signing_key",
    "sha256_hex",
    "sign_request",
]
