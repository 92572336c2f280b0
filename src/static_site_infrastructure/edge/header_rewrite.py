"""Lambda@Edge origin-response handler for static site content.

Copies the `Last-Modified` timestamp that uploads record as S3 object metadata into
the standard header and stamps a fixed set of security headers on every response.

This module is deployed on its own as the function bundle, so it may only import from
the standard library.
"""

import logging

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

LAST_MODIFIED_SOURCE_HEADER = "X-Amz-Meta-Last-Modified"
LAST_MODIFIED_HEADER = "Last-Modified"

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Content-Security-Policy": "upgrade-insecure-requests",
    "Strict-Transport-Security": "max-age=31536000; includesubdomains",
    "X-Content-Type-Options": "nosniff",
    "Cache-Control": "no-cache,no-store,must-revalidate,pre-check=0,post-check=0",
}


def _header_value(headers, name):
    # CloudFront lower-cases header map keys, but tolerate events that do not.
    wanted = name.lower()
    for header_key, entries in headers.items():
        if header_key.lower() != wanted:
            continue
        try:
            return entries[0]["value"]
        except (IndexError, KeyError, TypeError):
            return None
    return None


def _set_header(headers, name, value):
    for header_key in [key for key in headers if key.lower() == name.lower()]:
        del headers[header_key]
    headers[name.lower()] = [{"key": name, "value": value}]


def rewrite_headers(response):
    """Normalize the last-modified metadata header and add the security headers.

    The response is mutated in place and returned. A missing or malformed metadata
    header is skipped; no other header is removed.
    """
    headers = response.setdefault("headers", {})

    last_modified = _header_value(headers, LAST_MODIFIED_SOURCE_HEADER)
    if last_modified is not None:
        _set_header(headers, LAST_MODIFIED_HEADER, last_modified)
        logger.info(
            'Response header "%s" was set to "%s"', LAST_MODIFIED_HEADER, last_modified
        )

    for name, value in SECURITY_HEADERS.items():
        _set_header(headers, name, value)

    return response


def lambda_handler(event, context):  # noqa: ARG001
    response = event["Records"][0]["cf"]["response"]
    return rewrite_headers(response)
