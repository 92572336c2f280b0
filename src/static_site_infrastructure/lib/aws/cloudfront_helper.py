"""Derive the caching, geo-restriction and response header policy of a distribution."""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pulumi import Input
from pulumi_aws import cloudfront

from static_site_infrastructure.edge.header_rewrite import SECURITY_HEADERS
from static_site_infrastructure.lib.errors import ConfigError

DEFAULT_ERROR_PAGE_TEMPLATE = "/cdn_errors/{status_code}.html"
ERROR_PAGE_STATUS_CODES = (404, 500, 503)
CACHED_METHODS = ("GET", "HEAD", "OPTIONS")
HSTS_MAX_AGE = 31536000
COUNTRY_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")


class CloudfrontPriceClass(str, Enum):
    """Valid price classes for CloudFront to control tradeoffs of price vs. latency for global visitors."""  # noqa: E501

    # For more details on price class refer to below link and search for PriceClass
    # https://docs.aws.amazon.com/cloudfront/latest/APIReference/API_DistributionConfig.html
    # NB: POP == Points Of Presence which is where CDN edge servers are located
    us_eu = "PriceClass_100"  # POPs in US, Canada, Europe, and Israel
    exclude_au_sa = (  # POPs in all supported geos except South America and Australia  # noqa: E501
        "PriceClass_200"
    )
    all_geos = "PriceClass_All"  # POPs in all supoprted geos


class GeoRestrictionMode(str, Enum):
    none = "none"
    whitelist = "whitelist"


@dataclass(frozen=True)
class CachePolicy:
    min_ttl: int
    default_ttl: int
    max_ttl: int
    allowed_methods: tuple[str, ...] = CACHED_METHODS
    cached_methods: tuple[str, ...] = CACHED_METHODS
    compress: bool = True


@dataclass(frozen=True)
class GeoRestriction:
    mode: GeoRestrictionMode = GeoRestrictionMode.none
    countries: tuple[str, ...] = ()


@dataclass(frozen=True)
class SecurityHeaderSet:
    frame_options: str = SECURITY_HEADERS["X-Frame-Options"]
    xss_protection: str = SECURITY_HEADERS["X-XSS-Protection"]
    content_security_policy: str = SECURITY_HEADERS["Content-Security-Policy"]
    strict_transport_security: str = SECURITY_HEADERS["Strict-Transport-Security"]
    content_type_options: str = SECURITY_HEADERS["X-Content-Type-Options"]
    cache_control: str = SECURITY_HEADERS["Cache-Control"]

    def as_headers(self) -> dict[str, str]:
        return {
            "X-Frame-Options": self.frame_options,
            "X-XSS-Protection": self.xss_protection,
            "Content-Security-Policy": self.content_security_policy,
            "Strict-Transport-Security": self.strict_transport_security,
            "X-Content-Type-Options": self.content_type_options,
            "Cache-Control": self.cache_control,
        }


@dataclass(frozen=True)
class EdgePolicy:
    cache_policy: CachePolicy
    geo_restriction: GeoRestriction
    security_headers: SecurityHeaderSet = field(default_factory=SecurityHeaderSet)


def parse_ttl(ttl: Any) -> int:
    """Validate a TTL in seconds.

    Integers and strings of digits are accepted; anything else, and any value below 1,
    is rejected.

    :raises ConfigError: If the TTL is not a positive integer.
    """
    if isinstance(ttl, bool):
        msg = f"ttl must be a positive integer, got {ttl!r}"
        raise ConfigError(msg)
    if isinstance(ttl, str):
        ttl = ttl.strip()
        # str.isdigit also accepts non-ASCII digits such as superscripts
        if not (ttl.isascii() and ttl.isdigit()):
            msg = f"ttl must be a positive integer, got {ttl!r}"
            raise ConfigError(msg)
        ttl = int(ttl)
    if not isinstance(ttl, int) or ttl <= 0:
        msg = f"ttl must be a positive integer, got {ttl!r}"
        raise ConfigError(msg)
    return ttl


def parse_allowed_countries(allowed_countries: str | None) -> tuple[str, ...]:
    """Split a comma separated list of ISO 3166-1 alpha-2 country codes.

    Codes are trimmed and upper-cased, blanks and repeats are dropped.

    :raises ConfigError: If an entry is not a two letter code.
    """
    if not allowed_countries:
        return ()
    countries: list[str] = []
    for raw_code in allowed_countries.split(","):
        code = raw_code.strip().upper()
        if not code or code in countries:
            continue
        if not COUNTRY_CODE_PATTERN.match(code):
            msg = f"Invalid country code in allowed countries: {raw_code!r}"
            raise ConfigError(msg)
        countries.append(code)
    return tuple(countries)


def build_cache_policy(ttl: Any) -> CachePolicy:
    ttl = parse_ttl(ttl)
    return CachePolicy(min_ttl=0, default_ttl=ttl, max_ttl=ttl)


def build_geo_restriction(allowed_countries: str | None) -> GeoRestriction:
    countries = parse_allowed_countries(allowed_countries)
    if countries:
        return GeoRestriction(mode=GeoRestrictionMode.whitelist, countries=countries)
    return GeoRestriction()


def build_edge_policy(
    ttl: Any,
    allowed_countries: str | None = None,
    content_security_policy: str | None = None,
) -> EdgePolicy:
    """Derive the edge policy of a distribution from its stack configuration.

    :param ttl: Default and maximum cache lifetime in seconds. The minimum is always 0.
    :param allowed_countries: Comma separated country codes. When empty the content is
        served everywhere, otherwise only to the listed countries.
    :param content_security_policy: Value for the Content-Security-Policy header.

    :raises ConfigError: If the ttl or a country code is invalid.
    """
    security_headers = SecurityHeaderSet()
    if content_security_policy:
        security_headers = SecurityHeaderSet(
            content_security_policy=content_security_policy
        )
    return EdgePolicy(
        cache_policy=build_cache_policy(ttl),
        geo_restriction=build_geo_restriction(allowed_countries),
        security_headers=security_headers,
    )


def check_error_page_template(template: str) -> str:
    """Ensure an error page template has a place for the status code.

    :raises ConfigError: If the template has no `{status_code}` field.
    """
    if "{status_code}" not in template:
        msg = "error_page_template must contain a {status_code} placeholder"
        raise ConfigError(msg)
    return template


def error_pages(
    template: str = DEFAULT_ERROR_PAGE_TEMPLATE,
) -> dict[int, str]:
    """Map each custom error status code to the page served for it."""
    return {
        status_code: template.format(status_code=status_code)
        for status_code in ERROR_PAGE_STATUS_CODES
    }


def cache_behavior_args(
    cache_policy: CachePolicy,
    target_origin_id: Input[str],
    response_headers_policy_id: Input[str] | None = None,
    lambda_associations: Sequence[tuple[str, Input[str]]] = (),
) -> cloudfront.DistributionDefaultCacheBehaviorArgs:
    return cloudfront.DistributionDefaultCacheBehaviorArgs(
        target_origin_id=target_origin_id,
        viewer_protocol_policy="redirect-to-https",
        allowed_methods=list(cache_policy.allowed_methods),
        cached_methods=list(cache_policy.cached_methods),
        compress=cache_policy.compress,
        forwarded_values=cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
            cookies=cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                forward="none"
            ),
            query_string=False,
        ),
        min_ttl=cache_policy.min_ttl,
        default_ttl=cache_policy.default_ttl,
        max_ttl=cache_policy.max_ttl,
        response_headers_policy_id=response_headers_policy_id,
        lambda_function_associations=[
            cloudfront.DistributionDefaultCacheBehaviorLambdaFunctionAssociationArgs(
                event_type=event_type,
                lambda_arn=lambda_arn,
            )
            for event_type, lambda_arn in lambda_associations
        ]
        or None,
    )


def geo_restriction_args(
    geo_restriction: GeoRestriction,
) -> cloudfront.DistributionRestrictionsArgs:
    return cloudfront.DistributionRestrictionsArgs(
        geo_restriction=cloudfront.DistributionRestrictionsGeoRestrictionArgs(
            restriction_type=geo_restriction.mode.value,
            locations=list(geo_restriction.countries) or None,
        )
    )


def custom_error_response_args(
    pages: dict[int, str],
) -> list[cloudfront.DistributionCustomErrorResponseArgs]:
    return [
        cloudfront.DistributionCustomErrorResponseArgs(
            error_code=status_code,
            response_code=status_code,
            response_page_path=page_path,
        )
        for status_code, page_path in sorted(pages.items())
    ]


def security_headers_config_args(
    security_headers: SecurityHeaderSet,
) -> cloudfront.ResponseHeadersPolicySecurityHeadersConfigArgs:
    # Frame options and HSTS are structured settings in CloudFront, so the configured
    # values are the ones baked into SecurityHeaderSet's defaults.
    return cloudfront.ResponseHeadersPolicySecurityHeadersConfigArgs(
        content_security_policy=cloudfront.ResponseHeadersPolicySecurityHeadersConfigContentSecurityPolicyArgs(
            content_security_policy=security_headers.content_security_policy,
            override=True,
        ),
        content_type_options=cloudfront.ResponseHeadersPolicySecurityHeadersConfigContentTypeOptionsArgs(
            override=True,
        ),
        frame_options=cloudfront.ResponseHeadersPolicySecurityHeadersConfigFrameOptionsArgs(
            frame_option=security_headers.frame_options,
            override=True,
        ),
        strict_transport_security=cloudfront.ResponseHeadersPolicySecurityHeadersConfigStrictTransportSecurityArgs(
            access_control_max_age_sec=HSTS_MAX_AGE,
            include_subdomains=True,
            override=True,
        ),
        xss_protection=cloudfront.ResponseHeadersPolicySecurityHeadersConfigXssProtectionArgs(
            protection=True,
            mode_block=True,
            override=True,
        ),
    )


def custom_headers_config_args(
    security_headers: SecurityHeaderSet,
) -> cloudfront.ResponseHeadersPolicyCustomHeadersConfigArgs:
    return cloudfront.ResponseHeadersPolicyCustomHeadersConfigArgs(
        items=[
            cloudfront.ResponseHeadersPolicyCustomHeadersConfigItemArgs(
                header="Cache-Control",
                value=security_headers.cache_control,
                override=True,
            )
        ]
    )
