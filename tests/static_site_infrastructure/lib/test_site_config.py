from pathlib import Path

import pytest
from static_site_infrastructure.lib.aws.cloudfront_helper import (
    CloudfrontPriceClass,
    GeoRestrictionMode,
)
from static_site_infrastructure.lib.errors import ConfigError
from static_site_infrastructure.lib.site_config import load_site_config
from static_site_infrastructure.lib.site_types import (
    CertificateSource,
    EdgeHeaderStrategy,
    OriginMode,
)

BASE_CONFIG = {
    "cdn_name": "docs-site",
    "ttl": "3600",
    "target_domain": "docs.example.com",
    "general_tag_name": "docs-site",
    "certificate_arn": "arn:aws:acm:us-east-1:123456789012:certificate/docs",
}


class StackConfig:
    """Stand-in for pulumi.Config backed by a dictionary of raw string values."""

    def __init__(self, values: dict[str, str]):
        self.values = values

    def get(self, key: str) -> str | None:
        return self.values.get(key)


def test_minimal_configuration_uses_defaults():
    site_config = load_site_config(StackConfig(BASE_CONFIG))
    assert site_config.ttl == 3600  # noqa: PLR2004
    assert site_config.content_bucket_name == "docs-site-bucket"
    assert site_config.certificate_source is CertificateSource.direct
    assert site_config.origin_mode is OriginMode.website_endpoint
    assert site_config.edge_header_strategy is EdgeHeaderStrategy.none
    assert site_config.price_class is CloudfrontPriceClass.us_eu
    assert site_config.content_path == Path("data")


def test_edge_policy_from_configuration():
    site_config = load_site_config(
        StackConfig({**BASE_CONFIG, "allowed_countries": "PE,CO"})
    )
    edge_policy = site_config.edge_policy()
    assert edge_policy.cache_policy.default_ttl == 3600  # noqa: PLR2004
    assert edge_policy.geo_restriction.mode is GeoRestrictionMode.whitelist


def test_variant_enums_are_parsed():
    site_config = load_site_config(
        StackConfig(
            {
                **BASE_CONFIG,
                "origin_mode": "private_bucket",
                "edge_header_strategy": "lambda_edge",
                "certificate_source": "stack_reference",
                "certificate_stack": "certificates.Production",
                "bucket_name": "docs-content",
                "target_domain": "docs.example.com.",
            }
        )
    )
    assert site_config.origin_mode is OriginMode.private_bucket
    assert site_config.edge_header_strategy is EdgeHeaderStrategy.lambda_edge
    assert site_config.certificate_stack == "certificates.Production"
    assert site_config.content_bucket_name == "docs-content"
    assert site_config.target_domain == "docs.example.com"


@pytest.mark.parametrize("missing_key", ["cdn_name", "ttl", "target_domain"])
def test_missing_required_value_raises_config_error(missing_key):
    values = {key: value for key, value in BASE_CONFIG.items() if key != missing_key}
    with pytest.raises(ConfigError, match=missing_key):
        load_site_config(StackConfig(values))


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("ttl", "one hour"),
        ("ttl", "0"),
        ("origin_mode", "ftp"),
        ("allowed_countries", "Peru"),
        ("error_page_template", "/errors.html"),
    ],
)
def test_invalid_value_raises_config_error(key, value):
    with pytest.raises(ConfigError):
        load_site_config(StackConfig({**BASE_CONFIG, key: value}))


def test_certificate_source_requirements():
    without_arn = {k: v for k, v in BASE_CONFIG.items() if k != "certificate_arn"}
    with pytest.raises(ConfigError, match="certificate_arn"):
        load_site_config(StackConfig(without_arn))
    with pytest.raises(ConfigError, match="certificate_stack"):
        load_site_config(
            StackConfig({**without_arn, "certificate_source": "stack_reference"})
        )
    issued = load_site_config(
        StackConfig({**without_arn, "certificate_source": "issued"})
    )
    assert issued.certificate_arn is None


def test_relative_content_path_is_resolved(tmp_path):
    site_config = load_site_config(StackConfig(BASE_CONFIG))
    assert site_config.resolved_content_path(tmp_path) == tmp_path / "data"
    absolute = load_site_config(
        StackConfig({**BASE_CONFIG, "content_path": str(tmp_path / "public")})
    )
    assert absolute.resolved_content_path() == tmp_path / "public"
