"""Stack configuration for a static site deployment."""

from pathlib import Path

import pulumi
from pulumi import Config
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from static_site_infrastructure.lib.aws.cloudfront_helper import (
    DEFAULT_ERROR_PAGE_TEMPLATE,
    CloudfrontPriceClass,
    EdgePolicy,
    build_edge_policy,
    check_error_page_template,
    parse_allowed_countries,
    parse_ttl,
)
from static_site_infrastructure.lib.errors import ConfigError
from static_site_infrastructure.lib.site_types import (
    CertificateSource,
    EdgeHeaderStrategy,
    OriginMode,
)

CONFIG_NAMESPACE = "static_site"
DEFAULT_CONTENT_PATH = "data"

CONFIG_KEYS = (
    "cdn_name",
    "bucket_name",
    "ttl",
    "target_domain",
    "general_tag_name",
    "certificate_arn",
    "certificate_stack",
    "certificate_source",
    "origin_mode",
    "edge_header_strategy",
    "allowed_countries",
    "content_security_policy",
    "content_path",
    "error_page_template",
    "price_class",
)


class StaticSiteConfig(BaseModel):
    """Validated values of the `static_site` configuration namespace."""

    cdn_name: str
    ttl: int
    target_domain: str
    general_tag_name: str
    bucket_name: str | None = None
    certificate_source: CertificateSource = CertificateSource.direct
    certificate_arn: str | None = None
    certificate_stack: str | None = None
    origin_mode: OriginMode = OriginMode.website_endpoint
    edge_header_strategy: EdgeHeaderStrategy = EdgeHeaderStrategy.none
    allowed_countries: str | None = None
    content_security_policy: str | None = None
    content_path: Path = Path(DEFAULT_CONTENT_PATH)
    error_page_template: str = DEFAULT_ERROR_PAGE_TEMPLATE
    price_class: CloudfrontPriceClass = CloudfrontPriceClass.us_eu

    @field_validator("ttl", mode="before")
    @classmethod
    def check_ttl(cls, ttl):
        try:
            return parse_ttl(ttl)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("allowed_countries")
    @classmethod
    def check_allowed_countries(cls, allowed_countries: str | None) -> str | None:
        try:
            parse_allowed_countries(allowed_countries)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc
        return allowed_countries

    @field_validator("target_domain")
    @classmethod
    def strip_trailing_dot(cls, domain: str) -> str:
        return domain.rstrip(".")

    @field_validator("error_page_template")
    @classmethod
    def validate_error_page_template(cls, template: str) -> str:
        try:
            return check_error_page_template(template)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc

    @model_validator(mode="after")
    def check_certificate_source(self) -> "StaticSiteConfig":
        source = self.certificate_source
        if source is CertificateSource.direct and not self.certificate_arn:
            msg = "certificate_arn is required when certificate_source is direct"
            raise ValueError(msg)
        if source is CertificateSource.stack_reference and not self.certificate_stack:
            msg = (
                "certificate_stack is required when certificate_source is "
                "stack_reference"
            )
            raise ValueError(msg)
        return self

    @property
    def content_bucket_name(self) -> str:
        return self.bucket_name or f"{self.cdn_name}-bucket"

    def edge_policy(self) -> EdgePolicy:
        return build_edge_policy(
            self.ttl,
            allowed_countries=self.allowed_countries,
            content_security_policy=self.content_security_policy,
        )

    def resolved_content_path(self, working_dir: Path | None = None) -> Path:
        if self.content_path.is_absolute():
            return self.content_path
        return (working_dir or Path.cwd()).joinpath(self.content_path)


def load_site_config(config: Config | None = None) -> StaticSiteConfig:
    """Read and validate the stack's `static_site` configuration.

    :raises ConfigError: If a required value is missing or a value is invalid.
    """
    config = config or Config(CONFIG_NAMESPACE)
    raw_values = {key: config.get(key) for key in CONFIG_KEYS}
    try:
        site_config = StaticSiteConfig(
            **{key: value for key, value in raw_values.items() if value is not None}
        )
    except ValidationError as exc:
        msg = f"Invalid {CONFIG_NAMESPACE} configuration: {exc}"
        raise ConfigError(msg) from exc
    pulumi.log.debug(
        f"loaded configuration for {site_config.cdn_name} "
        f"({site_config.origin_mode.value}, {site_config.edge_header_strategy.value})"
    )
    return site_config
