"""Module for creating and managing static websites hosted in S3 and delivered through Cloudfront."""  # noqa: E501

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pulumi
import pulumi_aws
from pulumi import (
    AssetArchive,
    ComponentResource,
    FileAsset,
    Input,
    Output,
    ResourceOptions,
)
from pulumi_aws import cloudfront, iam, lambda_, s3
from pydantic import ConfigDict, field_validator

from static_site_infrastructure.components.aws.s3_content_sync import S3ContentSync
from static_site_infrastructure.edge import header_rewrite
from static_site_infrastructure.lib.aws.cloudfront_helper import (
    DEFAULT_ERROR_PAGE_TEMPLATE,
    CachePolicy,
    CloudfrontPriceClass,
    EdgePolicy,
    GeoRestriction,
    cache_behavior_args,
    check_error_page_template,
    custom_error_response_args,
    custom_headers_config_args,
    error_pages,
    geo_restriction_args,
    security_headers_config_args,
)
from static_site_infrastructure.lib.aws.iam_helper import (
    LAMBDA_BASIC_EXECUTION_POLICY_ARN,
    cloudfront_read_policy_template,
    lambda_edge_trust_policy,
    public_read_policy_template,
)
from static_site_infrastructure.lib.errors import ConfigError
from static_site_infrastructure.lib.object_sync import ObjectDescriptor
from static_site_infrastructure.lib.site_types import (
    SHARED_TAG_VALUE,
    AWSBase,
    EdgeHeaderStrategy,
    OriginMode,
)

CLOUDFRONT_REGION = "us-east-1"
ORIGIN_RESPONSE_EVENT = "origin-response"
LAMBDA_EDGE_RUNTIME = "python3.12"


@dataclass(frozen=True)
class OriginBinding:
    mode: OriginMode
    origin_id: Input[str]
    domain_name: Input[str]
    origin_access_control_id: Input[str] | None = None

    def origin_args(self) -> cloudfront.DistributionOriginArgs:
        if self.mode is OriginMode.website_endpoint:
            # S3 website endpoints only speak plain HTTP
            return cloudfront.DistributionOriginArgs(
                origin_id=self.origin_id,
                domain_name=self.domain_name,
                custom_origin_config=cloudfront.DistributionOriginCustomOriginConfigArgs(
                    origin_protocol_policy="http-only",
                    http_port=80,
                    https_port=443,
                    origin_ssl_protocols=["TLSv1.2"],
                ),
            )
        return cloudfront.DistributionOriginArgs(
            origin_id=self.origin_id,
            domain_name=self.domain_name,
            origin_access_control_id=self.origin_access_control_id,
        )


@dataclass(frozen=True)
class LoggingSink:
    bucket_domain_name: Input[str]
    prefix: str
    include_cookies: bool = False


@dataclass(frozen=True)
class DistributionDescriptor:
    """Everything CloudFront needs to create the distribution for a site.

    The distribution's own identity, its assigned domain name, only exists once
    CloudFront has created it.
    """

    origin: OriginBinding
    cache_policy: CachePolicy
    error_pages: dict[int, str]
    geo_restriction: GeoRestriction
    certificate_ref: Input[str]
    logging_sink: LoggingSink
    aliases: tuple[str, ...]
    header_policy_ref: Input[str] | None = None
    function_bindings: tuple[tuple[str, Input[str]], ...] = ()
    price_class: CloudfrontPriceClass = CloudfrontPriceClass.us_eu
    default_root_object: str = "index.html"
    comment: str | None = None
    tags: dict[str, str] = field(default_factory=dict)

    def distribution_args(self) -> cloudfront.DistributionArgs:
        return cloudfront.DistributionArgs(
            enabled=True,
            is_ipv6_enabled=True,
            aliases=list(self.aliases),
            comment=self.comment,
            origins=[self.origin.origin_args()],
            default_root_object=self.default_root_object,
            default_cache_behavior=cache_behavior_args(
                self.cache_policy,
                target_origin_id=self.origin.origin_id,
                response_headers_policy_id=self.header_policy_ref,
                lambda_associations=self.function_bindings,
            ),
            price_class=self.price_class.value,
            custom_error_responses=custom_error_response_args(self.error_pages),
            restrictions=geo_restriction_args(self.geo_restriction),
            viewer_certificate=cloudfront.DistributionViewerCertificateArgs(
                acm_certificate_arn=self.certificate_ref,
                ssl_support_method="sni-only",
                minimum_protocol_version="TLSv1.2_2021",
            ),
            logging_config=cloudfront.DistributionLoggingConfigArgs(
                bucket=self.logging_sink.bucket_domain_name,
                include_cookies=self.logging_sink.include_cookies,
                prefix=self.logging_sink.prefix,
            ),
            tags=self.tags,
        )


def compose_distribution(  # noqa: PLR0913
    target_domain: str,
    origin: OriginBinding,
    edge_policy: EdgePolicy,
    certificate_arn: Input[str],
    logging_bucket_domain_name: Input[str],
    error_page_template: str = DEFAULT_ERROR_PAGE_TEMPLATE,
    header_policy_ref: Input[str] | None = None,
    function_bindings: Sequence[tuple[str, Input[str]]] = (),
    price_class: CloudfrontPriceClass = CloudfrontPriceClass.us_eu,
    default_root_object: str = "index.html",
    tags: dict[str, str] | None = None,
) -> DistributionDescriptor:
    """Assemble the distribution descriptor for a site fronting an S3 origin.

    Request logs are written to the logging bucket under `<target_domain>/`.

    :raises ConfigError: If the error page template has no `{status_code}` field.
    """
    check_error_page_template(error_page_template)
    return DistributionDescriptor(
        origin=origin,
        cache_policy=edge_policy.cache_policy,
        error_pages=error_pages(error_page_template),
        geo_restriction=edge_policy.geo_restriction,
        certificate_ref=certificate_arn,
        logging_sink=LoggingSink(
            bucket_domain_name=logging_bucket_domain_name,
            prefix=f"{target_domain}/",
        ),
        aliases=(target_domain,),
        header_policy_ref=header_policy_ref,
        function_bindings=tuple(function_bindings),
        price_class=price_class,
        default_root_object=default_root_object,
        comment=f"Cloudfront distribution for {target_domain}",
        tags=tags or {},
    )


class S3CloudfrontSiteConfig(AWSBase):
    """Configuration object for customizing a static site hosted with S3 and Cloudfront."""  # noqa: E501

    model_config = ConfigDict(arbitrary_types_allowed=True)

    site_name: str
    target_domain: str
    certificate_arn: Output[str] | str
    edge_policy: EdgePolicy
    bucket_name: str | None = None
    origin_mode: OriginMode = OriginMode.website_endpoint
    edge_header_strategy: EdgeHeaderStrategy = EdgeHeaderStrategy.none
    error_page_template: str = DEFAULT_ERROR_PAGE_TEMPLATE
    site_index: str = "index.html"
    error_document: str = "404.html"
    cloudfront_price_class: CloudfrontPriceClass = CloudfrontPriceClass.us_eu
    general_tag_name: str | None = None

    @field_validator("error_page_template")
    @classmethod
    def validate_error_page_template(cls, template: str) -> str:
        try:
            return check_error_page_template(template)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc

    @property
    def content_bucket_name(self) -> str:
        return self.bucket_name or f"{self.site_name}-bucket"

    def resource_tags(self, resource_name: str) -> dict[str, str]:
        shared_tag = (
            {self.general_tag_name: SHARED_TAG_VALUE} if self.general_tag_name else {}
        )
        return self.merged_tags({"Name": resource_name}, shared_tag)


class S3CloudfrontSite(ComponentResource):
    """A Pulumi component for constructing the resources to host a static website
    using S3 and Cloudfront.
    """

    def __init__(
        self,
        site_config: S3CloudfrontSiteConfig,
        content: Sequence[ObjectDescriptor] = (),
        opts: ResourceOptions | None = None,
    ):
        """Create the content and log buckets and the Cloudfront distribution for
            hosting a static site.

        :param site_config: Configuration object for customizing the component
        :type site_config: S3CloudfrontSiteConfig

        :param content: Planned objects to upload into the content bucket. Their
            access policy must match the origin mode.
        :type content: Sequence[ObjectDescriptor]

        :param opts: Pulumi resource options
        :type opts: ResourceOptions

        :raises ConfigError: If the content's access policy does not suit the origin.

        :rtype: S3CloudfrontSite
        """
        expected_policy = site_config.origin_mode.access_policy
        mismatched = [
            obj.key for obj in content if obj.access_policy != expected_policy
        ]
        if mismatched:
            msg = (
                f"{site_config.origin_mode.value} origins serve {expected_policy.value}"
                f" objects, but {len(mismatched)} planned objects differ"
            )
            raise ConfigError(msg)

        super().__init__(
            "static_site:infrastructure:aws:S3CloudfrontSite",
            site_config.site_name,
            None,
            opts,
        )

        generic_resource_opts = ResourceOptions(parent=self).merge(opts)
        site_name = site_config.site_name
        site_bucket_name = site_config.content_bucket_name

        self.site_bucket = s3.Bucket(
            f"{site_name}-bucket",
            bucket=site_bucket_name,
            tags=site_config.resource_tags(f"{site_name}-bucket"),
            opts=generic_resource_opts.merge(
                ResourceOptions(delete_before_replace=True)
            ),
        )

        site_bucket_ownership_controls = s3.BucketOwnershipControls(
            f"{site_bucket_name}-ownership-controls",
            bucket=self.site_bucket.id,
            rule=s3.BucketOwnershipControlsRuleArgs(
                object_ownership="BucketOwnerPreferred",
            ),
            opts=generic_resource_opts,
        )
        is_public = site_config.origin_mode is OriginMode.website_endpoint
        site_bucket_public_access = s3.BucketPublicAccessBlock(
            f"{site_bucket_name}-public-access",
            bucket=self.site_bucket.id,
            block_public_acls=not is_public,
            block_public_policy=not is_public,
            ignore_public_acls=not is_public,
            restrict_public_buckets=not is_public,
            opts=generic_resource_opts,
        )
        bucket_access_ready = [
            site_bucket_public_access,
            site_bucket_ownership_controls,
        ]

        self.logs_bucket = self._logs_bucket(
            site_config, f"{site_bucket_name}-logs", generic_resource_opts
        )

        s3_origin_id = f"{site_name}-s3-origin"
        if is_public:
            self.site_website = s3.BucketWebsiteConfiguration(
                f"{site_bucket_name}-website",
                bucket=self.site_bucket.id,
                index_document=s3.BucketWebsiteConfigurationIndexDocumentArgs(
                    suffix=site_config.site_index,
                ),
                error_document=s3.BucketWebsiteConfigurationErrorDocumentArgs(
                    key=site_config.error_document,
                ),
                opts=generic_resource_opts,
            )
            self.site_bucket_policy = s3.BucketPolicy(
                f"{site_bucket_name}-policy",
                bucket=self.site_bucket.id,
                policy=self.site_bucket.arn.apply(
                    lambda arn: json.dumps(public_read_policy_template(arn))
                ),
                opts=generic_resource_opts.merge(
                    ResourceOptions(depends_on=bucket_access_ready)
                ),
            )
            origin = OriginBinding(
                mode=OriginMode.website_endpoint,
                origin_id=s3_origin_id,
                domain_name=self.site_website.website_endpoint,
            )
        else:
            self.origin_access_control = cloudfront.OriginAccessControl(
                f"{site_name}-origin-access-control",
                name=f"{site_name}-oac",
                description=f"Origin access control for {site_config.target_domain}",
                origin_access_control_origin_type="s3",
                signing_behavior="always",
                signing_protocol="sigv4",
                opts=generic_resource_opts,
            )
            origin = OriginBinding(
                mode=OriginMode.private_bucket,
                origin_id=s3_origin_id,
                domain_name=self.site_bucket.bucket_regional_domain_name,
                origin_access_control_id=self.origin_access_control.id,
            )

        self.content_sync = S3ContentSync(
            f"{site_name}-content",
            bucket=self.site_bucket.id,
            objects=content,
            opts=generic_resource_opts.merge(
                ResourceOptions(depends_on=bucket_access_ready)
            ),
        )

        header_policy_ref = None
        function_bindings: list[tuple[str, Input[str]]] = []
        strategy = site_config.edge_header_strategy
        if strategy is EdgeHeaderStrategy.response_headers_policy:
            self.response_headers_policy = cloudfront.ResponseHeadersPolicy(
                f"{site_name}-response-headers-policy",
                name=f"{site_name}-security-headers",
                comment=f"Security headers for {site_config.target_domain}",
                security_headers_config=security_headers_config_args(
                    site_config.edge_policy.security_headers
                ),
                custom_headers_config=custom_headers_config_args(
                    site_config.edge_policy.security_headers
                ),
                opts=generic_resource_opts,
            )
            header_policy_ref = self.response_headers_policy.id
        elif strategy is EdgeHeaderStrategy.lambda_edge:
            self.header_rewrite_function = self._header_rewrite_function(
                site_config, generic_resource_opts
            )
            function_bindings.append(
                (ORIGIN_RESPONSE_EVENT, self.header_rewrite_function.qualified_arn)
            )
        pulumi.log.debug(
            f"edge header strategy for {site_name}: {strategy.value}", resource=self
        )

        self.distribution_descriptor = compose_distribution(
            target_domain=site_config.target_domain,
            origin=origin,
            edge_policy=site_config.edge_policy,
            certificate_arn=site_config.certificate_arn,
            logging_bucket_domain_name=self.logs_bucket.bucket_domain_name,
            error_page_template=site_config.error_page_template,
            header_policy_ref=header_policy_ref,
            function_bindings=function_bindings,
            price_class=site_config.cloudfront_price_class,
            default_root_object=site_config.site_index,
            tags=site_config.resource_tags(f"{site_name}-cdn"),
        )
        self.cloudfront_distribution = cloudfront.Distribution(
            f"{site_name}-cdn",
            args=self.distribution_descriptor.distribution_args(),
            opts=generic_resource_opts,
        )

        if not is_public:
            self.site_bucket_policy = s3.BucketPolicy(
                f"{site_bucket_name}-policy",
                bucket=self.site_bucket.id,
                policy=Output.all(
                    self.site_bucket.arn, self.cloudfront_distribution.arn
                ).apply(
                    lambda arns: json.dumps(cloudfront_read_policy_template(*arns))
                ),
                opts=generic_resource_opts.merge(
                    ResourceOptions(depends_on=bucket_access_ready)
                ),
            )

        self.domain_name = self.cloudfront_distribution.domain_name
        self.hosted_zone_id = self.cloudfront_distribution.hosted_zone_id

        self.register_outputs(
            {
                "bucket_name": self.site_bucket.bucket,
                "cloudfront_domain": self.domain_name,
                "hosted_zone_id": self.hosted_zone_id,
            }
        )

    def _logs_bucket(
        self,
        site_config: S3CloudfrontSiteConfig,
        logs_bucket_name: str,
        resource_opts: ResourceOptions,
    ) -> s3.Bucket:
        logs_tag_name = f"{site_config.site_name}-request-logs"
        logs_bucket = s3.Bucket(
            logs_tag_name,
            bucket=logs_bucket_name,
            tags=site_config.resource_tags(logs_tag_name),
            opts=resource_opts,
        )
        # Standard CloudFront logging writes through ACLs, so they stay enabled
        logs_ownership_controls = s3.BucketOwnershipControls(
            f"{logs_bucket_name}-ownership-controls",
            bucket=logs_bucket.id,
            rule=s3.BucketOwnershipControlsRuleArgs(
                object_ownership="BucketOwnerPreferred",
            ),
            opts=resource_opts,
        )
        s3.BucketPublicAccessBlock(
            f"{logs_bucket_name}-public-access",
            bucket=logs_bucket.id,
            block_public_acls=True,
            block_public_policy=True,
            ignore_public_acls=True,
            restrict_public_buckets=True,
            opts=resource_opts,
        )
        s3.BucketAcl(
            f"{logs_bucket_name}-acl",
            bucket=logs_bucket.id,
            acl="private",
            opts=resource_opts.merge(
                ResourceOptions(depends_on=[logs_ownership_controls])
            ),
        )
        return logs_bucket

    def _header_rewrite_function(
        self, site_config: S3CloudfrontSiteConfig, resource_opts: ResourceOptions
    ) -> lambda_.Function:
        site_name = site_config.site_name
        function_opts = resource_opts
        if site_config.region != CLOUDFRONT_REGION:
            # Lambda@Edge functions can only be created in us-east-1
            edge_provider = pulumi_aws.Provider(
                f"{site_name}-{CLOUDFRONT_REGION}",
                region=CLOUDFRONT_REGION,
                opts=ResourceOptions(parent=self),
            )
            function_opts = resource_opts.merge(
                ResourceOptions(provider=edge_provider)
            )
        role_name = f"{site_name}-header-rewrite-role"
        role = iam.Role(
            role_name,
            assume_role_policy=json.dumps(lambda_edge_trust_policy()),
            tags=site_config.resource_tags(role_name),
            opts=function_opts,
        )
        iam.RolePolicyAttachment(
            f"{role_name}-basic-execution",
            policy_arn=LAMBDA_BASIC_EXECUTION_POLICY_ARN,
            role=role.name,
            opts=function_opts,
        )
        handler_path = Path(header_rewrite.__file__)
        function_name = f"{site_name}-header-rewrite"
        return lambda_.Function(
            function_name,
            role=role.arn,
            runtime=LAMBDA_EDGE_RUNTIME,
            handler=f"{handler_path.stem}.lambda_handler",
            code=AssetArchive({handler_path.name: FileAsset(str(handler_path))}),
            publish=True,
            memory_size=128,
            timeout=5,
            tags=site_config.resource_tags(function_name),
            opts=function_opts,
        )
