"""Publish a directory of static content behind a CloudFront distribution.

The content tree is uploaded to S3, served through CloudFront with the configured
cache, geo-restriction and security header policy, and aliased in Route 53 under the
target domain.
"""

import pulumi_aws
from pulumi import Config, ResourceOptions, export

from static_site_infrastructure.components.aws.acm import (
    ACMCertificate,
    ACMCertificateConfig,
)
from static_site_infrastructure.components.aws.s3_cloudfront_site import (
    CLOUDFRONT_REGION,
    S3CloudfrontSite,
    S3CloudfrontSiteConfig,
)
from static_site_infrastructure.lib.aws.acm_helper import (
    resolve_certificate_arn,
    stack_reference_certificate_lookup,
)
from static_site_infrastructure.lib.aws.route53_helper import (
    create_alias_record,
    find_hosted_zone_id,
)
from static_site_infrastructure.lib.content_scanner import scan_directory
from static_site_infrastructure.lib.object_sync import plan_object_sync
from static_site_infrastructure.lib.pulumi_helper import parse_stack
from static_site_infrastructure.lib.site_config import load_site_config
from static_site_infrastructure.lib.site_types import CertificateSource

stack_info = parse_stack()
aws_config = Config("aws")
region = aws_config.get("region") or CLOUDFRONT_REGION
site_config = load_site_config()
target_domain = site_config.target_domain
base_tags = {"Environment": stack_info.env_suffix, "Application": site_config.cdn_name}

# Fail on a missing hosted zone before anything is created in S3 or CloudFront
zone_id = find_hosted_zone_id(target_domain)


def issue_certificate(domain: str):
    certificate_opts = None
    if region != CLOUDFRONT_REGION:
        # CloudFront only accepts certificates issued in us-east-1
        certificate_opts = ResourceOptions(
            provider=pulumi_aws.Provider(
                f"{site_config.cdn_name}-certificate-provider", region=CLOUDFRONT_REGION
            )
        )
    certificate = ACMCertificate(
        f"{site_config.cdn_name}-tls",
        cert_config=ACMCertificateConfig(
            certificate_domain=domain,
            certificate_zone_id=zone_id,
            certificate_tags={
                **base_tags,
                "Name": f"{site_config.cdn_name}-certificate",
            },
        ),
        opts=certificate_opts,
    )
    return certificate.arn


certificate_lookup = None
if site_config.certificate_source is CertificateSource.stack_reference:
    certificate_lookup = stack_reference_certificate_lookup(
        site_config.certificate_stack
    )
certificate_arn = resolve_certificate_arn(
    site_config.certificate_source,
    target_domain,
    certificate_arn=site_config.certificate_arn,
    certificate_lookup=certificate_lookup,
    issue_certificate=issue_certificate,
)

content_path = site_config.resolved_content_path()
site_content = plan_object_sync(
    scan_directory(content_path), site_config.origin_mode.access_policy
)

site = S3CloudfrontSite(
    S3CloudfrontSiteConfig(
        site_name=site_config.cdn_name,
        bucket_name=site_config.content_bucket_name,
        target_domain=target_domain,
        certificate_arn=certificate_arn,
        edge_policy=site_config.edge_policy(),
        origin_mode=site_config.origin_mode,
        edge_header_strategy=site_config.edge_header_strategy,
        error_page_template=site_config.error_page_template,
        cloudfront_price_class=site_config.price_class,
        general_tag_name=site_config.general_tag_name,
        region=region,
        tags=base_tags,
    ),
    content=site_content,
)

alias_record = create_alias_record(
    target_domain,
    target_endpoint=site.domain_name,
    target_zone_id=site.hosted_zone_id,
    zone_id=zone_id,
    opts=ResourceOptions(depends_on=[site]),
)

export("bucket_name", site.site_bucket.id)
export("cloudfront_domain", site.domain_name)
export("target_domain_endpoint", f"https://{target_domain}")
