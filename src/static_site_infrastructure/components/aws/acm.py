from functools import partial

from pulumi import ComponentResource, Output, ResourceOptions
from pulumi_aws import acm
from pydantic import BaseModel, ConfigDict

from static_site_infrastructure.lib.aws.route53_helper import (
    acm_certificate_validation_records,
)


class ACMCertificateConfig(BaseModel):
    certificate_domain: str
    alternative_names: list[str] | None = None
    certificate_zone_id: Output[str] | str
    certificate_tags: dict[str, str]

    model_config = ConfigDict(arbitrary_types_allowed=True)


class ACMCertificate(ComponentResource):
    """Issue a DNS validated certificate for the alias domain of a distribution.

    CloudFront only accepts certificates from us-east-1, so callers outside that
    region should pass a provider for it through `opts`.
    """

    def __init__(
        self,
        name: str,
        cert_config: ACMCertificateConfig,
        opts: ResourceOptions | None = None,
    ):
        super().__init__(
            "static_site:infrastructure:aws:acm:ACMCertificate",
            name,
            None,
            opts,
        )

        cert_opts = ResourceOptions(parent=self).merge(opts)

        acm_cert = acm.Certificate(
            f"{name}-acm-certificate",
            domain_name=cert_config.certificate_domain,
            subject_alternative_names=cert_config.alternative_names,
            validation_method="DNS",
            tags=cert_config.certificate_tags,
            opts=cert_opts,
        )

        self.domain_name = acm_cert.domain_name

        acm_cert_validation_records = acm_cert.domain_validation_options.apply(
            partial(
                acm_certificate_validation_records,
                cert_name=name,
                zone_id=cert_config.certificate_zone_id,
                opts=cert_opts,
            )
        )

        acm_validated_cert = acm.CertificateValidation(
            f"wait-for-{name}-acm-cert-validation",
            certificate_arn=acm_cert.arn,
            validation_record_fqdns=acm_cert_validation_records.apply(
                lambda validation_records: [
                    validation_record.fqdn for validation_record in validation_records
                ]
            ),
            opts=cert_opts,
        )

        self.certificate = acm_cert
        self.validated_certificate = acm_validated_cert
        # Distributions must wait for validation before attaching the certificate
        self.arn = acm_validated_cert.certificate_arn

        self.register_outputs({"arn": self.arn})
