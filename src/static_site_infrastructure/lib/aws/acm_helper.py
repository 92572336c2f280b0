"""Resolve the ACM certificate that a distribution presents for its alias domain."""

from collections.abc import Callable
from typing import Any

from pulumi import Input, Output, StackReference

from static_site_infrastructure.lib.errors import ConfigError, NotFoundError
from static_site_infrastructure.lib.site_types import CertificateSource

CertificateLookup = Callable[[str], Input[str]]
CERTIFICATES_OUTPUT = "certificates"


def certificate_arn_for_domain(certificates: dict[str, Any], domain: str) -> str:
    """Find the certificate ARN exported for a domain.

    Entries may be a bare ARN or a mapping with an `arn` key. An exact domain match
    wins over a wildcard certificate for the parent domain.

    :raises NotFoundError: If no certificate covers the domain.
    """
    candidates = [domain]
    if "." in domain:
        candidates.append(f"*.{domain.split('.', 1)[1]}")
    for candidate in candidates:
        if candidate in certificates:
            certificate = certificates[candidate]
            return certificate["arn"] if isinstance(certificate, dict) else certificate
    msg = f"No certificate exported for {domain}"
    raise NotFoundError(msg)


def stack_reference_certificate_lookup(stack_name: str) -> CertificateLookup:
    """Build a lookup that reads certificate ARNs exported by another stack.

    The referenced stack must export a `certificates` map keyed by domain name.
    """
    certificate_stack = StackReference(stack_name)

    def lookup(domain: str) -> Output[str]:
        return certificate_stack.require_output(CERTIFICATES_OUTPUT).apply(
            lambda certificates: certificate_arn_for_domain(certificates, domain)
        )

    return lookup


def resolve_certificate_arn(
    source: CertificateSource,
    domain: str,
    certificate_arn: Input[str] | None = None,
    certificate_lookup: CertificateLookup | None = None,
    issue_certificate: Callable[[str], Input[str]] | None = None,
) -> Input[str]:
    """Return the ARN of the certificate to attach to a distribution.

    :param source: Which of the remaining arguments supplies the certificate.
    :param domain: The alias domain the certificate must be valid for.
    :param certificate_arn: Used verbatim when the source is `direct`.
    :param certificate_lookup: Called with the domain when the source is
        `stack_reference`.
    :param issue_certificate: Called with the domain when the source is `issued`.

    :raises ConfigError: If the argument required by the source is missing.
    """
    source = CertificateSource(source)
    if source is CertificateSource.direct:
        if not certificate_arn:
            msg = "certificate_arn is required when the certificate source is direct"
            raise ConfigError(msg)
        return certificate_arn
    if source is CertificateSource.stack_reference:
        if certificate_lookup is None:
            msg = "A certificate lookup is required for stack_reference certificates"
            raise ConfigError(msg)
        return certificate_lookup(domain)
    if issue_certificate is None:
        msg = "A certificate issuer is required for issued certificates"
        raise ConfigError(msg)
    return issue_certificate(domain)
