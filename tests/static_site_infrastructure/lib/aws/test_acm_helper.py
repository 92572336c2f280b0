from unittest import mock

import pytest
from static_site_infrastructure.lib.aws.acm_helper import (
    certificate_arn_for_domain,
    resolve_certificate_arn,
)
from static_site_infrastructure.lib.errors import ConfigError, NotFoundError
from static_site_infrastructure.lib.site_types import CertificateSource

DOCS_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/docs"
WILDCARD_ARN = "arn:aws:acm:us-east-1:123456789012:certificate/wildcard"


def test_exact_domain_certificate_wins():
    certificates = {"docs.example.com": DOCS_ARN, "*.example.com": WILDCARD_ARN}
    assert certificate_arn_for_domain(certificates, "docs.example.com") == DOCS_ARN


def test_wildcard_certificate_covers_subdomain():
    certificates = {"*.example.com": {"arn": WILDCARD_ARN}}
    assert certificate_arn_for_domain(certificates, "blog.example.com") == WILDCARD_ARN


def test_unknown_domain_raises_not_found():
    with pytest.raises(NotFoundError):
        certificate_arn_for_domain({"*.example.org": WILDCARD_ARN}, "example.com")


def test_direct_certificate_is_used_verbatim():
    lookup = mock.Mock()
    arn = resolve_certificate_arn(
        CertificateSource.direct,
        "docs.example.com",
        certificate_arn=DOCS_ARN,
        certificate_lookup=lookup,
    )
    assert arn == DOCS_ARN
    lookup.assert_not_called()


def test_stack_reference_certificate_uses_injected_lookup():
    lookup = mock.Mock(return_value=DOCS_ARN)
    arn = resolve_certificate_arn(
        "stack_reference", "docs.example.com", certificate_lookup=lookup
    )
    assert arn == DOCS_ARN
    lookup.assert_called_once_with("docs.example.com")


def test_issued_certificate_uses_issuer():
    issuer = mock.Mock(return_value=DOCS_ARN)
    arn = resolve_certificate_arn(
        CertificateSource.issued, "docs.example.com", issue_certificate=issuer
    )
    assert arn == DOCS_ARN
    issuer.assert_called_once_with("docs.example.com")


@pytest.mark.parametrize(
    "source", [CertificateSource.direct, CertificateSource.stack_reference, "issued"]
)
def test_missing_certificate_input_raises_config_error(source):
    with pytest.raises(ConfigError):
        resolve_certificate_arn(source, "docs.example.com")
