from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import boto3
import pulumi
from botocore.exceptions import BotoCoreError, ClientError
from pulumi import Input
from pulumi_aws import route53
from pulumi_aws.acm.outputs import CertificateDomainValidationOption

from static_site_infrastructure.lib.errors import NotFoundError, ProviderError

FIVE_MINUTES = 60 * 5


@lru_cache
def route53_client() -> Any:
    return boto3.client("route53")


@dataclass(frozen=True)
class AliasRecord:
    domain_name: str
    zone_id: Input[str]
    target_endpoint: Input[str]
    target_zone_id: Input[str]


def fully_qualified(domain: str) -> str:
    return domain if domain.endswith(".") else f"{domain}."


def _zones_named(client: Any, zone_name: str) -> Iterator[dict[str, Any]]:
    # Zones are listed in name order, starting at the requested name
    request = {"DNSName": zone_name}
    while True:
        try:
            zone_list = client.list_hosted_zones_by_name(**request)
        except (BotoCoreError, ClientError) as exc:
            raise ProviderError("route53:ListHostedZonesByName", exc) from exc
        for zone in zone_list["HostedZones"]:
            if zone["Name"].lower() != zone_name:
                return
            yield zone
        if not zone_list.get("IsTruncated"):
            return
        request = {
            "DNSName": zone_list["NextDNSName"],
            "HostedZoneId": zone_list["NextHostedZoneId"],
        }


def find_hosted_zone_id(domain: str, client: Any | None = None) -> str:
    """Look up the public hosted zone whose name is exactly the given domain.

    Private zones with the same name are skipped, records in them are not visible to
    public resolvers. Names are compared case-insensitively.

    :param domain: The domain to be looked up, e.g. docs.example.com
    :type domain: str

    :param client: A boto3 Route 53 client. Defaults to a shared client.

    :raises NotFoundError: If no public hosted zone is named `<domain>.`
    :raises ProviderError: If Route 53 rejects the request.

    :returns: The zone ID without its `/hostedzone/` prefix.

    :rtype: str
    """
    client = client or route53_client()
    zone_name = fully_qualified(domain).lower()
    for zone in _zones_named(client, zone_name):
        if zone.get("Config", {}).get("PrivateZone", False):
            continue
        # 'Id' attribute is of the form /hostedzone/<ZONE_ID>
        return zone["Id"].split("/")[-1]
    msg = f"No public hosted zone found for {zone_name}"
    raise NotFoundError(msg)


def alias_record_args(record: AliasRecord) -> route53.RecordArgs:
    return route53.RecordArgs(
        name=fully_qualified(record.domain_name),
        zone_id=record.zone_id,
        type="A",
        aliases=[
            route53.RecordAliasArgs(
                name=record.target_endpoint,
                zone_id=record.target_zone_id,
                evaluate_target_health=True,
            )
        ],
        allow_overwrite=True,
    )


def create_alias_record(
    domain: str,
    target_endpoint: Input[str],
    target_zone_id: Input[str],
    zone_id: Input[str] | None = None,
    client: Any | None = None,
    opts: pulumi.ResourceOptions | None = None,
) -> route53.Record:
    """Point an A alias record for `domain` at a CloudFront distribution.

    An existing record of the same name is overwritten in a single change batch.

    :param domain: The domain being aliased, e.g. docs.example.com
    :param target_endpoint: The distribution's assigned domain name.
    :param target_zone_id: The hosted zone ID that CloudFront routes the endpoint in.
    :param zone_id: The hosted zone to create the record in. Looked up from the
        domain when omitted.
    :param client: A boto3 Route 53 client used for the zone lookup.

    :raises NotFoundError: If the zone is looked up and does not exist.
    """
    record = AliasRecord(
        domain_name=domain,
        zone_id=zone_id or find_hosted_zone_id(domain, client=client),
        target_endpoint=target_endpoint,
        target_zone_id=target_zone_id,
    )
    pulumi.log.debug(f"creating alias record for {record.domain_name}")
    return route53.Record(
        f"{domain}-alias-record",
        args=alias_record_args(record),
        opts=opts,
    )


def acm_certificate_validation_records(
    validation_options: list[CertificateDomainValidationOption],
    cert_name: str,
    zone_id: Input[str],
    opts: pulumi.ResourceOptions | None = None,
) -> list[route53.Record]:
    records_array = []
    for index, validation in enumerate(validation_options):
        records_array.append(
            route53.Record(
                f"{cert_name}-acm-cert-validation-route53-record-{index}",
                name=validation.resource_record_name,
                zone_id=zone_id,
                type=validation.resource_record_type,
                records=[validation.resource_record_value],
                ttl=FIVE_MINUTES,
                allow_overwrite=True,
                opts=opts,
            )
        )
    return records_array
