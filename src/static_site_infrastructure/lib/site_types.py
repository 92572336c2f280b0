from enum import Enum, unique
from functools import lru_cache

import boto3
from pydantic import BaseModel, field_validator

REQUIRED_TAGS = {"Environment"}
SHARED_TAG_VALUE = "shared"


@lru_cache
def aws_regions() -> frozenset[str]:
    """List the regions that S3 is offered in, without calling the AWS API."""
    return frozenset(boto3.session.Session().get_available_regions("s3"))


@unique
class AccessPolicy(str, Enum):
    """Canned ACLs applied to uploaded site content."""

    public_read = "public-read"
    private = "private"


@unique
class OriginMode(str, Enum):
    """How CloudFront reaches the content bucket.

    `website_endpoint` fetches over plain HTTP from the S3 static website endpoint
    and requires publicly readable objects. `private_bucket` signs origin requests
    with an origin access control and keeps every object private.
    """

    website_endpoint = "website_endpoint"
    private_bucket = "private_bucket"

    @property
    def access_policy(self) -> AccessPolicy:
        if self is OriginMode.website_endpoint:
            return AccessPolicy.public_read
        return AccessPolicy.private


@unique
class EdgeHeaderStrategy(str, Enum):
    """Where the security response headers are injected."""

    none = "none"
    response_headers_policy = "response_headers_policy"
    lambda_edge = "lambda_edge"


@unique
class CertificateSource(str, Enum):
    """Where the ACM certificate ARN for the alias domain comes from."""

    direct = "direct"
    stack_reference = "stack_reference"
    issued = "issued"


class AWSBase(BaseModel):
    """Base class for configuration objects to pass to AWS component resources."""

    tags: dict[str, str]
    region: str = "us-east-1"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.tags.update({"pulumi_managed": "true"})

    @field_validator("tags")
    @classmethod
    def enforce_tags(cls, tags: dict[str, str]) -> dict[str, str]:
        if not REQUIRED_TAGS.issubset(tags.keys()):
            msg = f"Not all required tags have been specified. Missing tags: {REQUIRED_TAGS.difference(tags.keys())}"  # noqa: E501
            raise ValueError(msg)
        return tags

    @field_validator("region")
    @classmethod
    def check_region(cls, region: str) -> str:
        if region not in aws_regions():
            msg = "The specified region does not exist"
            raise ValueError(msg)
        return region

    def merged_tags(self, *new_tags: dict[str, str]) -> dict[str, str]:
        """Return a dictionary of existing tags with the ones passed in.

        This generates a new dictionary of tags in order to allow for a broadly
        applicable set of tags to then be updated with specific tags to be set on child
        resources in a ComponentResource class.

        :param *new_tags: One or more dictionaries of specific tags to be set on
                            a child resource.
        :type new_tags: dict[str, str]

        :returns: Merged dictionary of base tags and specific tags to be set on a child
                  resource.

        :rtype: dict[str, str]
        """
        tag_dict = self.tags.copy()
        for tags in new_tags:
            tag_dict.update(tags)
        return tag_dict
