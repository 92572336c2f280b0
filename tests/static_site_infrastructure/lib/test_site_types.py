import pytest
from pydantic import ValidationError
from static_site_infrastructure.lib.site_types import (
    AccessPolicy,
    AWSBase,
    OriginMode,
)

VALID_TAGS = {"Environment": "test"}


def test_tag_validation():
    with pytest.raises(ValidationError):
        AWSBase(tags={"foo": "bar"})


def test_region_validation():
    with pytest.raises(ValueError):  # noqa: PT011
        AWSBase(tags=VALID_TAGS, region="us-east-0")


def test_merged_tags():
    base_config = AWSBase(tags=VALID_TAGS)
    new_tags = base_config.merged_tags({"Foo": "bar"}, {"Name": "docs"})
    assert new_tags == {
        "Environment": "test",
        "Foo": "bar",
        "Name": "docs",
        "pulumi_managed": "true",
    }


def test_pulumi_managed_tag():
    base_config = AWSBase(tags=VALID_TAGS.copy())
    assert base_config.tags.pop("pulumi_managed") == "true"


def test_origin_mode_access_policy():
    assert OriginMode.website_endpoint.access_policy is AccessPolicy.public_read
    assert OriginMode.private_bucket.access_policy is AccessPolicy.private
