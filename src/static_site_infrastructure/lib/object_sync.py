"""Plan the desired state of the S3 objects that back a static site."""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from static_site_infrastructure.lib.content_scanner import (
    ContentFile,
    ContentTypeResolver,
)
from static_site_infrastructure.lib.errors import ConfigError
from static_site_infrastructure.lib.site_types import AccessPolicy


@dataclass(frozen=True)
class ObjectDescriptor:
    key: str
    body_ref: Path
    content_type: str | None
    access_policy: AccessPolicy


def plan_object_sync(
    files: Iterable[ContentFile],
    access_policy: AccessPolicy,
    content_type_resolver: ContentTypeResolver | None = None,
) -> list[ObjectDescriptor]:
    """Map scanned files one-to-one onto the objects that should exist in the bucket.

    :param files: The scanned content, typically from `scan_directory`.
    :param access_policy: Canned ACL applied to every object.
    :param content_type_resolver: Overrides the content type detected by the scanner.
        A resolver returning None leaves the content type unset.

    :raises ConfigError: If two files map onto the same object key.

    :returns: One descriptor per input file, in input order.
    """
    descriptors: list[ObjectDescriptor] = []
    seen_keys: set[str] = set()
    for content_file in files:
        if content_file.relative_key in seen_keys:
            msg = f"Duplicate object key in sync plan: {content_file.relative_key}"
            raise ConfigError(msg)
        seen_keys.add(content_file.relative_key)
        if content_type_resolver is None:
            content_type = content_file.content_type
        else:
            content_type = content_type_resolver(str(content_file.absolute_path))
        descriptors.append(
            ObjectDescriptor(
                key=content_file.relative_key,
                body_ref=content_file.absolute_path,
                content_type=content_type,
                access_policy=AccessPolicy(access_policy),
            )
        )
    return descriptors
