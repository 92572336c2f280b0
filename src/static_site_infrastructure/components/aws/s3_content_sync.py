"""Pulumi component that uploads a planned set of files into an S3 bucket."""

from collections.abc import Sequence

import pulumi
from pulumi import ComponentResource, FileAsset, Input, ResourceOptions
from pulumi_aws import s3

from static_site_infrastructure.lib.object_sync import ObjectDescriptor


class S3ContentSync(ComponentResource):
    """Create one bucket object per entry of an object sync plan.

    Each object's Pulumi resource name is derived from its key, so applying the same
    plan again updates objects in place rather than creating new ones. Uploads have no
    dependencies on each other and are performed in parallel by the Pulumi engine.
    """

    def __init__(
        self,
        name: str,
        bucket: Input[str],
        objects: Sequence[ObjectDescriptor],
        opts: ResourceOptions | None = None,
    ):
        super().__init__(
            "static_site:infrastructure:aws:s3:S3ContentSync", name, None, opts
        )
        object_opts = ResourceOptions(parent=self)

        pulumi.log.info(
            f"Syncing {len(objects)} objects into the content bucket", resource=self
        )
        self.objects: dict[str, s3.BucketObject] = {}
        for descriptor in objects:
            pulumi.log.debug(
                f"planned object {descriptor.key} from {descriptor.body_ref}",
                resource=self,
            )
            self.objects[descriptor.key] = s3.BucketObject(
                f"{name}-{descriptor.key}",
                bucket=bucket,
                key=descriptor.key,
                acl=descriptor.access_policy.value,
                content_type=descriptor.content_type,
                source=FileAsset(str(descriptor.body_ref)),
                opts=object_opts,
            )

        self.register_outputs({"object_count": len(self.objects)})
