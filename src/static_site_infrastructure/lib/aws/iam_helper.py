from typing import Any

IAM_POLICY_VERSION = "2012-10-17"
CLOUDFRONT_SERVICE_PRINCIPAL = "cloudfront.amazonaws.com"
LAMBDA_BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


def public_read_policy_template(bucket_arn: str) -> dict[str, Any]:
    """Bucket policy allowing anonymous reads, used by website endpoint origins.

    :param bucket_arn: The ARN of the content bucket.
    :type bucket_arn: str

    :returns: A dictionary object representing a bucket policy document.
    """
    return {
        "Version": IAM_POLICY_VERSION,
        "Statement": [
            {
                "Sid": "PublicRead",
                "Effect": "Allow",
                "Principal": "*",
                "Action": "s3:GetObject",
                "Resource": [f"{bucket_arn}/*"],
            }
        ],
    }


def cloudfront_read_policy_template(
    bucket_arn: str, distribution_arn: str
) -> dict[str, Any]:
    """Bucket policy granting one CloudFront distribution read access to a bucket.

    The grant is conditioned on the distribution's own ARN, so other distributions
    using the CloudFront service principal cannot reuse it.

    :param bucket_arn: The ARN of the private content bucket.
    :type bucket_arn: str

    :param distribution_arn: The ARN of the distribution that fronts the bucket.
    :type distribution_arn: str

    :returns: A dictionary object representing a bucket policy document.
    """
    return {
        "Version": IAM_POLICY_VERSION,
        "Statement": [
            {
                "Sid": "AllowCloudFrontServicePrincipalReadOnly",
                "Effect": "Allow",
                "Principal": {"Service": CLOUDFRONT_SERVICE_PRINCIPAL},
                "Action": "s3:GetObject",
                "Resource": [f"{bucket_arn}/*"],
                "Condition": {"StringEquals": {"AWS:SourceArn": distribution_arn}},
            }
        ],
    }


def lambda_edge_trust_policy() -> dict[str, Any]:
    return {
        "Version": IAM_POLICY_VERSION,
        "Statement": {
            "Effect": "Allow",
            "Action": "sts:AssumeRole",
            "Principal": {
                "Service": ["lambda.amazonaws.com", "edgelambda.amazonaws.com"]
            },
        },
    }
