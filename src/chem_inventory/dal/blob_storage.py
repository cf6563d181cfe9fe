"""
S3 blob storage for reagent photos.
"""

from typing import Optional
from urllib.parse import quote

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from chem_inventory.handlers.utils.errors import PersistenceError
from chem_inventory.handlers.utils.observability import logger, metrics, tracer


class BlobUploadError(PersistenceError):
    """Raised when an object cannot be written to the bucket."""

    def __init__(self, bucket: str, key: str, reason: str):
        super().__init__(
            message=f"Upload of s3://{bucket}/{key} failed: {reason}",
            error_code="BLOB_UPLOAD_ERROR",
        )
        self.bucket = bucket
        self.key = key


class BlobStorage:
    """Uploads objects to one S3 bucket and resolves their public URLs."""

    def __init__(
        self,
        bucket_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        """
        Initialize blob storage.

        Args:
            bucket_name: Bucket receiving the objects
            region_name: AWS region name
            endpoint_url: S3 endpoint URL (for local testing)
            public_base_url: Base URL objects are served from; defaults to the
                virtual-hosted S3 URL of the bucket
        """
        self.bucket_name = bucket_name
        # boto3 clients are thread safe and can be shared by upload workers
        self.s3 = boto3.client('s3', region_name=region_name, endpoint_url=endpoint_url)
        self.public_base_url = (public_base_url or f"https://{bucket_name}.s3.amazonaws.com").rstrip('/')

    @tracer.capture_method
    def upload(self, key: str, data: bytes, content_type: str = 'image/png') -> str:
        """
        Write an object, overwriting any existing object under the same key.

        Returns:
            The object key

        Raises:
            BlobUploadError: If the upload fails
        """
        try:
            self.s3.put_object(Bucket=self.bucket_name, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            metrics.add_metric(name="BlobUploadError", unit=MetricUnit.Count, value=1)
            raise BlobUploadError(self.bucket_name, key, str(e)) from e

        logger.info("Object uploaded", extra={"bucket": self.bucket_name, "key": key, "size": len(data)})
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{quote(key)}"
