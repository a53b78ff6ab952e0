"""S3 service for reading the bulk photo export"""

import logging
import json
from typing import Any, Optional
import boto3
from botocore.exceptions import ClientError
from botocore.config import Config

from src.config import settings
from src.services.errors import TransportError

logger = logging.getLogger(__name__)


class S3ServiceError(TransportError):
    """Base exception for S3 service errors"""
    pass


class S3ConnectionError(S3ServiceError):
    """S3 connection error"""
    pass


class S3Service:
    """Service for S3 reads of exported photo documents"""

    def __init__(self, bucket: Optional[str] = None):
        """Initialize S3 client with retry configuration"""
        self.bucket = bucket or settings.s3_bucket

        retry_config = Config(
            retries={
                "max_attempts": 3,
                "mode": "standard",
            },
            connect_timeout=5,
            read_timeout=30,
        )

        client_kwargs = {
            "region_name": settings.aws_region,
            "config": retry_config,
        }

        # Add credentials if provided (not needed for IAM roles)
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
            client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

        # Use custom endpoint for local development (MinIO)
        if settings.aws_endpoint_url:
            client_kwargs["endpoint_url"] = settings.aws_endpoint_url

        try:
            self.s3_client = boto3.client("s3", **client_kwargs)
            logger.info(f"S3 client initialized for bucket: {self.bucket}")
        except Exception as e:
            logger.error(f"Failed to initialize S3 client: {e}")
            raise S3ConnectionError(f"Failed to initialize S3 client: {e}")

    def check_bucket(self) -> None:
        """
        Verify the bucket is reachable.

        Raises:
            S3ConnectionError: If the bucket is missing or unreachable
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise S3ConnectionError(f"Bucket {self.bucket} unavailable: {error_code}")

    def download_json(self, s3_key: str) -> Any:
        """
        Download and parse JSON from S3.

        Args:
            s3_key: S3 key of the JSON object

        Returns:
            Parsed JSON value (object or array)

        Raises:
            S3ConnectionError: If download or parsing fails
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=s3_key)
            body = response.get("Body")
            if body is None:
                raise S3ConnectionError(f"No data received from S3 for {s3_key}")
            json_bytes = body.read()
            logger.debug(f"Downloaded {len(json_bytes)} bytes of JSON from {s3_key}")
            return json.loads(json_bytes.decode("utf-8"))
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"Error downloading JSON: {error_code} - {e}")
            raise S3ConnectionError(f"Failed to download JSON: {error_code}")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Error parsing JSON: {e}")
            raise S3ConnectionError(f"Failed to parse JSON: {str(e)}")
        except S3ConnectionError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error downloading JSON: {e}")
            raise S3ConnectionError(f"Failed to download JSON: {str(e)}")
