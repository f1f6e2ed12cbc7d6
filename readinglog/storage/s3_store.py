"""
S3 storage: each key is a JSON object under a bucket prefix.
"""

import json
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import StorageBackend


class S3Storage(StorageBackend):
    """Stores each key as ``s3://<bucket>/<prefix><key>.json``"""

    def __init__(self, bucket: str, prefix: str = "", s3_client=None):
        super().__init__()
        if not bucket:
            raise ValueError("S3 bucket name is required")
        self.bucket = bucket
        self.prefix = prefix
        self.s3_client = s3_client or boto3.client("s3")

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}{key}.json"

    def load(self, key: str) -> Optional[Any]:
        object_key = self._object_key(key)
        try:
            obj = self.s3_client.get_object(Bucket=self.bucket, Key=object_key)
            return json.loads(obj["Body"].read().decode("utf-8"))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            self.logger.error(f"Failed to read s3://{self.bucket}/{object_key}: {e}")
            return None
        except (BotoCoreError, ValueError) as e:
            self.logger.error(f"Failed to read s3://{self.bucket}/{object_key}: {e}")
            return None

    def save(self, key: str, value: Any) -> bool:
        object_key = self._object_key(key)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=json.dumps(value, indent=2),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to write s3://{self.bucket}/{object_key}: {e}")
            return False

        self.logger.info(f"Stored {key} at s3://{self.bucket}/{object_key}")
        return True
