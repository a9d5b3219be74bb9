# Upsync Store Session
# Owns the boto3 client for one command invocation

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from upsync.config.schema import StoreSettings
from upsync.exceptions import NotFoundError, StoreError
from upsync.store.s3 import S3Store, error_code, translate_error


class StoreSession:
    """
    Connection to the object store.

    The client is opened on construction and released by close(), which
    the context manager protocol calls on exit:

        with StoreSession(config.store) as session:
            store = session.bucket("backups")
    """

    def __init__(self, settings: StoreSettings, *, region: Optional[str] = None):
        """
        Initialize the session.

        Args:
            settings: Store connection settings.
            region: Optional region overriding the configured one.

        Raises:
            StoreError: If the client can't be created.
        """
        self.settings = settings
        self.region = region or settings.region

        try:
            self.client = boto3.client(
                "s3",
                aws_access_key_id=settings.access_key,
                aws_secret_access_key=settings.secret_key,
                region_name=self.region,
                endpoint_url=settings.endpoint_url,
            )
        except BotoCoreError as e:
            raise StoreError(f"Failed to initialize S3 client: {e}") from e

        self._closed = False

    def __enter__(self) -> "StoreSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        if not self._closed:
            self.client.close()
            self._closed = True

    def list_buckets(self) -> list[str]:
        """
        List bucket names, sorted.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, "Listing buckets") from e
        return sorted(b["Name"] for b in response.get("Buckets", []))

    def bucket(self, name: str) -> S3Store:
        """
        Get a store for an existing bucket.

        Args:
            name: Bucket name.

        Returns:
            S3Store bound to the bucket.

        Raises:
            NotFoundError: If the bucket doesn't exist.
            AuthenticationError: If the credentials are rejected.
        """
        try:
            self.client.head_bucket(Bucket=name)
        except ClientError as e:
            if error_code(e) in ("404", "NoSuchBucket", "NotFound"):
                raise NotFoundError(f"Could not find bucket with name {name}") from e
            raise translate_error(e, f"Opening bucket {name}") from e
        except BotoCoreError as e:
            raise translate_error(e, f"Opening bucket {name}") from e

        return S3Store(self.client, name)
