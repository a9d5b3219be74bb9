# Upsync S3 Store
# boto3-backed implementation of the store contract

from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, Optional

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from upsync.exceptions import AuthenticationError, NotFoundError, StoreError
from upsync.store.base import RemoteObject, RemoteStore
from upsync.utils.paths import matches_glob

AUTH_ERROR_CODES = frozenset(
    {
        "AccessDenied",
        "Forbidden",
        "403",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "ExpiredToken",
        "InvalidToken",
    }
)
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})


def error_code(error: ClientError) -> str:
    """Extract the error code from a botocore ClientError."""
    return str(error.response.get("Error", {}).get("Code", "Unknown"))


def translate_error(error: Exception, action: str) -> Exception:
    """
    Map a botocore error to the upsync error taxonomy.

    Args:
        error: Exception raised by boto3.
        action: Short description used in the message.

    Returns:
        AuthenticationError, NotFoundError or StoreError.
    """
    if isinstance(error, NoCredentialsError):
        return AuthenticationError(f"{action}: no credentials found. Is your key/secret set?")
    if isinstance(error, ClientError):
        code = error_code(error)
        if code in AUTH_ERROR_CODES:
            return AuthenticationError(f"{action}: access denied ({code}). Is your key/secret correct?")
        if code in NOT_FOUND_CODES:
            return NotFoundError(f"{action}: not found ({code})")
        return StoreError(f"{action} failed ({code}): {error}")
    return StoreError(f"{action} failed: {error}")


class S3Store(RemoteStore):
    """
    One S3 bucket.

    Fingerprints are the object ETags, which equal the MD5 of the body
    for single-part uploads. Objects uploaded here always use put_object,
    so their ETags stay comparable with local MD5 digests.
    """

    def __init__(self, client, bucket_name: str):
        """
        Initialize S3 store handler.

        Args:
            client: boto3 S3 client.
            bucket_name: S3 bucket name.
        """
        self.client = client
        self.bucket_name = bucket_name

    def list(self, glob: Optional[str] = None) -> Iterator[RemoteObject]:
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name):
                for obj in page.get("Contents", []):
                    if glob is not None and not matches_glob(obj["Key"], glob):
                        continue
                    yield RemoteObject(
                        key=obj["Key"],
                        etag=obj.get("ETag", "").strip('"'),
                        last_modified=obj["LastModified"],
                        size=obj.get("Size", 0),
                    )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Listing bucket {self.bucket_name}") from e

    def get_metadata(self, key: str) -> Optional[RemoteObject]:
        try:
            response = self.client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if error_code(e) in NOT_FOUND_CODES:
                return None
            raise translate_error(e, f"Reading metadata of {key}") from e
        except BotoCoreError as e:
            raise translate_error(e, f"Reading metadata of {key}") from e

        return RemoteObject(
            key=key,
            etag=response.get("ETag", "").strip('"'),
            last_modified=response["LastModified"],
            metadata=dict(response.get("Metadata") or {}),
            size=response.get("ContentLength", 0),
        )

    def put(self, key: str, body: BinaryIO, metadata: dict[str, str], *, public: bool = False) -> None:
        extra = {"ACL": "public-read"} if public else {}
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                Metadata=metadata,
                **extra,
            )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Uploading {key}") from e

    def update_metadata(self, key: str, metadata: dict[str, str], *, public: bool = False) -> None:
        # A self-copy with REPLACE rewrites metadata server-side
        extra = {"ACL": "public-read"} if public else {}
        try:
            self.client.copy_object(
                Bucket=self.bucket_name,
                Key=key,
                CopySource={"Bucket": self.bucket_name, "Key": key},
                Metadata=metadata,
                MetadataDirective="REPLACE",
                **extra,
            )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Updating metadata of {key}") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Deleting {key}") from e

    def download(self, key: str, target) -> None:
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.client.download_file(self.bucket_name, key, str(target))
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Downloading {key}") from e
