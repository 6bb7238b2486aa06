"""
CRUD Gateway: Bucket Service (S3)
==================================

What:  List buckets, list a bucket's objects, upload a file, delete an object.
How:   boto3 is synchronous, so every call runs in Starlette's threadpool via
       `run_in_threadpool`; the event loop keeps serving other requests
       while a round trip is in flight.
Who:   Called by the /buckets route handlers.

Semantics kept from the storage service itself:
    - The object key is the uploaded filename, verbatim. Re-uploading the
      same name overwrites.
    - Deleting a key that does not exist succeeds (S3 DeleteObject is
      idempotent), so no not-found case exists here.
    - No size limit beyond whatever the transport enforces.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from crudgateway.exceptions import BucketListingError, ObjectOperationError

logger = logging.getLogger(__name__)

# Everything a boto3 call can raise on a backing-store failure
S3_ERRORS = (BotoCoreError, ClientError)


class BucketService:
    """
    Adapter over a boto3 S3 client.

    Args:
        client: `boto3.client("s3", ...)`; stateless and safe to share
                across threads.
    """

    def __init__(self, client):
        self.client = client

    async def list_buckets(self) -> List[Dict[str, Any]]:
        try:
            response = await run_in_threadpool(self.client.list_buckets)
        except S3_ERRORS as exc:
            raise BucketListingError("Erro ao listar buckets", details=str(exc)) from exc
        return response.get("Buckets", [])

    async def list_objects(self, bucket_name: str) -> List[Dict[str, Any]]:
        """
        First page (up to 1000 keys) of ListObjectsV2.

        An empty bucket has no `Contents` key at all; it is returned as [].
        """
        try:
            response = await run_in_threadpool(
                self.client.list_objects_v2, Bucket=bucket_name
            )
        except S3_ERRORS as exc:
            raise BucketListingError(
                "Erro ao listar objetos do bucket", details=str(exc), bucket=bucket_name
            ) from exc
        return response.get("Contents", [])

    async def upload(
        self,
        bucket_name: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Store `content` under key `filename`.

        Returns:
            Location, ETag, Bucket and Key of the stored object.
        """
        params: Dict[str, Any] = {
            "Bucket": bucket_name,
            "Key": filename,
            "Body": content,
        }
        if content_type:
            params["ContentType"] = content_type

        try:
            response = await run_in_threadpool(self.client.put_object, **params)
        except S3_ERRORS as exc:
            raise ObjectOperationError(
                "Erro no upload", details=str(exc), bucket=bucket_name, key=filename
            ) from exc

        logger.info("Uploaded s3://%s/%s (%d bytes)", bucket_name, filename, len(content))
        return {
            "Location": self.object_url(bucket_name, filename),
            "ETag": response.get("ETag"),
            "Bucket": bucket_name,
            "Key": filename,
        }

    async def delete(self, bucket_name: str, key: str) -> None:
        try:
            await run_in_threadpool(self.client.delete_object, Bucket=bucket_name, Key=key)
        except S3_ERRORS as exc:
            raise ObjectOperationError(
                "Erro ao deletar arquivo", details=str(exc), bucket=bucket_name, key=key
            ) from exc

    def object_url(self, bucket_name: str, key: str) -> str:
        """Path-style URL of an object on the client's endpoint."""
        endpoint = self.client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{bucket_name}/{quote(key)}"
