"""
S3 Storage Service: OCR Results

The OCR batch job writes its JSON output next to the document name:

    s3://<OCR_BUCKET>/<document name>output-1-to-2.json
    s3://<OCR_BUCKET>/<document name>output-3-to-4.json

so every result for a document is found by listing with the document name
as prefix. Listing is a lazy, ordered pull over list_objects_v2 pages (S3
returns keys in UTF-8 binary order); it is not restartable mid-scan.

Error mapping:
  listing failure  → EnumerationError  (fatal for the run)
  read / parse     → ReadError         (caller decides; the pipeline skips)
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from ris_search.core.errors import EnumerationError, ReadError
from ris_search.processing.ocr import PageText, parse_ocr_result

logger = logging.getLogger(__name__)

# list_objects_v2 page size; S3 caps it at 1000
LIST_PAGE_SIZE = 1000

# botocore raises ValueError for a malformed endpoint_url while building the client
_CLIENT_ERRORS = (ClientError, BotoCoreError, ValueError)


class OcrResultStorage:
    """
    Async S3 access to one OCR-results bucket.

    A fresh client context is opened per call, so an instance holds no
    connection state and can be shared across runs.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        session: aioboto3.Session | None = None,
    ) -> None:
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url or None
        self._session = session or aioboto3.Session()

    @property
    def bucket(self) -> str:
        return self._bucket

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self):
        """Return a scoped async S3 client context manager."""
        return self._session.client(
            "s3",
            region_name=self._region,
            endpoint_url=self._endpoint_url,
        )

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    async def list_objects(self, prefix: str) -> AsyncIterator[str]:
        """
        Yield object keys under `prefix` in S3's native order.

        Raises:
            EnumerationError: the client could not be created or a list call
                failed. Keys already yielded stay valid.
        """
        try:
            async for resp in self._list_pages(prefix):
                for obj in resp.get("Contents", []):
                    yield obj["Key"]
        except _CLIENT_ERRORS as exc:
            logger.error(
                "S3 list failed | bucket=%s prefix=%s error=%s",
                self._bucket, prefix, exc,
            )
            raise EnumerationError(
                f"listing s3://{self._bucket}/{prefix} failed: {exc}"
            ) from exc

    async def _list_pages(self, prefix: str) -> AsyncIterator[dict]:
        async with self._client() as s3:
            token: str | None = None
            while True:
                kwargs: dict = {
                    "Bucket":  self._bucket,
                    "Prefix":  prefix,
                    "MaxKeys": LIST_PAGE_SIZE,
                }
                if token:
                    kwargs["ContinuationToken"] = token

                resp = await s3.list_objects_v2(**kwargs)
                yield resp

                if not resp.get("IsTruncated"):
                    break
                token = resp.get("NextContinuationToken")

    async def read_ocr_result(self, name: str) -> list[PageText]:
        """
        Download and parse one OCR result object.

        Raises:
            ReadError: client unavailable, object missing, unreadable, or not OCR JSON.
        """
        try:
            async with self._client() as s3:
                resp = await s3.get_object(Bucket=self._bucket, Key=name)
                payload = await resp["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            raise ReadError(name, f"S3 error {code or exc}") from exc
        except (BotoCoreError, ValueError) as exc:
            raise ReadError(name, str(exc)) from exc

        return parse_ocr_result(name, payload)
