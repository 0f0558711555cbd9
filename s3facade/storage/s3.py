"""S3-compatible storage backend using requests (works with AWS and S3-compatible providers)."""

from email.utils import parsedate_to_datetime
from typing import BinaryIO, Iterator
from urllib.parse import quote
from xml.etree import ElementTree

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from requests_aws4auth import AWS4Auth
from urllib3.util.retry import Retry

from s3facade.errors import StorageError
from s3facade.storage.base import Metadata, Page

S3_NAMESPACE = {"s3": "http://s3.amazonaws.com/doc/2006-03-01/"}

REDIRECT_STATUSES = (301, 302, 307, 308)

# Statuses worth another attempt: throttling, timeouts and server errors
TRANSIENT_STATUSES = (408, 429, 500, 502, 503, 504)

CHUNK_SIZE = 64 * 1024


class S3RequestsStorage:
    """Storage backend using requests + AWS4Auth.

    One instance serves any number of buckets on the same endpoint with the
    same credentials. Nothing is sent over the network until an operation
    is called.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        region: str | None = None,
        max_retries: int = 2,
        timeout: int = 300,
        page_size: int = 1000,
        session: requests.Session | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.region = region
        self.timeout = timeout
        self.page_size = page_size

        if session is None:
            # AWS4Auth with empty region (works for most S3-compatible providers)
            session = requests.Session()
            session.auth = AWS4Auth(access_key, secret_key, region or "", "s3")

            # Transport-level retries for connection errors and server errors;
            # anything left over surfaces as a transient StorageError
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=0.5,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=["HEAD", "GET", "PUT", "DELETE"],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            session.max_redirects = 0
        self.session = session

        self.name = f"S3 at {self.endpoint}"

    def __repr__(self) -> str:
        return f"S3RequestsStorage({self.endpoint!r})"

    def _url(self, bucket: str, key: str | None = None) -> str:
        if key is None:
            return f"{self.endpoint}/{bucket}"
        return f"{self.endpoint}/{bucket}/{quote(key, safe='/-_.~')}"

    def _request(self, method: str, url: str, what: str, **kwargs) -> requests.Response:
        """Send a request, classifying transport failures."""
        kwargs.setdefault("timeout", self.timeout)
        try:
            return self.session.request(method, url, allow_redirects=False, **kwargs)
        except (
            requests.exceptions.Timeout,
            requests.exceptions.ConnectionError,
            requests.exceptions.RetryError,
        ) as e:
            raise StorageError.transient(f"{what} failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise StorageError.permanent(f"{what} failed: {e}") from e

    @staticmethod
    def _classify(resp: requests.Response, what: str) -> StorageError:
        """Turn an unexpected response into a StorageError of the right kind."""
        if resp.status_code in REDIRECT_STATUSES:
            location = resp.headers.get("Location", "unknown")
            return StorageError.permanent(f"{what} redirected to: {location}")
        if resp.status_code == 404:
            return StorageError.not_found(f"{what}: not found")
        if resp.status_code in TRANSIENT_STATUSES:
            return StorageError.transient(f"{what} failed: {resp.status_code}")
        return StorageError.permanent(f"{what} failed: {resp.status_code} {resp.text}")

    def head(self, bucket: str, key: str) -> Metadata:
        """Fetch object metadata with a HEAD request."""
        what = f"HEAD '{key}' in '{bucket}'"
        resp = self._request("HEAD", self._url(bucket, key), what)
        if resp.status_code != 200:
            raise self._classify(resp, what)
        try:
            return _metadata_from_headers(resp.headers)
        except (TypeError, ValueError) as e:
            raise StorageError.permanent(f"{what}: malformed headers: {e}") from e

    def exists(self, bucket: str, key: str) -> bool:
        """Check for the key with a HEAD request."""
        what = f"HEAD '{key}' in '{bucket}'"
        resp = self._request("HEAD", self._url(bucket, key), what)
        if resp.status_code == 200:
            return True
        if resp.status_code == 404:
            return False
        raise self._classify(resp, what)

    def get(self, bucket: str, key: str) -> Iterator[bytes]:
        """Open the object content as a stream of chunks."""
        what = f"GET '{key}' in '{bucket}'"
        resp = self._request("GET", self._url(bucket, key), what, stream=True)
        if resp.status_code != 200:
            resp.close()
            raise self._classify(resp, what)
        return _iter_chunks(resp, what)

    def put(self, bucket: str, key: str, source: BinaryIO, meta: Metadata) -> None:
        """Upload the whole content of source."""
        what = f"PUT '{key}' in '{bucket}'"
        headers = {"Content-Type": meta.content_type or "application/octet-stream"}
        if meta.content_encoding:
            headers["Content-Encoding"] = meta.content_encoding
        content = source.read()
        resp = self._request(
            "PUT", self._url(bucket, key), what, data=content, headers=headers
        )
        if resp.status_code not in (200, 201):
            raise self._classify(resp, what)
        logger.debug(f"{what}: {len(content)} byte(s), etag={resp.headers.get('ETag')}")

    def delete(self, bucket: str, key: str) -> None:
        """Delete a key from S3."""
        what = f"DELETE '{key}' in '{bucket}'"
        resp = self._request("DELETE", self._url(bucket, key), what)
        if resp.status_code not in (200, 204):
            raise self._classify(resp, what)

    def list_page(self, bucket: str, prefix: str, cursor: str | None) -> Page:
        """Fetch one ListObjectsV2 page."""
        what = f"LIST '{prefix}' in '{bucket}'"
        params = {"list-type": "2", "prefix": prefix, "max-keys": str(self.page_size)}
        if cursor:
            params["continuation-token"] = cursor

        resp = self._request("GET", self._url(bucket), what, params=params)
        if resp.status_code != 200:
            raise self._classify(resp, what)

        try:
            root = ElementTree.fromstring(resp.content)
        except ElementTree.ParseError as e:
            raise StorageError.permanent(f"{what}: malformed response: {e}") from e

        keys = []
        for content in root.findall(".//s3:Contents", S3_NAMESPACE):
            key_elem = content.find("s3:Key", S3_NAMESPACE)
            if key_elem is not None and key_elem.text:
                keys.append(key_elem.text)

        # Check for more pages
        truncated = False
        next_cursor = None
        is_truncated = root.find(".//s3:IsTruncated", S3_NAMESPACE)
        if is_truncated is not None and is_truncated.text == "true":
            truncated = True
            token_elem = root.find(".//s3:NextContinuationToken", S3_NAMESPACE)
            if token_elem is not None:
                next_cursor = token_elem.text

        return Page(keys=keys, cursor=next_cursor, truncated=truncated)

    def bucket_exists(self, bucket: str) -> bool:
        """Check bucket exists."""
        what = f"HEAD bucket '{bucket}'"
        resp = self._request("HEAD", self._url(bucket), what, timeout=10)
        if resp.status_code == 200:
            return True
        if resp.status_code == 404:
            return False
        raise self._classify(resp, what)

    def create_bucket(self, bucket: str) -> None:
        what = f"create bucket '{bucket}'"
        data = None
        if self.region and self.region != "us-east-1":
            data = (
                '<CreateBucketConfiguration xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
                f"<LocationConstraint>{self.region}</LocationConstraint>"
                "</CreateBucketConfiguration>"
            )
        resp = self._request("PUT", self._url(bucket), what, data=data)
        if resp.status_code != 200:
            raise self._classify(resp, what)

    def delete_bucket(self, bucket: str) -> None:
        what = f"delete bucket '{bucket}'"
        resp = self._request("DELETE", self._url(bucket), what)
        if resp.status_code not in (200, 204):
            raise self._classify(resp, what)


def _iter_chunks(resp: requests.Response, what: str) -> Iterator[bytes]:
    try:
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                yield chunk
    except (
        requests.exceptions.ChunkedEncodingError,
        requests.exceptions.ConnectionError,
        requests.exceptions.Timeout,
    ) as e:
        raise StorageError.transient(f"{what} interrupted: {e}") from e
    finally:
        resp.close()


def _metadata_from_headers(headers) -> Metadata:
    length = headers.get("Content-Length")
    modified = headers.get("Last-Modified")
    etag = headers.get("ETag")
    return Metadata(
        content_type=headers.get("Content-Type"),
        content_length=int(length) if length is not None else None,
        content_encoding=headers.get("Content-Encoding"),
        last_modified=parsedate_to_datetime(modified) if modified else None,
        etag=etag.strip('"') if etag else None,
    )
