"""Strategies that download a single file over HTTP(S)."""

import re
import ssl
import warnings
from pathlib import Path
from typing import Optional, Union

import httpx

from source_fetcher.config.schema import SettingsConfig
from source_fetcher.core.resource import Resource
from source_fetcher.exceptions import ConfigurationError, DownloadError
from source_fetcher.fetch.archive import url_extname
from source_fetcher.fetch.base import AbstractFileDownloadStrategy
from source_fetcher.fetch.cache import DownloadCache
from source_fetcher.utils.interrupts import ignore_interrupts
from source_fetcher.utils.output import (
    create_progress,
    print_detail,
    print_info,
    print_warning,
)
from source_fetcher.utils.paths import ensure_dir, remove_path
from source_fetcher.utils.system import CommandRunner

# Connect timeout while a mirror is still available, so a dead host fails fast
MIRROR_CONNECT_TIMEOUT = 5.0

S3_URL_RX = re.compile(r"^https?://+([^.]+)\.s3\.amazonaws\.com/+(.+)$")


class ResumeNotSupported(Exception):
    """The server refused to continue a partial download."""


class CurlDownloadStrategy(AbstractFileDownloadStrategy):
    """Download a file with resume support and mirror fallback.

    The download is written to ``<cached_location>.incomplete`` and renamed
    into place once complete, so an existing cache file is always whole and
    is never downloaded again.
    """

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.mirrors = list(resource.mirrors)
        self.tarball_path = self.cache.file_path(
            name, str(self.version), url_extname(self.url)
        )
        self.temporary_path = DownloadCache.partial_path(self.tarball_path)

    @property
    def cached_location(self) -> Path:
        return self.tarball_path

    def fetch(self) -> None:
        print_info(f"Downloading {self.url}")
        if self.cached_location.exists():
            print_detail(f"Already downloaded: {self.cached_location}")
            return

        mirrors = list(self.mirrors)
        url = self.url
        while True:
            try:
                self._attempt(url, mirrors_left=bool(mirrors))
                break
            except DownloadError as exc:
                if not mirrors:
                    if url == self.url:
                        raise
                    raise DownloadError(
                        self.url, f"Download failed: {self.url} (mirrors exhausted)"
                    ) from exc
                print_warning("Trying a mirror...")
                url = mirrors.pop(0)

        with ignore_interrupts():
            self.temporary_path.rename(self.cached_location)

    def clear_cache(self) -> None:
        super().clear_cache()
        remove_path(self.temporary_path)

    def downloaded_size(self) -> int:
        """Bytes already present in the partial download."""
        try:
            return self.temporary_path.stat().st_size
        except FileNotFoundError:
            return 0

    def _attempt(self, url: str, mirrors_left: bool) -> None:
        """Download from one candidate URL.

        A partial download the server cannot resume is discarded and the
        download restarted once; every other failure is a DownloadError.
        """
        timeout = self._timeout(mirrors_left)
        url = self._resolve_url(url, timeout)
        had_incomplete_download = self.temporary_path.exists()

        while True:
            try:
                self._fetch(url, timeout)
                return
            except ResumeNotSupported as exc:
                if not had_incomplete_download:
                    raise DownloadError(url) from exc
                print_info("Trying a full download")
                self.temporary_path.unlink()
                had_incomplete_download = False
            except httpx.HTTPError as exc:
                raise DownloadError(url, f"Download failed: {url} ({exc})") from exc

    def _resolve_url(self, url: str, timeout: httpx.Timeout) -> str:
        """Turn a candidate URL into the URL actually requested."""
        return url

    def _fetch(self, url: str, timeout: httpx.Timeout) -> None:
        self._download(url, timeout=timeout)

    def _download(
        self,
        url: str,
        *,
        timeout: httpx.Timeout,
        method: str = "GET",
        content: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        verify: Union[bool, ssl.SSLContext] = True,
    ) -> None:
        offset = self.downloaded_size()
        request_headers = dict(headers or {})
        if offset:
            request_headers["Range"] = f"bytes={offset}-"

        ensure_dir(self.temporary_path.parent)
        with httpx.Client(
            verify=verify, timeout=timeout, follow_redirects=True, auth=self._auth()
        ) as client:
            with client.stream(
                method,
                url,
                params=self._query_params(),
                content=content,
                headers=request_headers,
            ) as response:
                if offset and response.status_code in (200, 416):
                    raise ResumeNotSupported(
                        f"{url} answered {response.status_code} to a range request"
                    )
                response.raise_for_status()

                length = response.headers.get("Content-Length")
                total = offset + int(length) if length and length.isdigit() else None
                with open(self.temporary_path, "ab" if offset else "wb") as f:
                    with create_progress() as progress:
                        task = progress.add_task(self.name, total=total, completed=offset)
                        for chunk in response.iter_bytes():
                            f.write(chunk)
                            progress.update(task, advance=len(chunk))

    def _timeout(self, mirrors_left: bool) -> httpx.Timeout:
        read = self.settings.download_timeout
        return httpx.Timeout(read, connect=MIRROR_CONNECT_TIMEOUT if mirrors_left else read)

    def _auth(self) -> Optional[tuple[str, str]]:
        user = self.meta.get("user")
        if not user:
            return None
        username, _, password = str(user).partition(":")
        return username, password

    def _query_params(self) -> Optional[dict[str, str]]:
        return None


class CurlApacheMirrorDownloadStrategy(CurlDownloadStrategy):
    """Download from the mirror an Apache closer.cgi URL recommends."""

    def _resolve_url(self, url: str, timeout: httpx.Timeout) -> str:
        # Only the primary URL points at the mirror index
        if url != self.url:
            return url

        try:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                response = client.get(f"{url}&asjson=1")
                response.raise_for_status()
                mirrors = response.json()
            best = mirrors["preferred"] + mirrors["path_info"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            raise DownloadError(url, "Couldn't determine mirror, try again later.") from exc

        print_info(f"Best Mirror {best}")
        return best


class CurlPostDownloadStrategy(CurlDownloadStrategy):
    """Download via an HTTP POST.

    Query parameters on the URL are sent as the form body instead.
    """

    def _fetch(self, url: str, timeout: httpx.Timeout) -> None:
        base_url, _, data = url.partition("?")
        self._download(
            base_url,
            timeout=timeout,
            method="POST",
            content=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )


def legacy_tls_context() -> ssl.SSLContext:
    """TLS context for servers that only speak outdated protocol versions.

    SSLv3 is gone from current OpenSSL builds; this allows the oldest version
    the interpreter still supports, up to TLS 1.0.
    """
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.MINIMUM_SUPPORTED
    context.maximum_version = ssl.TLSVersion.TLSv1
    context.set_ciphers("DEFAULT:@SECLEVEL=0")
    return context


class CurlSSL3DownloadStrategy(CurlDownloadStrategy):
    """Download from a host that only supports a legacy TLS version."""

    def _fetch(self, url: str, timeout: httpx.Timeout) -> None:
        self._download(url, timeout=timeout, verify=legacy_tls_context())


class NoUnzipCurlDownloadStrategy(CurlDownloadStrategy):
    """Download but don't unpack; useful for jars and single binaries."""

    def stage(self) -> None:
        self._copy_verbatim()


class CurlUnsafeDownloadStrategy(CurlDownloadStrategy):
    """Download without verifying the server's certificate.

    Deprecated: prefer fixing the server or pinning a mirror.
    """

    def __init__(self, name: str, resource: Resource, **kwargs):
        warnings.warn(
            "CurlUnsafeDownloadStrategy is deprecated; certificate checks are disabled",
            DeprecationWarning,
            stacklevel=2,
        )
        super().__init__(name, resource, **kwargs)

    def _fetch(self, url: str, timeout: httpx.Timeout) -> None:
        self._download(url, timeout=timeout, verify=False)


class CurlBottleDownloadStrategy(CurlDownloadStrategy):
    """Download a pre-built binary package."""

    def _query_params(self) -> Optional[dict[str, str]]:
        mirror = self.settings.bottle_mirror
        return {"use_mirror": mirror} if mirror else None

    def stage(self) -> None:
        print_info(f"Pouring {self.cached_location.name}")
        super().stage()


class LocalBottleDownloadStrategy(AbstractFileDownloadStrategy):
    """Stage a pre-built binary package that already exists on disk."""

    def __init__(
        self,
        path: Union[str, Path],
        *,
        settings: Optional[SettingsConfig] = None,
        runner: Optional[CommandRunner] = None,
    ):
        path = Path(path)
        super().__init__(
            path.name,
            Resource(name=path.name, url=str(path)),
            settings=settings,
            runner=runner,
        )
        self._cached_location = path

    @property
    def cached_location(self) -> Path:
        return self._cached_location

    def fetch(self) -> None:
        if not self.cached_location.is_file():
            raise DownloadError(self.url, f"Local bottle not found: {self.cached_location}")

    def stage(self) -> None:
        print_info(f"Pouring {self.cached_location.name}")
        super().stage()


class S3DownloadStrategy(CurlDownloadStrategy):
    """Download from an S3 bucket with a presigned URL.

    Credentials come from the usual AWS sources (``AWS_ACCESS_KEY_ID`` and
    ``AWS_SECRET_ACCESS_KEY``, shared config files, ...). Without credentials
    the bucket's public URL is used, which works for public buckets.
    """

    def _resolve_url(self, url: str, timeout: httpx.Timeout) -> str:
        match = S3_URL_RX.match(url)
        if not match:
            raise ConfigurationError(f"Bad S3 URL: {url}")
        bucket, key = match.groups()

        try:
            import boto3
            from botocore.exceptions import NoCredentialsError
        except ImportError as exc:
            raise ImportError(
                "boto3 not installed. Install with: pip install 'source-fetcher[s3]'"
            ) from exc

        client = boto3.client("s3")
        try:
            return client.generate_presigned_url(
                "get_object", Params={"Bucket": bucket, "Key": key}
            )
        except NoCredentialsError:
            print_warning("AWS credentials missing, trying public URL instead.")
            return f"https://{bucket}.s3.amazonaws.com/{key}"
