"""Stream adapters used around the decompression layers.

Classes:
    DecodingStream: Re-raises decompression failures as DecodeError.
    PrefixedStream: Replays already-consumed bytes ahead of a stream.
    RemoteStream: Forward-only HTTP-backed read stream for the CLI.
"""

import io
import logging
import lzma
import tarfile
import zipfile
import zlib

import httpx

from .Errors import DecodeError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 128 * 1024  # 128 KiB

# Exceptions the stdlib decompressors raise for corrupt or truncated data.
# gzip.BadGzipFile is an OSError; tarfile raises ReadError for a truncated member.
DECODE_ERRORS = (OSError, EOFError, zlib.error, lzma.LZMAError, zipfile.BadZipFile, tarfile.TarError)

REQUEST_HEADERS = {
    "User-Agent": "aria2/1.36.0",
    "Accept": "*/*",
    # The payload is the compressed asset itself; never let the transport
    # decode it on our behalf.
    "Accept-Encoding": "identity",
    "Connection": "keep-alive",
}
REQUEST_TIMEOUT = httpx.Timeout(10.0, read=300.0)


class DecodingStream(io.RawIOBase):
    """Read-only wrapper around a decompressing file object.

    Corruption in compressed data often only shows up once the damaged
    block is reached, long after the stream has been handed to the
    caller. This wrapper turns those late failures into `DecodeError`
    tagged with the layer they came from.

    Attributes:
        raw: The decompressing file object (GzipFile, LZMAFile, ZipExtFile,
            or a tar member file).
        stage (str): Name of the layer, used in error messages.
        source_id (str): Identifier of the original source.
    """

    def __init__(self, raw, stage: str, source_id: str) -> None:
        self.raw = raw
        self.stage = stage
        self.source_id = source_id

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        try:
            data = self.raw.read(len(b))
        except DECODE_ERRORS as e:
            raise DecodeError(self.stage, self.source_id, e) from e
        n = len(data)
        b[:n] = data
        return n

    def check(self) -> None:
        """Decode the first block so a malformed header fails right away."""
        try:
            self.raw.peek(1)
        except DECODE_ERRORS as e:
            raise DecodeError(self.stage, self.source_id, e) from e

    def close(self) -> None:
        if not self.closed:
            self.raw.close()
        super().close()


class PrefixedStream(io.RawIOBase):
    """Serve `prefix` first, then continue with `raw`."""

    def __init__(self, prefix: bytes, raw) -> None:
        self._prefix = prefix
        self.raw = raw

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self._prefix:
            n = min(len(b), len(self._prefix))
            b[:n] = self._prefix[:n]
            self._prefix = self._prefix[n:]
            return n
        data = self.raw.read(len(b))
        n = len(data)
        b[:n] = data
        return n


class RemoteStream(io.RawIOBase):
    """Forward-only file-like stream over an HTTP GET response.

    The body is pulled from the server chunk by chunk as the consumer
    reads, so tar and gzip sources are decoded while they download. It
    cannot seek; the zip pipeline buffers the whole body itself.

    Attributes:
        url (str): Remote resource URL.
        client (httpx.Client): HTTP client used for the request.
        pos (int): Number of bytes handed out so far.
    """

    def __init__(self, url: str, client: httpx.Client | None = None) -> None:
        """Open the resource and check the response status.

        Args:
            url (str): HTTP(S) URL of the resource.
            client (httpx.Client | None): Client to send the request with.
                When omitted a keep-alive client is created and owned by
                this stream.

        Raises:
            ConnectionError: If the server answers with a non-2xx status.
            httpx.HTTPError: For transport failures.
        """
        self.url = url
        self._owns_client = client is None
        self.client = client or httpx.Client(
            headers=REQUEST_HEADERS, follow_redirects=True, timeout=REQUEST_TIMEOUT
        )
        self.pos: int = 0
        self._pending: bytes = b""

        request = self.client.build_request("GET", url, headers=REQUEST_HEADERS)
        self._response = self.client.send(request, stream=True)
        if not self._response.is_success:
            status = self._response.status_code
            self.close()
            raise ConnectionError(f"Server returned {status}")

        # Content-Length is informational only (progress display).
        self._size = int(self._response.headers.get("Content-Length", 0))
        self._chunks = self._response.iter_bytes(CHUNK_SIZE)
        logger.debug("Opened %s (%d bytes announced)", url, self._size)

    @property
    def size(self) -> int:
        """Announced content length in bytes, or 0 if unknown."""
        return self._size

    def readable(self) -> bool:
        return True

    def tell(self) -> int:
        return self.pos

    def readinto(self, b) -> int:
        if not self._pending:
            self._pending = next(self._chunks, b"")
        n = min(len(b), len(self._pending))
        b[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        self.pos += n
        return n

    def close(self) -> None:
        """Close the response and, if owned, the HTTP client."""
        if not self.closed:
            self._response_close()
            if self._owns_client:
                self.client.close()
        super().close()

    def _response_close(self) -> None:
        response = getattr(self, "_response", None)
        if response is not None:
            response.close()
