import base64
import re
import time
from functools import lru_cache
from typing import Callable, Iterator, List, Optional

from azure.core import MatchConditions
from azure.core.exceptions import AzureError, ResourceExistsError
from azure.storage.blob import BlobBlock, ContainerClient, ContentSettings

from src.shared.blob_store import get_media_container
from src.shared.config import get_settings
from src.shared.logging_utils import current_trace_id, info as log_info, error as log_error
from src.specs.media.upload_events import UploadComplete, UploadEvent, UploadFailed, UploadProgress

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_filename(filename: str) -> str:
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "upload"


def _block_id(index: int) -> str:
    # Block ids within one blob must all have the same length
    return base64.b64encode(f"{index:08d}".encode("ascii")).decode("ascii")


class MediaUploader:
    """Stream files into blob storage as staged blocks, reporting progress as it goes."""

    def __init__(
        self,
        container: ContainerClient,
        *,
        prefix: str = "covers",
        chunk_size: int = 4 * 1024 * 1024,
        public_base_url: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._container = container
        self._prefix = prefix.strip("/")
        self._chunk_size = chunk_size
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self._clock = clock

    def blob_path(self, filename: str) -> str:
        millis = int(self._clock() * 1000)
        return f"{self._prefix}/{millis}_{_safe_filename(filename)}"

    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> Iterator[UploadEvent]:
        """Upload `data` lazily.

        Yields UploadProgress events and then exactly one terminal event,
        UploadComplete or UploadFailed. Azure errors never escape as
        exceptions and are not retried.
        """
        trace_id = current_trace_id()
        path = self.blob_path(filename)
        total = len(data)
        if total == 0:
            yield UploadFailed(reason="File is empty")
            return

        blob = self._container.get_blob_client(path)
        blocks: List[BlobBlock] = []
        log_info(trace_id, "media:upload:start", path=path, size=total)
        yield UploadProgress(percentComplete=0)
        try:
            for index, offset in enumerate(range(0, total, self._chunk_size)):
                chunk = data[offset:offset + self._chunk_size]
                block_id = _block_id(index)
                blob.stage_block(block_id=block_id, data=chunk)
                blocks.append(BlobBlock(block_id=block_id))
                done = offset + len(chunk)
                yield UploadProgress(percentComplete=round(done * 100 / total))
            blob.commit_block_list(
                blocks,
                content_settings=ContentSettings(content_type=content_type) if content_type else None,
                match_condition=MatchConditions.IfMissing,
            )
        except ResourceExistsError:
            log_error(trace_id, "media:upload:path_taken", path=path)
            yield UploadFailed(reason=f"A file already exists at '{path}'")
            return
        except AzureError as exc:
            log_error(trace_id, "media:upload:failed", path=path, error=str(exc))
            yield UploadFailed(reason=str(exc) or "Failed to upload image.")
            return

        url = f"{self._public_base_url}/{path}" if self._public_base_url else blob.url
        log_info(trace_id, "media:upload:complete", path=path, url=url)
        yield UploadComplete(publicUrl=url, path=path)


@lru_cache(maxsize=1)
def get_media_uploader() -> MediaUploader:
    settings = get_settings()
    return MediaUploader(
        get_media_container(settings),
        prefix=settings.media_path_prefix,
        chunk_size=settings.upload_chunk_size,
        public_base_url=settings.media_public_base_url,
    )
