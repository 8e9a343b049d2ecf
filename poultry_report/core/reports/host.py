"""
Host Environment

Capabilities the renderer consumes from its surroundings: transient artifact
handles, save-as-file and print surfaces.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional
import re
import threading
import time
import uuid
import webbrowser

from poultry_report.utils import get_logger, ArtifactNotFoundError, HostUnavailableError

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

PRINT_ON_LOAD_SCRIPT = "<script>window.onload = function () { window.print(); };</script>"


@dataclass(frozen=True)
class StoredArtifact:
    payload: bytes
    media_type: str
    filename: Optional[str] = None
    expires_at: Optional[float] = None


class ArtifactStore:
    """
    In-memory registry of transient binary payloads keyed by locator.

    With ``ttl_seconds`` set, a handle nobody claims is dropped once it is
    older than the TTL. Expired handles are swept on every store access.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[str, StoredArtifact] = {}
        self._lock = threading.Lock()

    def _sweep(self) -> None:
        # Caller holds self._lock
        now = self._clock()
        expired = [
            locator for locator, item in self._items.items()
            if item.expires_at is not None and item.expires_at <= now
        ]
        for locator in expired:
            del self._items[locator]
            logger.debug("Unclaimed artifact handle expired", extra={"report_id": locator})
        if expired:
            logger.info(f"Expired {len(expired)} unclaimed report handle(s)")

    def create(self, payload: bytes, media_type: str, filename: Optional[str] = None) -> str:
        locator = f"blob:{uuid.uuid4().hex}"
        with self._lock:
            self._sweep()
            expires_at = self._clock() + self.ttl_seconds if self.ttl_seconds is not None else None
            self._items[locator] = StoredArtifact(
                payload=payload, media_type=media_type, filename=filename, expires_at=expires_at
            )
        return locator

    def resolve(self, locator: str) -> StoredArtifact:
        with self._lock:
            self._sweep()
            item = self._items.get(locator)
        if item is None:
            raise ArtifactNotFoundError(locator)
        return item

    def revoke(self, locator: str) -> bool:
        """Release a handle; returns False when it was already gone."""
        with self._lock:
            removed = self._items.pop(locator, None) is not None
        if removed:
            logger.debug("Revoked artifact handle", extra={"report_id": locator})
        return removed

    def __contains__(self, locator: str) -> bool:
        with self._lock:
            self._sweep()
            return locator in self._items

    def __len__(self) -> int:
        with self._lock:
            self._sweep()
            return len(self._items)


class PrintSurface(ABC):
    """A presentation surface that receives HTML and can be printed."""

    def __init__(self):
        self._load_listeners: List[Callable[[], None]] = []
        self.loaded = False

    def on_load(self, callback: Callable[[], None]) -> None:
        self._load_listeners.append(callback)

    @abstractmethod
    def write(self, html: str) -> None:
        ...

    def close(self) -> None:
        """Finish the document; fires load listeners."""
        self.loaded = True
        for callback in self._load_listeners:
            callback()

    @abstractmethod
    def print(self) -> None:
        ...


class ReportHost(ABC):
    """Host capabilities used by ReportRenderer."""

    def __init__(self, store: Optional[ArtifactStore] = None):
        self.store = store if store is not None else ArtifactStore()

    def create_handle(self, payload: bytes, media_type: str, filename: Optional[str] = None) -> str:
        return self.store.create(payload, media_type, filename)

    def revoke_handle(self, locator: str) -> bool:
        return self.store.revoke(locator)

    @abstractmethod
    def save_as(self, locator: str, filename: str) -> Path:
        """Persist the payload behind ``locator`` under ``filename``."""

    @abstractmethod
    def open_surface(self) -> Optional[PrintSurface]:
        """Open a print surface, or None when the host refuses."""


def safe_filename(filename: str) -> str:
    """Strip path separators and control characters, keep unicode text."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", filename).strip(" .")
    return cleaned or "report"


class BrowserPrintSurface(PrintSurface):
    """HTML file opened in the system web browser, which prints on load."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = path
        self._chunks: List[str] = []

    def write(self, html: str) -> None:
        self._chunks.append(html)

    def close(self) -> None:
        self.path.write_text("".join(self._chunks), encoding="utf-8")
        super().close()

    def print(self) -> None:
        html = self.path.read_text(encoding="utf-8")
        if PRINT_ON_LOAD_SCRIPT not in html:
            html = html.replace("</body>", f"{PRINT_ON_LOAD_SCRIPT}\n</body>", 1)
            self.path.write_text(html, encoding="utf-8")
        if not webbrowser.open(self.path.resolve().as_uri(), new=2):
            raise HostUnavailableError("Web browser could not be launched", capability="print")
        logger.info(f"Print view opened: {self.path}")


class LocalHost(ReportHost):
    """
    Host backed by the local filesystem and web browser.

    Downloads land in ``output_dir``; print views are written under
    ``output_dir/print`` and opened with the default browser.
    """

    def __init__(self, output_dir: str = "reports", store: Optional[ArtifactStore] = None):
        super().__init__(store)
        self.output_dir = Path(output_dir)

    def save_as(self, locator: str, filename: str) -> Path:
        artifact = self.store.resolve(locator)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / safe_filename(filename)
            path.write_bytes(artifact.payload)
        except OSError as e:
            raise HostUnavailableError(f"Cannot save report: {e}", capability="save_as")
        logger.info(f"Report saved: {path}", extra={"report_id": locator})
        return path

    def open_surface(self) -> Optional[PrintSurface]:
        try:
            webbrowser.get()
        except webbrowser.Error:
            logger.warning("No web browser available for print view")
            return None
        print_dir = self.output_dir / "print"
        print_dir.mkdir(parents=True, exist_ok=True)
        return BrowserPrintSurface(print_dir / f"print-{uuid.uuid4().hex}.html")
