"""
Document (PDF) viewer controls.

The viewer itself is external (browser, system PDF reader); this module keeps
the state around it: zoom, fullscreen flag, load status, and the download
filename.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Mapping, Optional

from nounsuccess.api import ApiClient
from nounsuccess.errors import NounSuccessError, ViewerError

log = logging.getLogger(__name__)

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 0.25

LOADING = "loading"
LOADED = "loaded"
ERROR = "error"

LOAD_ERROR = "Failed to load PDF. The file may be corrupt or not accessible."
NO_PDF = "This material does not have an associated PDF file."
DEFAULT_FILENAME = "document.pdf"


def sanitize_filename(title: Optional[str]) -> str:
    """
    'Intro to CS: Week 1' -> 'intro_to_cs__week_1.pdf'
    """
    if not title or not title.strip():
        return DEFAULT_FILENAME
    stem = re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower()
    if not stem.strip("_"):
        return DEFAULT_FILENAME
    return f"{stem}.pdf"


class DocumentViewer:
    def __init__(self, url: str, title: Optional[str] = None, client: Optional[ApiClient] = None) -> None:
        self.client = client
        self.title = title
        self.zoom = 1.0
        self.fullscreen = False
        self.url = url
        self.status = LOADING
        self.error: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or "PDF Document"

    @property
    def src(self) -> str:
        return f"{self.url}#zoom={round(self.zoom * 100)}%"

    def set_url(self, url: str) -> None:
        self.url = url
        self.status = LOADING
        self.error = None

    def zoom_in(self) -> float:
        self.zoom = min(self.zoom + ZOOM_STEP, MAX_ZOOM)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = max(self.zoom - ZOOM_STEP, MIN_ZOOM)
        return self.zoom

    def set_zoom(self, value: float) -> float:
        self.zoom = min(max(value, MIN_ZOOM), MAX_ZOOM)
        return self.zoom

    def toggle_fullscreen(self) -> bool:
        # flipped before the display confirms anything
        self.fullscreen = not self.fullscreen
        return self.fullscreen

    def download_filename(self) -> str:
        return sanitize_filename(self.title)

    def mark_loaded(self) -> None:
        self.status = LOADED
        self.error = None

    def mark_failed(self, message: str = LOAD_ERROR) -> None:
        self.status = ERROR
        self.error = message

    def load(self) -> str:
        """
        Probe the document source and settle the load status.
        """
        if self.client is None:
            raise ViewerError("No API client configured for loading documents.")
        self.status = LOADING
        self.error = None
        try:
            response = self.client.stream(self.url)
        except NounSuccessError as exc:
            log.warning("could not load %s: %s", self.url, exc)
            self.mark_failed()
            return self.status
        response.close()
        self.mark_loaded()
        return self.status

    def retry(self) -> str:
        """
        Reload only this document's source.
        """
        return self.load()

    def download(self, dest_dir: str | Path, chunk_size: int = 64 * 1024) -> Path:
        if self.client is None:
            raise ViewerError("No API client configured for downloads.")
        out_dir = Path(dest_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        out = out_dir / self.download_filename()

        response = self.client.stream(self.url)
        try:
            with out.open("wb") as fh:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        fh.write(chunk)
        finally:
            response.close()
        log.info("downloaded %s to %s", self.url, out)
        return out


def open_material(client: ApiClient, material_id: int) -> DocumentViewer:
    """
    Look up a course material and return a viewer for its PDF.
    """
    body = client.get(f"/api/materials/{material_id}/view", fallback=False)
    data: Mapping[str, Any] = body if isinstance(body, Mapping) else {}
    material = data.get("material")
    material = material if isinstance(material, Mapping) else {}
    pdf_url = data.get("pdfUrl")
    if not isinstance(pdf_url, str) or not pdf_url.strip():
        raise ViewerError(NO_PDF)
    title = material.get("title")
    return DocumentViewer(pdf_url.strip(), title=str(title) if title else None, client=client)
