# src/bgcargo/data/fetchers.py
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from ..exceptions import FetchError

logger = logging.getLogger(__name__)


class ArchiveFetcher(ABC):
    """Whole-file transfer from the remote archive into the local cache.

    Data is written to a temporary ``*.part`` file next to the destination
    and renamed into place once complete, so readers never see a partial file.
    """

    def __init__(self, base_location: str):
        self.base_location = base_location.rstrip('/')

    def location_of(self, relative_path: str) -> str:
        return f"{self.base_location}/{relative_path.lstrip('/')}"

    def fetch(self, relative_path: str, destination: Path, timeout: Optional[float] = None) -> Path:
        source = self.location_of(relative_path)
        destination = Path(destination)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{destination.name}.", suffix='.part', dir=destination.parent)
        except OSError as e:
            raise FetchError(source, str(e)) from e

        try:
            with os.fdopen(fd, 'wb') as f:
                self._transfer(source, f, timeout)
            os.replace(tmp_name, destination)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug(f"Fetched {source} -> {destination}")
        return destination

    @abstractmethod
    def _transfer(self, source: str, out, timeout: Optional[float]):
        """Write the contents of source to the open binary file out"""

    def close(self):
        pass


class HttpFetcher(ArchiveFetcher):
    def __init__(self, base_location: str, session: Optional[requests.Session] = None,
                 chunk_size: int = 8192):
        super().__init__(base_location)
        self.session = session or requests.Session()
        self.chunk_size = chunk_size

    def _transfer(self, source: str, out, timeout: Optional[float]):
        try:
            with self.session.get(source, stream=True, timeout=timeout) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        out.write(chunk)
        except requests.exceptions.RequestException as e:
            raise FetchError(source, str(e)) from e

    def close(self):
        self.session.close()


class LocalFetcher(ArchiveFetcher):
    """Copies files out of a mirror of the archive on a local or mounted disk"""

    def _transfer(self, source: str, out, timeout: Optional[float]):
        try:
            with open(source, 'rb') as f:
                shutil.copyfileobj(f, out)
        except OSError as e:
            raise FetchError(source, str(e)) from e


def make_fetcher(base_location: str, chunk_size: int = 8192) -> ArchiveFetcher:
    """Pick the transfer mechanism from the scheme of the archive location"""
    parsed = urlparse(base_location)
    if parsed.scheme in ('http', 'https'):
        return HttpFetcher(base_location, chunk_size=chunk_size)
    if parsed.scheme == 'file':
        return LocalFetcher(parsed.path)
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ValueError(f"Unsupported archive location: {base_location}")
    return LocalFetcher(base_location)
