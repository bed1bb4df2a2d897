"""Tree responses returned by ``read_tree``.

A response wraps a list of relative file paths and lazy content loaders.
It can be consumed once, either as a list of files, as a gzipped tar
archive, or by extracting it into a directory.
"""

import asyncio
import io
import logging
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Awaitable, Callable, Optional, Sequence

from url_readers.config import ConfigReader
from url_readers.errors import InputError, ReadTreeResponseConsumedError

logger = logging.getLogger(__name__)

ContentLoader = Callable[[], Awaitable[bytes]]


@dataclass(frozen=True)
class ReadTreeResponseFile:
    """One file of a tree.

    Attributes:
        path: Path relative to the tree root, using forward slashes
        content: File content
    """

    path: str
    content: bytes


def _safe_relative_path(path: str) -> PurePosixPath:
    relative = PurePosixPath(path.lstrip("/"))
    if not relative.parts or ".." in relative.parts:
        raise InputError(f"Invalid path in tree: {path!r}")
    return relative


class ReadTreeResponse:
    """A tree of files read from a backend.

    Attributes:
        etag: Opaque version tag of the tree, empty if unknown
    """

    def __init__(
        self,
        files: Sequence[tuple[str, ContentLoader]],
        working_directory: Path,
        etag: str = "",
    ):
        self._files = list(files)
        self._working_directory = working_directory
        self._consumed = False
        self.etag = etag

    def __len__(self) -> int:
        return len(self._files)

    def _consume(self) -> None:
        if self._consumed:
            raise ReadTreeResponseConsumedError("Response has already been read")
        self._consumed = True

    async def _load(self) -> list[ReadTreeResponseFile]:
        contents = await asyncio.gather(*(load() for _, load in self._files))
        return [
            ReadTreeResponseFile(path=str(_safe_relative_path(path)), content=content)
            for (path, _), content in zip(self._files, contents)
        ]

    async def files(self) -> list[ReadTreeResponseFile]:
        """Load every file in the tree.

        Returns:
            Files in listing order

        Raises:
            ReadTreeResponseConsumedError: If the response was already read
        """
        self._consume()
        return await self._load()

    async def archive(self) -> bytes:
        """Pack the tree into a gzipped tar archive.

        Returns:
            The archive bytes

        Raises:
            ReadTreeResponseConsumedError: If the response was already read
        """
        self._consume()
        files = await self._load()

        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for file in files:
                info = tarfile.TarInfo(name=file.path)
                info.size = len(file.content)
                tar.addfile(info, io.BytesIO(file.content))
        return buffer.getvalue()

    async def dir(self, target_dir: Optional[Path] = None) -> Path:
        """Write the tree into a directory.

        Args:
            target_dir: Directory to write into; a fresh temporary directory
                below the working directory is created if None

        Returns:
            The directory holding the tree

        Raises:
            ReadTreeResponseConsumedError: If the response was already read
        """
        self._consume()
        files = await self._load()

        if target_dir is None:
            self._working_directory.mkdir(parents=True, exist_ok=True)
            target_dir = Path(tempfile.mkdtemp(prefix="url-readers-", dir=self._working_directory))
        else:
            target_dir.mkdir(parents=True, exist_ok=True)

        for file in files:
            dest = target_dir.joinpath(*PurePosixPath(file.path).parts)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(file.content)

        logger.debug(f"Wrote {len(files)} files to {target_dir}")
        return target_dir


class ReadTreeResponseFactory:
    """Creates tree responses that share one working directory."""

    def __init__(self, working_directory: Path):
        self.working_directory = working_directory

    @classmethod
    def create(cls, config: ConfigReader) -> "ReadTreeResponseFactory":
        """Create a factory from configuration.

        Reads ``backend.workingDirectory``, falling back to the system
        temporary directory.
        """
        working_directory = config.get_optional_string("backend.workingDirectory")
        return cls(Path(working_directory or tempfile.gettempdir()))

    def from_files(
        self, files: Sequence[tuple[str, ContentLoader]], etag: str = ""
    ) -> ReadTreeResponse:
        """Wrap ``(relative_path, loader)`` pairs in a response."""
        return ReadTreeResponse(files, self.working_directory, etag=etag)
