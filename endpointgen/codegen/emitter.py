"""Writing generated artifacts to the output directory.

:class:`FileEmitter` owns the output tree of a run: it clears it at the start,
writes text files byte-exactly, copies source files verbatim and keeps the
list of artifacts written.
"""

import logging
import shutil
from pathlib import Path

from upath import UPath

from endpointgen.codegen.types import ArtifactKind, GeneratedArtifact
from endpointgen.exceptions import OutputError

__all__ = ['FileEmitter']

logger = logging.getLogger(__name__)


class FileEmitter:
    """Emits generated files under an output directory.

    Paths passed to the ``write_*``/``copy``/``read_text`` methods are relative
    to the output directory and use ``/`` separators.

    Example:
        >>> emitter = FileEmitter('./generatedClient')
        >>> emitter.reset()
        >>> emitter.write_text('index.ts', "export * from './apiClient';\\n", ArtifactKind.INDEX)
    """

    def __init__(self, output_dir: str | Path | UPath):
        """Initialize the file emitter.

        Args:
            output_dir: Directory where files will be written.
        """
        self.output_dir = UPath(output_dir)
        self._artifacts: list[GeneratedArtifact] = []

    def path(self, relative: str) -> UPath:
        return self.output_dir.joinpath(*relative.split('/'))

    def reset(self) -> None:
        """Delete the output directory if present and recreate it empty.

        Raises:
            OutputError: If the directory cannot be removed or created.
        """
        try:
            if self.output_dir.exists():
                if isinstance(self.output_dir, Path):
                    shutil.rmtree(self.output_dir)
                else:
                    self.output_dir.fs.rm(self.output_dir.path, recursive=True)
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(str(self.output_dir), e)
        self._artifacts.clear()

    def exists(self, relative: str) -> bool:
        return self.path(relative).exists()

    def read_text(self, relative: str) -> str:
        """Read a file previously written in the output directory.

        Raises:
            OutputError: If the file cannot be read.
        """
        path = self.path(relative)
        try:
            return path.read_bytes().decode('utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise OutputError(str(path), e)

    def write_text(self, relative: str, content: str, kind: ArtifactKind) -> GeneratedArtifact:
        """Write ``content`` as UTF-8 without newline translation.

        Raises:
            OutputError: If the file cannot be written.
        """
        return self._write(relative, content.encode('utf-8'), kind)

    def copy(self, source: str | Path | UPath, relative: str, kind: ArtifactKind) -> GeneratedArtifact:
        """Copy ``source`` byte for byte to ``relative``.

        Raises:
            OutputError: If the source cannot be read or the copy written.
        """
        source = UPath(source)
        try:
            data = source.read_bytes()
        except OSError as e:
            raise OutputError(str(self.path(relative)), e)
        artifact = self._write(relative, data, kind)
        logger.info(f'Copied {source} to {artifact.path}')
        return artifact

    def _write(self, relative: str, data: bytes, kind: ArtifactKind) -> GeneratedArtifact:
        path = self.path(relative)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise OutputError(str(path), e)

        artifact = GeneratedArtifact(kind, relative)
        # rewriting a file (index.ts) keeps a single entry
        self._artifacts = [a for a in self._artifacts if a.path != relative]
        self._artifacts.append(artifact)
        logger.debug(f'Wrote {path}')
        return artifact

    @property
    def artifacts(self) -> list[GeneratedArtifact]:
        """Artifacts written since the last reset, in write order."""
        return self._artifacts.copy()
