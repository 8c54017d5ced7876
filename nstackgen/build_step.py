"""
nstackgen Build Step — The trigger contract between a host pipeline and the builder.

A build step names one input asset, reads it, and accepts the finished output.
``FileBuildStep`` is the filesystem implementation used by the CLI; host
pipelines can supply their own object with the same three members.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol


class BuildStep(Protocol):
    input_id: str

    async def read_as_string(self) -> str: ...

    async def write_as_string(self, output_id: str, content: str) -> None: ...


def change_extension(asset_id: str, extension: str) -> str:
    """Same base name, different extension: ``lib/nstack.json`` → ``lib/nstack.dart``."""
    return str(Path(asset_id).with_suffix(extension))


class FileBuildStep:
    """Build step over a file on disk; writes are atomic."""

    def __init__(self, path: str):
        self.input_id = str(path)

    async def read_as_string(self) -> str:
        return Path(self.input_id).read_text(encoding="utf-8")

    async def write_as_string(self, output_id: str, content: str) -> None:
        """
        Write ``content`` to ``output_id`` all-or-nothing: a temporary file in
        the same directory is replaced onto the target, so readers never see
        a partial file.
        """
        target = Path(output_id)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
