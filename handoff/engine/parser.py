"""File reconstructor — turns the synthesis text stream back into named files.

The synthesizer is asked to introduce every file with a ``### FILE: <path>``
line. Everything up to the next marker (or end of input) is that file's body.
Text before the first marker is conversational preamble and is dropped.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from handoff.models.results import ParsedFile

FILE_MARKER = re.compile(r"^### FILE:\s*(\S+)", re.IGNORECASE)
_FENCE = re.compile(r"^\s*```")

DEFAULT_LANGUAGE = "text"


def language_for(filename: str) -> str:
    suffix = PurePosixPath(filename).suffix
    return suffix[1:] if len(suffix) > 1 else DEFAULT_LANGUAGE


def unwrap_body(body: str) -> str:
    """Strip a single fenced code block; otherwise return the trimmed text."""
    lines = body.split("\n")
    fences = [i for i, line in enumerate(lines) if _FENCE.match(line)]
    if len(fences) == 2:
        start, end = fences
        return "\n".join(lines[start + 1:end]).strip()
    return body.strip()


def _normalize_path(path: str) -> str:
    while path.startswith("./"):
        path = path[2:]
    return path


class FileReconstructor:
    """Incremental parser fed with arbitrary fragments of the synthesis stream.

    ``feed`` buffers the fragment and returns every file completed by it (a
    file completes when the following marker line arrives); ``close`` returns
    whatever is still pending.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._filename: str | None = None
        self._lines: list[str] = []
        self._closed = False

    def feed(self, text: str) -> list[ParsedFile]:
        if self._closed:
            raise RuntimeError("FileReconstructor is closed")
        self._buffer += text
        *complete, self._buffer = self._buffer.split("\n")
        files: list[ParsedFile] = []
        for line in complete:
            parsed = self._consume(line)
            if parsed is not None:
                files.append(parsed)
        return files

    def close(self) -> list[ParsedFile]:
        if self._closed:
            return []
        self._closed = True
        tail, self._buffer = self._buffer, ""
        return [p for p in (self._consume(tail), self._flush()) if p is not None]

    def _consume(self, line: str) -> ParsedFile | None:
        match = FILE_MARKER.match(line)
        if match:
            flushed = self._flush()
            self._filename = _normalize_path(match.group(1))
            return flushed
        if self._filename is not None:
            self._lines.append(line.rstrip("\r"))
        return None

    def _flush(self) -> ParsedFile | None:
        if self._filename is None:
            return None
        parsed = ParsedFile(
            filename=self._filename,
            language=language_for(self._filename),
            content=unwrap_body("\n".join(self._lines)),
        )
        self._filename = None
        self._lines = []
        return parsed


def parse_files(raw_text: str) -> list[ParsedFile]:
    """Reconstruct every file in ``raw_text``, in order, duplicates included."""
    reconstructor = FileReconstructor()
    files = reconstructor.feed(raw_text)
    files.extend(reconstructor.close())
    return files
