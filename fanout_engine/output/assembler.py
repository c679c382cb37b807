"""Write the combined output artifact.

The header is written first, truncating any previous file; fragments are
appended afterwards in whatever order they were collected.  Nothing already
written is ever rewritten, and fragments are not checked against the
header's column count.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class OutputAssembler:
    """Append-only writer for a single run's output file.

    Parameters
    ----------
    path:
        Destination file.  Parent directories are created on first write.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._header_written = False

    @property
    def path(self) -> Path:
        return self._path

    def write_header(self, header: str) -> None:
        """Create (or overwrite) the file with *header* as its first line.

        An empty header still produces an empty first line, so data always
        starts on line two.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(header.rstrip("\n") + "\n")
        self._header_written = True
        if not header:
            logger.warning("No header available; wrote an empty header line to %s", self._path)

    def append_fragments(self, fragments: Iterable[str]) -> int:
        """Append every fragment as-is and return the number of lines added.

        Empty fragments contribute nothing.
        """
        if not self._header_written:
            raise RuntimeError("write_header() must be called before append_fragments()")

        lines = 0
        with self._path.open("a", encoding="utf-8", newline="") as fh:
            for fragment in fragments:
                if not fragment:
                    continue
                if not fragment.endswith("\n"):
                    fragment += "\n"
                fh.write(fragment)
                lines += fragment.count("\n")

        logger.info("Appended %d data line(s) to %s", lines, self._path)
        return lines
