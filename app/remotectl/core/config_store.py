"""rclone.conf reading and section-level mutation.

The file format is INI-like: ``[name]`` headers open a section, each
section holds ``key = value`` lines, and blank lines or lines starting
with ``#`` or ``;`` are ignored. Only whole sections are ever changed;
every other byte of the file is preserved as written.
"""

import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path
from tempfile import NamedTemporaryFile

from remotectl.core.errors import ConfigNotFoundError, ConfigReadError, RemoteNotFoundError
from remotectl.models.remote import RemoteDefinition

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("#", ";")


def parse_section_header(line: str) -> str | None:
    """Return the section name if the line is a ``[name]`` header."""
    stripped = line.strip()
    if len(stripped) >= 2 and stripped.startswith("[") and stripped.endswith("]"):
        return stripped[1:-1].strip()
    return None


def parse_property(line: str) -> tuple[str, str] | None:
    """Split a ``key = value`` line on its first ``=``.

    Args:
        line: Raw line from the config file.

    Returns:
        Tuple of (key, value) with surrounding whitespace trimmed, or None
        for blank lines, comments and lines without ``=``.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIXES):
        return None
    key, sep, value = stripped.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value.strip()


def iter_sections(text: str) -> Iterator[tuple[str, dict[str, str]]]:
    """Yield every section of a config text in file order.

    Duplicate names are yielded once per occurrence; callers decide which
    one wins.

    Args:
        text: Full config file content.

    Yields:
        Tuples of (section name, key/value pairs in file order).
    """
    name: str | None = None
    properties: dict[str, str] = {}

    for line in text.splitlines():
        header = parse_section_header(line)
        if header is not None:
            if name is not None:
                yield name, properties
            name, properties = header, {}
            continue
        if name is None:
            continue
        prop = parse_property(line)
        if prop is not None:
            key, value = prop
            properties[key] = value

    if name is not None:
        yield name, properties


def remove_sections(text: str, remote_name: str) -> tuple[str, int]:
    """Remove every section with the given name.

    Each removed range starts at the ``[remote_name]`` header and ends
    before the next header or at end of text.

    Args:
        text: Full config file content.
        remote_name: Section name to remove.

    Returns:
        Tuple of (new text, number of sections removed).
    """
    kept: list[str] = []
    removed = 0
    deleting = False

    for line in text.splitlines(keepends=True):
        header = parse_section_header(line)
        if header is not None:
            deleting = header == remote_name
            if deleting:
                removed += 1
        if not deleting:
            kept.append(line)

    return "".join(kept), removed


class ConfigStore:
    """Section-scoped access to an rclone config file.

    There is no locking against other writers: each mutating call is one
    read-modify-write cycle and the last writer wins. Writes replace the
    file atomically, so a crash leaves either the old or the new content.

    Attributes:
        path: Location of the rclone config file.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the rclone config file.
        """
        self._path = path

    @property
    def path(self) -> Path:
        """Location of the rclone config file."""
        return self._path

    def exists(self) -> bool:
        """Check if the config file exists."""
        return self._path.is_file()

    def list_remotes(self) -> list[RemoteDefinition]:
        """List remotes in file order.

        Sections without a ``type`` key are skipped. When a name appears
        more than once, only the first section is listed.

        Returns:
            List of remote definitions.

        Raises:
            ConfigNotFoundError: If the config file doesn't exist.
            ConfigReadError: If the file cannot be read or decoded.
        """
        text = self._read_existing()
        remotes: list[RemoteDefinition] = []
        seen: set[str] = set()

        for name, properties in iter_sections(text):
            if name in seen:
                continue
            seen.add(name)
            remote_type = properties.get("type")
            if not name or not remote_type:
                logger.debug("Skipping section [%s] without type", name)
                continue
            rest = {k: v for k, v in properties.items() if k != "type"}
            remotes.append(RemoteDefinition(name=name, type=remote_type, properties=rest))

        return remotes

    def get_remote_properties(self, remote_name: str) -> dict[str, str]:
        """Get every key/value pair of a remote's section, including type.

        Args:
            remote_name: Section name to look up.

        Returns:
            Key/value pairs of the first section with that name.

        Raises:
            ConfigNotFoundError: If the config file doesn't exist.
            ConfigReadError: If the file cannot be read or decoded.
            RemoteNotFoundError: If no section has that name.
        """
        text = self._read_existing()
        for name, properties in iter_sections(text):
            if name == remote_name:
                return properties
        raise RemoteNotFoundError(remote_name)

    def get_remote(self, remote_name: str) -> RemoteDefinition:
        """Get a remote's definition.

        Raises:
            ConfigNotFoundError: If the config file doesn't exist.
            ConfigReadError: If the file cannot be read or decoded.
            RemoteNotFoundError: If no section has that name or it has no type.
        """
        properties = dict(self.get_remote_properties(remote_name))
        remote_type = properties.pop("type", "")
        if not remote_type:
            raise RemoteNotFoundError(remote_name)
        return RemoteDefinition(name=remote_name, type=remote_type, properties=properties)

    def has_remote(self, remote_name: str) -> bool:
        """Check if a section with this name exists.

        A missing config file counts as "no".
        """
        if not self.exists():
            return False
        return any(name == remote_name for name, _ in iter_sections(self._read_existing()))

    def append_remote(self, definition: RemoteDefinition) -> None:
        """Append a section to the end of the file.

        Creates the file and its parent directory if needed. No uniqueness
        check is made: a duplicate name is legal in the file format and the
        first section keeps winning on reads.

        Args:
            definition: Remote to append.

        Raises:
            ConfigReadError: If the file cannot be read or written.
        """
        text = self._read_existing() if self.exists() else ""
        self._write(_append_block(text, definition))
        logger.info("Added remote [%s] (type=%s) to %s", definition.name, definition.type, self._path)

    def delete_remote(self, remote_name: str) -> bool:
        """Remove every section with this name.

        Args:
            remote_name: Section name to remove.

        Returns:
            True if at least one section was removed, False if there was
            nothing to remove (the file is left untouched).

        Raises:
            ConfigReadError: If the file cannot be read or written.
        """
        if not self.exists():
            return False

        text, removed = remove_sections(self._read_existing(), remote_name)
        if not removed:
            return False

        self._write(text)
        logger.info("Deleted remote [%s] from %s", remote_name, self._path)
        return True

    def replace_remote(self, old_name: str, definition: RemoteDefinition) -> None:
        """Replace a remote's section in a single write.

        The old section is removed and the new one appended in memory, then
        the file is replaced atomically. If anything fails before the
        replace, the file still holds the old definition.

        Args:
            old_name: Section to replace.
            definition: New definition; its name may differ (rename).

        Raises:
            ConfigNotFoundError: If the config file doesn't exist.
            ConfigReadError: If the file cannot be read or written.
            RemoteNotFoundError: If no section has the old name.
        """
        text, removed = remove_sections(self._read_existing(), old_name)
        if not removed:
            raise RemoteNotFoundError(old_name)

        self._write(_append_block(text, definition))
        logger.info("Replaced remote [%s] with [%s] in %s", old_name, definition.name, self._path)

    def _read_existing(self) -> str:
        """Read the whole file, preserving line endings."""
        if not self.exists():
            raise ConfigNotFoundError(f"rclone config not found at {self._path}")
        try:
            with open(self._path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigReadError(f"Failed to read config {self._path}: {e}") from e

    def _write(self, text: str) -> None:
        """Write the whole file atomically.

        The text goes to a temporary file in the same directory, which then
        replaces the config via os.replace(). The original file mode is kept.
        """
        tmp_path: Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            mode = stat.S_IMODE(self._path.stat().st_mode) if self.exists() else None
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                newline="",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(text)
            if mode is not None:
                os.chmod(tmp_path, mode)
            os.replace(str(tmp_path), str(self._path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise ConfigReadError(f"Failed to write config {self._path}: {e}") from e


def _append_block(text: str, definition: RemoteDefinition) -> str:
    """Append a definition's section plus a blank separator line."""
    if text and not text.endswith("\n"):
        text += "\n"
    return text + definition.to_section() + "\n"
