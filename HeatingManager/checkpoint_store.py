"""File-backed store for the time of the last completed weekly cycle."""
import logging
import os
import tempfile
from datetime import datetime, timezone


class CheckpointError(Exception):
    """Exception raised when the checkpoint cannot be read or written."""
    pass


class CheckpointMissingError(CheckpointError):
    """Raised when no checkpoint has been written yet."""
    pass


class CheckpointStore:
    """
    Persists a single timezone-aware timestamp as the whole content of a file.

    The value is written in ISO 8601 / RFC 3339 form with seconds precision
    (e.g. "2026-10-18T09:30:00+00:00") so it stays readable by humans and by
    later versions of the daemon.
    """

    def __init__(self, path: str):
        """
        Initialize the store.

        Args:
            path: File holding the checkpoint (created on first save)
        """
        self.path = path

    def save(self, timestamp: datetime) -> None:
        """
        Overwrite the checkpoint with the given timestamp.

        The file is replaced atomically, so a crash mid-write leaves either the
        old or the new value behind.

        Raises:
            ValueError: If the timestamp is naive
            CheckpointError: If the file could not be written
        """
        if timestamp.tzinfo is None or timestamp.utcoffset() is None:
            raise ValueError("Checkpoint timestamp must be timezone-aware")

        text = timestamp.replace(microsecond=0).isoformat()
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".checkpoint-", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            # mkstemp creates 0600, keep the file readable like a plain write would
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CheckpointError(f"Failed to save checkpoint to {self.path}: {e}") from e

        logging.debug(f"Checkpoint saved: {text} -> {self.path}")

    def load(self) -> datetime:
        """
        Read the checkpoint back.

        Returns:
            datetime: Timezone-aware time of the last completed cycle

        Raises:
            CheckpointMissingError: If no checkpoint file exists
            CheckpointError: If the file cannot be read or parsed
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                text = f.read().strip()
        except FileNotFoundError as e:
            raise CheckpointMissingError(f"No checkpoint at {self.path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise CheckpointError(f"Failed to read checkpoint {self.path}: {e}") from e

        # fromisoformat() only learned the "Z" suffix in Python 3.11
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            timestamp = datetime.fromisoformat(text)
        except ValueError as e:
            raise CheckpointError(f"Malformed checkpoint {text[:64]!r} in {self.path}") from e

        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp
