"""Snapshot persistence to the status file."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path

from host_availability_monitor.exceptions import FatalWriteError, WriteError
from host_availability_monitor.models import Snapshot

logger = logging.getLogger(__name__)


def encode_snapshot(snapshot: Snapshot) -> bytes:
    """Encode a snapshot as UTF-8 JSON (no byte-order mark)."""
    text = json.dumps(snapshot.to_records(), indent=2, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def _target_mode(destination: Path) -> int:
    """Permission bits for the replacement file.

    An existing status file keeps its mode. A new one gets the mode a plain
    open() would give it under the current umask.
    """
    try:
        return stat.S_IMODE(destination.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


class SnapshotWriter:
    """Overwrite the status file with the full current snapshot."""

    def write(self, snapshot: Snapshot, destination: str | Path) -> None:
        """Write a snapshot, replacing any previous content.

        The file is written to a temporary sibling and moved into place, so
        readers never observe a half-written snapshot.

        Raises:
            FatalWriteError: If the destination is a directory, its parent
                does not exist, or access to it is denied.
            WriteError: For any other failure to write.
        """
        destination = Path(destination)
        parent = destination.parent

        if destination.is_dir():
            raise FatalWriteError(f"Status file path is a directory: {destination}")
        if not parent.is_dir():
            raise FatalWriteError(f"Status file directory does not exist: {parent}")

        payload = encode_snapshot(snapshot)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb", dir=parent, prefix=f".{destination.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.chmod(tmp_name, _target_mode(destination))
            os.replace(tmp_name, destination)
            tmp_name = None
        except PermissionError as e:
            raise FatalWriteError(f"Cannot write status file {destination}: {e}") from e
        except OSError as e:
            raise WriteError(f"Failed to write status file {destination}: {e}") from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug(f"Wrote {len(snapshot)} host records to {destination}")


def read_snapshot(path: str | Path) -> Snapshot:
    """Parse a status file back into a snapshot.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a list of host records.
    """
    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ValueError(f"Status file {path} does not contain a list of records")
    return Snapshot.from_records(records)
