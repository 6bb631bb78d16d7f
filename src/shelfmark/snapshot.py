"""Load library snapshots from YAML or JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from shelfmark.exceptions import SnapshotError
from shelfmark.models import LibrarySnapshot
from shelfmark.schemas.snapshot import validate_snapshot

logger = logging.getLogger(__name__)


def load_snapshot(path: Path | str) -> LibrarySnapshot:
    """
    Read and validate a snapshot file.

    ``.json`` files are parsed as JSON, everything else as YAML.

    Raises:
        SnapshotError: File unreadable, not a mapping, or invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot: {e}", snapshot_file=path) from e

    try:
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotError(f"Cannot parse snapshot: {e}", snapshot_file=path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must contain a mapping", snapshot_file=path)

    try:
        parsed = validate_snapshot(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise SnapshotError(
            f"Invalid snapshot ({len(errors)} errors)", snapshot_file=path, errors=errors
        ) from e

    snapshot = parsed.to_snapshot()
    logger.debug(
        "Loaded snapshot %s: %d books, %d entries, %d freezes",
        path,
        len(snapshot.books),
        len(snapshot.entries),
        len(snapshot.freezes),
    )
    return snapshot
