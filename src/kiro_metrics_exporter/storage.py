"""
Storage keys and the object store boundary.

Keys are derived only from the path prefix, the day and the user, never
from the clock, so re-running an export overwrites the same objects
instead of adding new ones.

The transport itself is supplied by the caller as an ObjectStore. A
filesystem-backed LocalObjectStore is included for dry runs and local
mirrors.
"""

import json
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Union

from .exceptions import StoragePathError
from .models import StorageKey
from .utils.datetime import parse_day_key
from .utils.logger import debug

ARTIFACT_NAME = "user-activity-report"

# Hour segment; one artifact per user and day
HOUR_SEGMENT = "00"

_PREFIX_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://(?P<bucket>[^/\s]+)(?:/(?P<base>.*))?$")


@dataclass(frozen=True)
class StorageLocation:
    """A path prefix split into its parts."""

    scheme: str
    bucket: str
    base_path: str


def parse_path_prefix(path_prefix: str) -> StorageLocation:
    """Split ``scheme://bucket/basePath`` into scheme, bucket and base path.

    The base path may be empty; surrounding slashes are dropped.

    Raises:
        StoragePathError: If the prefix does not have that shape.
    """
    match = _PREFIX_RE.match(path_prefix.strip()) if path_prefix else None
    if not match:
        raise StoragePathError(
            f"Invalid storage path prefix {path_prefix!r}; expected scheme://bucket/basePath"
        )
    base = match.group("base") or ""
    return StorageLocation(
        scheme=match.group("scheme").lower(),
        bucket=match.group("bucket"),
        base_path="/".join(part for part in base.split("/") if part),
    )


def build_storage_key(
    day_key: str,
    user_id: str,
    path_prefix: str,
    artifact_name: str = ARTIFACT_NAME,
) -> StorageKey:
    """Derive the bucket and object key for one user's artifact for one day.

    Key layout: ``basePath/YYYY/MM/DD/00/<artifact>-<userId>.csv``

    Raises:
        StoragePathError: If path_prefix is malformed.
        ValueError: If day_key is not YYYY-MM-DD or user_id is empty or contains '/'.
    """
    location = parse_path_prefix(path_prefix)
    day = parse_day_key(day_key)

    if not user_id or "/" in user_id:
        raise ValueError(f"Invalid user id for storage key: {user_id!r}")

    segments = [
        f"{day.year:04d}",
        f"{day.month:02d}",
        f"{day.day:02d}",
        HOUR_SEGMENT,
        f"{artifact_name}-{user_id}.csv",
    ]
    if location.base_path:
        segments.insert(0, location.base_path)

    return StorageKey(bucket=location.bucket, key="/".join(segments), scheme=location.scheme)


@dataclass(frozen=True)
class UploadRequest:
    """One artifact ready for upload; immutable once built."""

    bucket: str
    key: str
    body: bytes
    content_type: str = "text/csv"
    metadata: dict[str, str] = field(default_factory=dict, hash=False)


class ObjectStore(Protocol):
    """Destination for exported artifacts.

    ``put_object`` must write the whole object or raise; any exception
    marks that day as failed.
    """

    def put_object(self, request: UploadRequest) -> None: ...


class LocalObjectStore:
    """Object store backed by a local directory: ``root/bucket/key``.

    Objects are written to a temporary file and moved into place, so a
    reader never sees a partial CSV. Metadata goes to a sidecar
    ``<key>.metadata.json`` file.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def path_for(self, bucket: str, key: str) -> Path:
        return self.root / bucket / Path(*key.split("/"))

    def put_object(self, request: UploadRequest) -> None:
        target = self.path_for(request.bucket, request.key)
        target.parent.mkdir(parents=True, exist_ok=True)

        self._atomic_write(target, request.body)
        sidecar = target.with_name(target.name + ".metadata.json")
        meta = {"content_type": request.content_type, **request.metadata}
        self._atomic_write(sidecar, json.dumps(meta, indent=2, sort_keys=True).encode("utf-8"))

        debug(f"[LocalObjectStore] Wrote {len(request.body)} bytes to {target}")

    @staticmethod
    def _atomic_write(target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
