"""Physical file identity (device + inode) for rotation detection."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileIdentity:
    device: int
    inode: int

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "FileIdentity":
        return cls(device=st.st_dev, inode=st.st_ino)

    @property
    def is_stable(self) -> bool:
        """False on platforms that report no inode for the file."""
        return self.inode != 0


def identity_of(handle) -> tuple[FileIdentity, int]:
    """Return (identity, size) of an open file handle."""
    st = os.fstat(handle.fileno())
    identity = FileIdentity.from_stat(st)
    if not identity.is_stable:
        logger.warning(
            "No stable file identity on this platform; rotation of %s may go undetected",
            getattr(handle, "name", "<handle>"),
        )
    return identity, st.st_size


def stat_path(path: str) -> os.stat_result | None:
    """Stat the path, returning None if it is currently unreachable."""
    try:
        return os.stat(path)
    except OSError as e:
        logger.debug("Cannot stat %s: %s", path, e)
        return None
