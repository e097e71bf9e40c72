"""
AlertLock — a timestamp file that marks "alert already sent".

While the file holds a timestamp younger than the cooldown, further
mismatch alerts are suppressed. The file is removed once DNS and WAN
agree again.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class AlertLock:
    """File-backed marker of the last mismatch alert."""

    def __init__(self, path: Path, cooldown: float = 86400.0) -> None:
        self.path = Path(path)
        self.cooldown = cooldown

    def exists(self) -> bool:
        return self.path.exists()

    def sent_at(self) -> datetime | None:
        """Timestamp of the last alert, or None if absent or unreadable."""
        try:
            text = self.path.read_text().strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Cannot read lock file %s: %s", self.path, exc)
            return None

        try:
            stamp = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            stamp = None
        if stamp is None:
            logger.info("Unparsable timestamp in lock file %s, ignoring it", self.path)
            return None
        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=timezone.utc)
        return stamp

    def is_active(self, now: datetime | None = None) -> bool:
        """True while the last alert is younger than the cooldown."""
        stamp = self.sent_at()
        if stamp is None:
            return False
        now = now or datetime.now(timezone.utc)
        age = (now - stamp).total_seconds()
        if age < 0:
            logger.warning(
                "Lock file %s timestamp %s is in the future, ignoring it",
                self.path,
                stamp.isoformat(),
            )
            return False
        active = age < self.cooldown
        if active:
            logger.debug("Alert sent at %s, still within cooldown", stamp.isoformat())
        return active

    def arm(self, now: datetime | None = None) -> None:
        """Record that an alert has just been sent."""
        now = now or datetime.now(timezone.utc)
        try:
            self.path.write_text(format_datetime(now))
        except OSError as exc:
            logger.warning("Cannot write lock file %s: %s", self.path, exc)
            return
        logger.info("Alert lock written to %s", self.path)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Cannot remove lock file %s: %s", self.path, exc)
            return
        logger.info("Alert lock cleared")
