"""
Per-address health tracking with time-boxed quarantine
"""
import logging
import time
from typing import Optional

from .config import DEFAULT_QUARANTINE_SECONDS, is_quarantined
from .types import Clock, QuarantineEntry

logger = logging.getLogger(__name__)


class AddressHealthTracker:
    """
    Tracks addresses that recently failed at the connection level.

    An address is quarantined for quarantine_seconds after its last failure.
    Expired records are dropped by the lookup that notices them, so no timer
    is needed. The number of records is capped at max_entries.

    Example:
        tracker = AddressHealthTracker()
        tracker.mark_failed('10.0.0.1')
        tracker.is_failed('10.0.0.1')  # True for the next 30 seconds
    """

    def __init__(
        self,
        quarantine_seconds: float = DEFAULT_QUARANTINE_SECONDS,
        max_entries: int = 1024,
        clock: Optional[Clock] = None,
    ) -> None:
        self._quarantine_seconds = quarantine_seconds
        self._max_entries = max_entries
        self._clock = clock or time.monotonic
        self._failed: dict[str, QuarantineEntry] = {}

    @property
    def quarantine_seconds(self) -> float:
        return self._quarantine_seconds

    def mark_failed(self, address: str) -> QuarantineEntry:
        """Record a failure for address, restarting its quarantine window"""
        logger.warning(f"AddressHealthTracker.mark_failed: marking address as failed: {address}")

        if address not in self._failed and len(self._failed) >= self._max_entries:
            self._make_room()

        entry = QuarantineEntry(address=address, failed_at=self._clock())
        self._failed[address] = entry
        return entry

    def is_failed(self, address: str) -> bool:
        """Whether address is still quarantined; evicts the record once expired"""
        entry = self._failed.get(address)
        if entry is None:
            return False

        if is_quarantined(entry.failed_at, self._quarantine_seconds, self._clock()):
            return True

        self._failed.pop(address, None)
        logger.debug(f"AddressHealthTracker.is_failed: quarantine expired for {address}")
        return False

    def failed_at(self, address: str) -> Optional[float]:
        """Raw failure timestamp for address, without expiring it"""
        entry = self._failed.get(address)
        return entry.failed_at if entry else None

    def failed_addresses(self) -> list[str]:
        """Addresses that are quarantined right now"""
        return [address for address in list(self._failed) if self.is_failed(address)]

    def prune_expired(self) -> int:
        """Remove every expired record; returns how many were removed"""
        now = self._clock()
        expired = [
            address for address, entry in self._failed.items()
            if not is_quarantined(entry.failed_at, self._quarantine_seconds, now)
        ]
        for address in expired:
            del self._failed[address]
        return len(expired)

    def _make_room(self) -> None:
        if self.prune_expired():
            return
        oldest = min(self._failed.values(), key=lambda e: e.failed_at)
        del self._failed[oldest.address]
        logger.debug(f"AddressHealthTracker: capacity reached, dropped oldest record {oldest.address}")

    def size(self) -> int:
        return len(self._failed)

    def clear(self) -> None:
        self._failed.clear()

    def __contains__(self, address: str) -> bool:
        return address in self._failed
