"""Track state and dead-reckoning engine."""

from .clock import ClockReconciler, from_epoch_seconds
from .fixed import provision_fixed_sites
from .fusion import MACH_TO_KNOTS, fuse
from .geodesy import destination_point
from .lifecycle import StalenessTier, is_expired, staleness_tier
from .store import TrackStore
from .track import FIXED_CLASSES, Track, TrackClass

__all__ = [
    "ClockReconciler",
    "FIXED_CLASSES",
    "MACH_TO_KNOTS",
    "StalenessTier",
    "Track",
    "TrackClass",
    "TrackStore",
    "destination_point",
    "from_epoch_seconds",
    "fuse",
    "is_expired",
    "provision_fixed_sites",
    "staleness_tier",
]
