"""Reference data: instrument configuration and occupation catalog."""

from .instrument import Need, Value, Round, Instrument, RANK_POINTS, ROUND_SIZE
from .catalog import OccupationProfile, OccupationCatalog, JOB_ZONES

__all__ = [
    "Need",
    "Value",
    "Round",
    "Instrument",
    "RANK_POINTS",
    "ROUND_SIZE",
    "OccupationProfile",
    "OccupationCatalog",
    "JOB_ZONES",
]
