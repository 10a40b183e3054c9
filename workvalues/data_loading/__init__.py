"""Data loading module for the instrument and occupation catalog."""

from .loaders import (
    load_instrument,
    instrument_from_dict,
    load_occupation_catalog,
    catalog_from_frame
)

__all__ = [
    "load_instrument",
    "instrument_from_dict",
    "load_occupation_catalog",
    "catalog_from_frame"
]
