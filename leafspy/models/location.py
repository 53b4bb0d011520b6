"""
GPS position attached to each LeafSpy sample.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """Position of the car when the sample was taken."""

    latitude: Optional[float]    # decimal degrees, None without a fix
    longitude: Optional[float]   # decimal degrees, None without a fix
    elevation: Optional[float] = None  # meters

    @property
    def has_fix(self) -> bool:
        return self.latitude is not None and self.longitude is not None
