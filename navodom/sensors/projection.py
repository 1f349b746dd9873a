"""
Planar projection of geodetic coordinates.
"""

from dataclasses import dataclass

import utm

@dataclass(frozen=True)
class UTMCoordinate:
    """Universal Transverse Mercator position."""
    
    easting: float
    northing: float
    zone_number: int
    zone_letter: str
    
    @property
    def zone(self) -> str:
        return f"{self.zone_number}{self.zone_letter}"

def to_utm(latitude: float, longitude: float) -> UTMCoordinate:
    """
    Convert latitude and longitude to UTM meters.
    
    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        
    Returns:
        UTMCoordinate in the zone containing the point
    """
    easting, northing, zone_number, zone_letter = utm.from_latlon(latitude, longitude)
    return UTMCoordinate(float(easting), float(northing), zone_number, zone_letter)
