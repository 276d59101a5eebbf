import math

import numpy as np

# Radius of the standard sphere in km, used for all search distances.
STD_RADIUS = 6370.997


def lon_range(lon):
    """Map longitude into [-180, 180).

    Parameters
    ----------
    lon : float or array_like
        Longitude in decimal degrees, within one turn of the target range.

    Returns
    -------
    lon : float or array_like
        Longitude in decimal degrees East of the Prime Meridian.
    """
    if np.ndim(lon) == 0:
        if lon < -180:
            return lon + 360
        elif lon >= 180:
            return lon - 360
        return lon
    lon = np.array(lon, dtype=float)
    lon[lon < -180] += 360
    lon[lon >= 180] -= 360
    return lon


def distance(lat1, lon1, lat2, lon2):
    """Great circle distance on the standard sphere.

    Uses the haversine formula, which stays accurate for the very short
    distances the swath searches work with.

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float or array_like
        End points in decimal degrees.

    Returns
    -------
    d : float or array_like
        Distance in km.
    """
    lat1 = np.radians(lat1)
    lat2 = np.radians(lat2)
    dlon = np.radians(lon2) - np.radians(lon1)
    dlat = lat2 - lat1
    a = np.sin(dlat/2)**2 + np.cos(lat1)*np.cos(lat2)*np.sin(dlon/2)**2
    c = 2*np.arcsin(np.minimum(1, np.sqrt(a)))
    return STD_RADIUS*c


def to_unit_vector(lat, lon):
    """Unit vectors on the sphere for latitude and longitude in degrees.

    Returns an array with a trailing axis of length 3 (x, y, z).
    """
    lat = np.radians(lat)
    lon = np.radians(lon)
    coslat = np.cos(lat)
    return np.stack([coslat*np.cos(lon), coslat*np.sin(lon), np.sin(lat)], axis=-1)


def from_unit_vector(xyz):
    """Latitude and longitude in degrees for (possibly unnormalized) vectors."""
    xyz = np.asarray(xyz, dtype=float)
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]
    lat = np.degrees(np.arctan2(z, np.hypot(x, y)))
    lon = np.degrees(np.arctan2(y, x))
    return lat, lon_range(lon)


class EarthLocation(object):
    """A geodetic location in decimal degrees.

    Longitudes are kept in [-180, 180). A location with a NaN coordinate
    is invalid; transforms return invalid locations rather than raising
    for points they cannot represent.

    Attributes
    ----------
    lat : float
        Latitude in decimal degrees North of the equator.
    lon : float
        Longitude in decimal degrees East of the Prime Meridian.
    datum : pygctp.datum.Datum or None
        Datum the coordinates are referenced to, if known.
    """
    __slots__ = ('lat', 'lon', 'datum')

    def __init__(self, lat, lon, datum=None):
        self.lat = float(lat)
        self.lon = lon_range(float(lon))
        self.datum = datum

    @classmethod
    def invalid(cls):
        """Return a location marked invalid."""
        return cls(np.nan, np.nan)

    def is_valid(self):
        return not (math.isnan(self.lat) or math.isnan(self.lon))

    def translate(self, dlat, dlon):
        """Return a location offset by (dlat, dlon) degrees.

        Latitudes past a pole fold back over it onto the opposite meridian.
        """
        lat = self.lat + dlat
        lon = self.lon
        if lat > 90:
            lat = 180 - lat
            lon += 180
        elif lat < -90:
            lat = -180 - lat
            lon += 180
        return EarthLocation(lat, lon + dlon, self.datum)

    def is_east(self, other):
        """True if this location is east of another along the shorter path."""
        diff = abs(self.lon - other.lon)
        if diff < 180:
            return self.lon > other.lon
        elif diff > 180:
            return self.lon < other.lon
        return False

    def is_west(self, other):
        """True if this location is west of another along the shorter path."""
        diff = abs(self.lon - other.lon)
        if diff < 180:
            return self.lon < other.lon
        elif diff > 180:
            return self.lon > other.lon
        return False

    def crosses_antimeridian(self, other):
        """True if the short path to another location crosses 180 degrees."""
        return abs(self.lon - other.lon) > 180

    def distance(self, other):
        """Great circle distance to another location in km."""
        return float(distance(self.lat, self.lon, other.lat, other.lon))

    def to_datum(self, datum):
        """Return this location shifted to another datum.

        A location with no datum is returned re-tagged without a shift.
        """
        if self.datum is None or self.datum == datum:
            return EarthLocation(self.lat, self.lon, datum)
        lat, lon = self.datum.shift(self.lat, self.lon, datum)
        return EarthLocation(lat, lon, datum)

    def __iter__(self):
        return iter((self.lat, self.lon))

    def __eq__(self, other):
        if not isinstance(other, EarthLocation):
            return NotImplemented
        return (self.lat == other.lat) and (self.lon == other.lon) and (self.datum == other.datum)

    def __hash__(self):
        return hash((self.lat, self.lon))

    def __repr__(self):
        return 'EarthLocation(lat=%r, lon=%r)' % (self.lat, self.lon)


class DataLocation(object):
    """A floating point (row, col) location in a 2D data grid."""
    __slots__ = ('row', 'col')

    def __init__(self, row, col):
        self.row = float(row)
        self.col = float(col)

    @classmethod
    def invalid(cls):
        return cls(np.nan, np.nan)

    def is_valid(self):
        return not (math.isnan(self.row) or math.isnan(self.col))

    def is_contained(self, dims):
        """True if inside [0, rows-1] x [0, cols-1]."""
        return (0 <= self.row <= dims[0]-1) and (0 <= self.col <= dims[1]-1)

    def truncate(self, dims):
        """Return the location clamped to the grid."""
        row = min(max(self.row, 0), dims[0]-1)
        col = min(max(self.col, 0), dims[1]-1)
        return DataLocation(row, col)

    def round(self):
        """Return the nearest integer location, halves rounding up.

        An invalid location rounds to an invalid location.
        """
        if not self.is_valid():
            return DataLocation.invalid()
        return DataLocation(math.floor(self.row + 0.5), math.floor(self.col + 0.5))

    def translate(self, drow, dcol):
        return DataLocation(self.row + drow, self.col + dcol)

    def __iter__(self):
        return iter((self.row, self.col))

    def __eq__(self, other):
        if not isinstance(other, DataLocation):
            return NotImplemented
        return (self.row == other.row) and (self.col == other.col)

    def __hash__(self):
        return hash((self.row, self.col))

    def __repr__(self):
        return 'DataLocation(row=%r, col=%r)' % (self.row, self.col)
