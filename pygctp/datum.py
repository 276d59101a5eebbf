"""Spheroid table and geodetic datums.

The spheroid codes are the GCTP ones and are referenced by number from
projection parameter sets, so the order of ``SPHEROIDS`` must not change.
"""
import functools
import math
from collections import namedtuple
from dataclasses import dataclass, field

import numpy as np
import pyproj

from pygctp.logging_config import get_logger

logger = get_logger(__name__)

Spheroid = namedtuple('Spheroid', ['name', 'semi_major', 'inv_flat', 'semi_minor'])

SPHEROIDS = (
    Spheroid('Clarke 1866', 6378206.4, 294.9786982, 6356583.8),
    Spheroid('Clarke 1880', 6378249.145, 293.465, 6356514.86955),
    Spheroid('Bessel', 6377397.155, 299.1528128, 6356078.96284),
    Spheroid('International 1967', 6378157.5, 298.249615390, 6356772.2),
    Spheroid('International 1909', 6378388.0, 297.0, 6356911.94613),
    Spheroid('WGS 72', 6378135.0, 298.26, 6356750.519915),
    Spheroid('Everest', 6377276.3452, 300.8017, 6356075.4133),
    Spheroid('WGS 66', 6378145.0, 298.25, 6356759.769356),
    Spheroid('GRS 1980', 6378137.0, 298.257222101, 6356752.31414),
    Spheroid('Airy', 6377563.396, 299.3249646, 6356256.91),
    Spheroid('Modified Everest', 6377304.063, 300.8017, 6356103.039),
    Spheroid('Modified Airy', 6377340.189, 299.3249646, 6356034.448),
    Spheroid('WGS 84', 6378137.0, 298.257223563, 6356752.314245),
    Spheroid('SouthEast Asia', 6378155.0, 298.3, 6356773.3205),
    Spheroid('Australian National', 6378160.0, 298.25, 6356774.719),
    Spheroid('Krassovsky', 6378245.0, 298.3, 6356863.0188),
    Spheroid('Hough', 6378270.0, 297.0, 6356794.343479),
    Spheroid('Mercury 1960', 6378166.0, 298.3, 6356784.283666),
    Spheroid('Modified Mercury 1968', 6378150.0, 298.3, 6356768.337303),
    Spheroid('Sphere of radius 6370997 m', 6370997.0, math.inf, 6370997.0),
)

CLARKE1866 = 0
GRS1980 = 8
WGS84 = 12
SPHERE = 19
MAX_SPHEROIDS = len(SPHEROIDS)

SPHEROID_NAMES = tuple(s.name for s in SPHEROIDS)

# Largest summed axis difference in meters accepted as a table match.
AXIS_MATCH_TOLERANCE = 0.02


def get_spheroid(r_major, r_minor):
    """Find the table spheroid matching a pair of axes.

    Parameters
    ----------
    r_major, r_minor : float
        Semi-major and semi-minor axes in meters.

    Returns
    -------
    code : int
        Spheroid code of the closest entry, or -1 if no entry lies within
        2 cm (summed over both axes).
    """
    best, best_diff = -1, math.inf
    for code, sph in enumerate(SPHEROIDS):
        diff = abs(sph.semi_major - r_major) + abs(sph.semi_minor - r_minor)
        if diff < best_diff:
            best, best_diff = code, diff
    if best_diff < AXIS_MATCH_TOLERANCE:
        return best
    return -1


def get_spheroid_by_name(name):
    """Return the code of a spheroid by case-insensitive name, or -1."""
    name = name.lower()
    for code, sph_name in enumerate(SPHEROID_NAMES):
        if sph_name.lower() == name:
            return code
    return -1


@dataclass(frozen=True)
class Datum:
    """A geodetic datum: reference ellipsoid plus a three-parameter shift.

    The flattening, eccentricity squared and polar radius are always
    derived from the inverse flattening and never set independently.

    Parameters
    ----------
    name : str
        Datum name.
    spheroid_name : str
        Name of the reference ellipsoid.
    axis : float
        Semi-major axis in meters.
    inv_flat : float
        Inverse flattening, ``inf`` for a sphere.
    dx, dy, dz : float, default=0
        Shift of the datum origin relative to WGS 84, in meters.
    """

    name: str
    spheroid_name: str
    axis: float
    inv_flat: float
    dx: float = 0.0
    dy: float = 0.0
    dz: float = 0.0
    flat: float = field(init=False, repr=False)
    e2: float = field(init=False, repr=False)
    rp: float = field(init=False, repr=False)

    def __post_init__(self):
        flat = 1.0/self.inv_flat
        object.__setattr__(self, 'flat', flat)
        object.__setattr__(self, 'e2', 2*flat - flat*flat)
        object.__setattr__(self, 'rp', self.axis*(1 - flat))

    @classmethod
    def from_spheroid(cls, code, name=None, dx=0.0, dy=0.0, dz=0.0):
        sph = SPHEROIDS[code]
        return cls(name or sph.name, sph.name, sph.semi_major, sph.inv_flat, dx, dy, dz)

    @classmethod
    def from_axes(cls, r_major, r_minor):
        """Datum for a pair of axes: the table entry if one matches, else user defined."""
        code = get_spheroid(r_major, r_minor)
        if code != -1:
            return create_datum(code)
        if r_major == r_minor:
            inv_flat = math.inf
        else:
            inv_flat = r_major/(r_major - r_minor)
        logger.debug('No spheroid matches axes (%r, %r), using a user defined datum', r_major, r_minor)
        return cls('User defined', 'User defined', r_major, inv_flat)

    def shift(self, lat, lon, to_datum):
        """Shift a location from this datum to another.

        Uses the abridged Molodensky transformation.

        Parameters
        ----------
        lat : float or array_like
            Latitude in decimal degrees on this datum.
        lon : float or array_like
            Longitude in decimal degrees on this datum.
        to_datum : Datum
            Target datum.

        Returns
        -------
        lat, lon : float or array_like
            Location on the target datum in decimal degrees.
        """
        da = to_datum.axis - self.axis
        df = to_datum.flat - self.flat
        dx = self.dx - to_datum.dx
        dy = self.dy - to_datum.dy
        dz = self.dz - to_datum.dz

        slat = np.sin(np.radians(lat))
        clat = np.cos(np.radians(lat))
        slon = np.sin(np.radians(lon))
        clon = np.cos(np.radians(lon))
        ssqlat = slat*slat
        adb = 1.0/(1.0 - self.flat)
        rn = self.axis/np.sqrt(1.0 - self.e2*ssqlat)
        rm = self.axis*(1.0 - self.e2)/(1.0 - self.e2*ssqlat)**1.5

        dlat = (((-dx*slat*clon - dy*slat*slon) + dz*clat)
                + (da*((rn*self.e2*slat*clat)/self.axis))
                + (df*(rm*adb + rn/adb)*slat*clat))/rm
        dlon = (-dx*slon + dy*clon)/(rn*clat)
        return lat + np.degrees(dlat), lon + np.degrees(dlon)

    def compute_ecf(self, lat, lon):
        """Earth-centered fixed coordinates of a surface point.

        The vector is normalized by the geocentric radius term, so a
        sphere gives a unit vector.

        Parameters
        ----------
        lat, lon : float or array_like
            Location in decimal degrees.

        Returns
        -------
        ecf : ndarray
            Array with a trailing axis of length 3 (x, y, z).
        """
        lat = np.radians(lat)
        lon = np.radians(lon)
        coslat = np.cos(lat)
        sinlat = np.sin(lat)
        re = self.axis
        beta = self.rp*np.sqrt((re*re)/(self.rp*self.rp)*coslat*coslat + sinlat*sinlat)
        return np.stack([
            (re*coslat*np.cos(lon))/beta,
            (re*coslat*np.sin(lon))/beta,
            (self.rp*self.rp*sinlat)/(re*beta),
        ], axis=-1)

    def to_crs(self):
        """Geographic ``pyproj.CRS`` on this datum's ellipsoid."""
        params = {'proj': 'longlat', 'a': self.axis, 'no_defs': True}
        if math.isinf(self.inv_flat):
            params['b'] = self.axis
        else:
            params['rf'] = self.inv_flat
        if self.dx or self.dy or self.dz:
            params['towgs84'] = '%r,%r,%r' % (self.dx, self.dy, self.dz)
        return pyproj.CRS.from_dict(params)


@functools.lru_cache(maxsize=None)
def create_datum(code):
    """Return the shared datum for a spheroid table code.

    Parameters
    ----------
    code : int
        Spheroid code in [0, MAX_SPHEROIDS).

    Returns
    -------
    datum : Datum
    """
    if not 0 <= code < MAX_SPHEROIDS:
        raise ValueError("No spheroid with code %r" % (code,))
    return Datum.from_spheroid(code)
