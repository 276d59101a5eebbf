"""Geographic (latitude/longitude) grids.

Map coordinates are longitude and latitude in degrees. A grid may run
across the antimeridian or hold more than one full turn of longitude
in a shifted range, so the longitude wrap is chosen from the grid
extent: see :meth:`Geographic.adapted_to_extent`.
"""
import copy
import enum

import shapely.geometry

from pygctp.coords import lon_range
from pygctp.exceptions import ConfigurationError
from pygctp.logging_config import get_logger
from pygctp.projlib import systems
from pygctp.projlib.base import ProjectionTransform, axes_items
from pygctp.projlib.gctpmath import D2R, R2D
from pygctp.trans.boundary import BoundaryHandler

logger = get_logger(__name__)

# Half width in degrees of the polygon used to split lines at the seam.
BOUNDARY_NUDGE = 1.0e-10


class LongitudeRange(enum.Enum):
    """Longitude range a geographic grid is stored in.

    ``SPANS_PRIME``
        [-180, 180), the default.
    ``SPANS_ANTI_POSITIVE``
        [0, 360), the grid crosses the antimeridian from the east.
    ``SPANS_ANTI_NEGATIVE``
        [-360, 0), the grid crosses the antimeridian from the west.
    ``SPANS_PRIME_ANTI_POSITIVE``
        [alpha, alpha + 360), the grid crosses both meridians and extends
        past 180.
    ``SPANS_PRIME_ANTI_NEGATIVE``
        [alpha - 360, alpha), the grid crosses both meridians and extends
        past -180.
    """
    SPANS_PRIME = 0
    SPANS_ANTI_POSITIVE = 1
    SPANS_ANTI_NEGATIVE = 2
    SPANS_PRIME_ANTI_POSITIVE = 3
    SPANS_PRIME_ANTI_NEGATIVE = 4


def classify_longitude_range(min_lon, max_lon):
    """Longitude range type and alpha for a grid extent in degrees.

    Returns
    -------
    lon_range_type : LongitudeRange
    alpha : float
        Split longitude of the two ``SPANS_PRIME_ANTI`` types, else 0.
    """
    if max_lon - min_lon > 360:
        max_lon = min_lon + 360
    if -180 <= min_lon <= 180 and -180 <= max_lon <= 180:
        return LongitudeRange.SPANS_PRIME, 0.0
    if 0 <= min_lon <= 180 and 180 <= max_lon <= 360:
        return LongitudeRange.SPANS_ANTI_POSITIVE, 0.0
    if -360 <= min_lon <= -180 and -180 <= max_lon <= 0:
        return LongitudeRange.SPANS_ANTI_NEGATIVE, 0.0
    if min_lon <= 0 and max_lon >= 180:
        return LongitudeRange.SPANS_PRIME_ANTI_POSITIVE, min_lon
    if min_lon <= -180 and max_lon >= 0:
        return LongitudeRange.SPANS_PRIME_ANTI_NEGATIVE, max_lon
    raise ConfigurationError("Unsupported longitude range [%r, %r] in geographic grid"
                             % (min_lon, max_lon))


class Geographic(ProjectionTransform):
    """Identity projection with map units of degrees.

    Parameters
    ----------
    r_major, r_minor : float
        Ellipsoid axes of the datum, in meters.
    lon_range_type : LongitudeRange, default=LongitudeRange.SPANS_PRIME
    alpha : float, default=0
        Split longitude for the ``SPANS_PRIME_ANTI`` range types.
    """

    system = systems.GEO
    title = 'GEOGRAPHIC'

    _has_seam = False

    def __init__(self, r_major, r_minor, lon_range_type=LongitudeRange.SPANS_PRIME, alpha=0.0):
        super().__init__(r_major, r_minor)
        self.lon_range_type = lon_range_type
        self.alpha = alpha

    @property
    def seam(self):
        """Longitude in degrees where grid lines are split."""
        if self.lon_range_type == LongitudeRange.SPANS_PRIME:
            return 180.0
        if self.lon_range_type in (LongitudeRange.SPANS_ANTI_POSITIVE,
                                   LongitudeRange.SPANS_ANTI_NEGATIVE):
            return 0.0
        return self.alpha

    def wrap_lon(self, lon):
        """Move a longitude in degrees into this grid's range."""
        lon = lon_range(lon)
        kind = self.lon_range_type
        if kind == LongitudeRange.SPANS_ANTI_POSITIVE:
            if lon < 0:
                lon += 360
        elif kind == LongitudeRange.SPANS_ANTI_NEGATIVE:
            if lon >= 0:
                lon -= 360
        elif kind == LongitudeRange.SPANS_PRIME_ANTI_POSITIVE:
            if lon < self.alpha:
                lon += 360
        elif kind == LongitudeRange.SPANS_PRIME_ANTI_NEGATIVE:
            if lon >= self.alpha:
                lon -= 360
        return lon

    def _forward(self, lat, lon):
        return self.wrap_lon(lon*R2D), lat*R2D

    def _inverse(self, x, y):
        return y*D2R, x*D2R

    def adapted_to_extent(self, inverse_affine, dims):
        """Copy of this projection with the range type of a grid.

        Parameters
        ----------
        inverse_affine : affine.Affine
            Maps ``(row, col)`` to ``(lon, lat)`` in degrees.
        dims : sequence of int
            Grid ``(rows, cols)``.
        """
        proj = copy.copy(self)
        if inverse_affine.is_identity:
            proj.lon_range_type, proj.alpha = LongitudeRange.SPANS_PRIME, 0.0
            proj._has_seam = False
            return proj
        x_start, _ = inverse_affine @ (-0.5, -0.5)
        x_end, _ = inverse_affine @ (dims[0] - 0.5, dims[1] - 0.5)
        min_lon, max_lon = min(x_start, x_end), max(x_start, x_end)
        logger.debug('Geographic grid longitudes %r to %r', min_lon, max_lon)
        proj.lon_range_type, proj.alpha = classify_longitude_range(min_lon, max_lon)
        proj._has_seam = True
        logger.debug('Longitude range type is %s with alpha = %r',
                     proj.lon_range_type.name, proj.alpha)
        return proj

    def is_boundary_cut(self, a, b):
        """True if the segment between two locations crosses the seam."""
        if a.is_east(b):
            east, west = a, b
        else:
            east, west = b, a
        kind = self.lon_range_type
        if kind == LongitudeRange.SPANS_PRIME:
            return west.lon > east.lon
        if kind in (LongitudeRange.SPANS_ANTI_POSITIVE, LongitudeRange.SPANS_ANTI_NEGATIVE):
            return west.lon < 0 and east.lon >= 0
        return west.lon < self.alpha and east.lon >= self.alpha

    def boundary_splitter(self):
        """Thin polygons along the seam and the seam one turn east, or None."""
        if not self._has_seam:
            return None
        boundary = self.seam
        polys = [shapely.geometry.box(seam - BOUNDARY_NUDGE, -90, seam + BOUNDARY_NUDGE, 90)
                 for seam in (boundary, boundary + 360)]
        return polys[0].union(polys[1])

    def create_boundary_handler(self, is_valid):
        return BoundaryHandler(self.is_boundary_cut, splitter=self.boundary_splitter())

    def describe_parameters(self):
        return axes_items(self.r_major, self.r_minor) + [
            ('Longitude Range', self.lon_range_type.name, ''),
        ]
