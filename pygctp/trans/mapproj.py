"""Map projected data grids.

A :class:`MapProjection` pairs a projection with an affine transform
between ``(row, col)`` grid coordinates and projection ``(x, y)``
coordinates. The affine (the *inverse* affine here, since it maps data
to map) is usually built by :meth:`MapProjection.with_center` from a
center location and a pixel size:

    x = pixel_width*col + x0
    y = -pixel_height*row + y0

so rows run north to south and columns run west to east.
"""
import logging
import math

import numpy as np
from affine import Affine

from pygctp.coords import lon_range
from pygctp.datum import SPHEROID_NAMES
from pygctp.exceptions import ConfigurationError, NonInvertibleTransformError
from pygctp.logging_config import get_logger
from pygctp.projlib.gctpmath import D2R, R2D
from pygctp.projlib.systems import PROJECTION_NAMES
from pygctp.trans.transform import EarthTransform

logger = get_logger(__name__)

# Largest relative difference for two parameters to compare equal.
RELATIVE_TOLERANCE = 1e-10


def almost_equal(a, b):
    """True if two arrays agree to a relative tolerance element by element."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        return False
    scale = np.maximum(np.abs(a), np.abs(b))
    diff = np.abs(a - b)
    ok = (diff == 0) | (diff <= RELATIVE_TOLERANCE*scale)
    return bool(np.all(ok))


class MapProjection(EarthTransform):
    """Earth transform for a grid laid out on a map projection.

    Parameters
    ----------
    projection : pygctp.projlib.base.ProjectionTransform
    dims : sequence of int
        Grid ``(rows, cols)``.
    affine : affine.Affine, default=Affine.identity()
        Maps ``(row, col)`` to map ``(x, y)``.
    datum : pygctp.datum.Datum, optional
        Defaults to the datum of the projection's ellipsoid.
    positive_lon : bool, default=False
        Convert longitudes to [0, 360) on the way into the grid and on
        the way out of the array transforms.

    Raises
    ------
    NonInvertibleTransformError
        If the affine is singular.
    """

    def __init__(self, projection, dims, affine=Affine.identity(), datum=None,
                 positive_lon=False):
        super().__init__(dims, datum if datum is not None else projection.datum)
        if affine.is_degenerate:
            raise NonInvertibleTransformError()
        self.inverse_affine = affine
        self.forward_affine = ~affine
        self.positive_lon = positive_lon
        self.projection = projection.adapted_to_extent(affine, self.dims)
        if logger.isEnabledFor(logging.DEBUG):
            for label, value, unit in self.projection.describe_parameters():
                logger.debug('%s: %s = %r %s', self.projection.title, label, value, unit)
        self.boundary_handler = self.projection.create_boundary_handler(self._has_grid_image)

    def _has_grid_image(self, earth_loc):
        data_loc = self.to_data(earth_loc)
        return data_loc.is_valid() and data_loc.is_contained(self.dims)

    def describe(self):
        return 'mapped'

    def _to_earth(self, data_loc):
        x, y = self.inverse_affine @ (data_loc.row, data_loc.col)
        lat, lon = self.projection.inverse(x, y)
        return lat*R2D, lon*R2D

    def _to_data(self, earth_loc):
        lon = earth_loc.lon
        if self.positive_lon and lon < 0:
            lon += 360
        x, y = self.projection.forward(earth_loc.lat*D2R, lon*D2R)
        return self.forward_affine @ (x, y)

    def to_earth_arrays(self, rows, cols):
        rows, cols = np.broadcast_arrays(np.asarray(rows, dtype=float),
                                         np.asarray(cols, dtype=float))
        x, y = self.inverse_affine @ (rows, cols)
        lat, lon = self.projection.inverse_array(x, y)
        lat = np.degrees(lat)
        lon = lon_range(np.degrees(lon))
        if self.positive_lon:
            lon = np.where(lon < 0, lon + 360, lon)
        return lat, lon

    def to_data_arrays(self, lats, lons):
        lats, lons = np.broadcast_arrays(np.asarray(lats, dtype=float),
                                         np.asarray(lons, dtype=float))
        if self.positive_lon:
            lons = np.where(lons < 0, lons + 360, lons)
        x, y = self.projection.forward_array(np.radians(lats), np.radians(lons))
        rows, cols = self.forward_affine @ (x, y)
        return np.asarray(rows, dtype=float), np.asarray(cols, dtype=float)

    def _copy_with(self, affine, dims, positive_lon=None):
        if positive_lon is None:
            positive_lon = self.positive_lon
        return MapProjection(self.projection, dims, affine, self.datum, positive_lon)

    def with_center(self, center_loc, pixel_dims):
        """Projection with the map center on the central pixel.

        Parameters
        ----------
        center_loc : pygctp.coords.EarthLocation
            Location of the grid center.
        pixel_dims : sequence of float
            Pixel ``(height, width)`` in map units.

        Raises
        ------
        NonInvertibleTransformError
            If either pixel dimension is zero.
        ConfigurationError
            If the center location has no map image.
        """
        height, width = pixel_dims
        if height == 0 or width == 0:
            raise NonInvertibleTransformError("Pixel dimensions must be nonzero")
        x, y = self.projection.forward(center_loc.lat*D2R, center_loc.lon*D2R)
        if math.isnan(x) or math.isnan(y):
            raise ConfigurationError("Center location %r has no map image" % (center_loc,))
        rows, cols = self.dims
        x0 = x - width*(cols - 1)/2.0
        y0 = y + height*(rows - 1)/2.0
        return self._copy_with(Affine(0.0, width, x0, -height, 0.0, y0), self.dims)

    def subset(self, origin, dims):
        """Projection for a sub-grid starting at a new origin.

        The data location ``origin`` becomes ``(0, 0)`` of the new grid.
        """
        affine = self.inverse_affine @ Affine.translation(origin.row, origin.col)
        return self._copy_with(affine, dims)

    def subsample(self, start, stride, length):
        """Projection for every ``stride`` pixel starting at ``start``.

        Parameters
        ----------
        start, stride, length : sequence of int
            Per dimension start index, step and new size.
        """
        affine = (self.inverse_affine @ Affine.translation(start[0], start[1])
                  @ Affine.scale(stride[0], stride[1]))
        return self._copy_with(affine, length)

    def with_positive_lon(self, flag):
        return self._copy_with(self.inverse_affine, self.dims, positive_lon=flag)

    @property
    def pixel_size(self):
        """Distance in map units between adjacent rows."""
        a = self.inverse_affine
        return math.hypot(a.a, a.d)

    @property
    def pixel_dimensions(self):
        """Pixel ``(height, width)`` in map units."""
        a = self.inverse_affine
        return (-a.d, a.b)

    @property
    def system(self):
        return self.projection.system

    @property
    def system_name(self):
        return PROJECTION_NAMES[self.system]

    @property
    def zone(self):
        return self.projection.zone

    @property
    def spheroid(self):
        return self.projection.spheroid

    @property
    def spheroid_name(self):
        if self.spheroid < 0:
            return 'User defined'
        return SPHEROID_NAMES[self.spheroid]

    @property
    def parameters(self):
        return np.array(self.projection.parameters)

    def __eq__(self, other):
        if not isinstance(other, MapProjection):
            return NotImplemented
        return (self.system == other.system
                and self.zone == other.zone
                and self.spheroid == other.spheroid
                and almost_equal(self.parameters, other.parameters)
                and almost_equal(tuple(self.forward_affine)[:6], tuple(other.forward_affine)[:6])
                and almost_equal(tuple(self.inverse_affine)[:6], tuple(other.inverse_affine)[:6]))

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        return 'MapProjection(%s, dims=%r, zone=%r, spheroid=%r)' % (
            self.system_name, self.dims, self.zone, self.spheroid_name)

