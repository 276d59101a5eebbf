"""Common machinery for the GCTP style map projections.

A projection converts geodetic latitude and longitude in radians to map
coordinates (usually meters) and back. Subclasses precompute their
constants in ``__init__`` and implement ``_forward`` and ``_inverse``,
raising :class:`~pygctp.exceptions.ProjectionError` for points with no
image. The public methods turn those errors into NaN plus a
:class:`Status`, so a whole grid can be transformed without any single
point aborting the batch.
"""
import enum
import math
from collections import namedtuple

import numpy as np

from pygctp.datum import Datum, get_spheroid
from pygctp.exceptions import ConvergenceError, InBreakError, ProjectionError
from pygctp.logging_config import get_logger
from pygctp.projlib.gctpmath import R2D, pack_angle

logger = get_logger(__name__)

NUM_PARAMETERS = 15


class Status(enum.Enum):
    """Outcome of a single point transform."""
    OK = 0
    ERROR = -1
    IN_BREAK = -2
    NOT_CONVERGED = -3


TransformResult = namedtuple('TransformResult', ['a', 'b', 'status', 'code'])
TransformResult.__doc__ = """Result of a single point transform.

``a, b`` are ``(x, y)`` for a forward transform and ``(lat, lon)`` for an
inverse transform, both NaN unless ``status`` is ``Status.OK``. ``code``
is the GCTP error number of the failure, 0 on success.
"""

_NAN_PAIR = (math.nan, math.nan)


def packed(angle):
    """Pack an angle in radians into the DDDMMMSSS.SS parameter format."""
    return pack_angle(angle*R2D)


# Labels for describe_parameters(), shared by the projections.

def radius_item(r):
    return [('Radius of Sphere', r, 'meters')]


def axes_items(r_major, r_minor):
    return [('Semi-Major Axis of Ellipsoid', r_major, 'meters'),
            ('Semi-Minor Axis of Ellipsoid', r_minor, 'meters')]


def center_lon_item(lon):
    return [('Longitude of Center', lon*R2D, 'degrees')]


def central_meridian_item(lon):
    return [('Longitude of Central Meridian', lon*R2D, 'degrees')]


def center_lat_item(lat):
    return [('Latitude of Center', lat*R2D, 'degrees')]


def origin_item(lat):
    return [('Latitude of Origin', lat*R2D, 'degrees')]


def parallels_items(lat1, lat2):
    return [('1st Standard Parallel', lat1*R2D, 'degrees'),
            ('2nd Standard Parallel', lat2*R2D, 'degrees')]


def parallel_item(lat):
    return [('Standard Parallel', lat*R2D, 'degrees')]


def offset_items(false_east, false_north):
    return [('False Easting', false_east, 'meters'),
            ('False Northing', false_north, 'meters')]


class ProjectionTransform(object):
    """Base class of the forward and inverse map projections.

    Parameters
    ----------
    r_major, r_minor : float
        Ellipsoid axes in meters. Equal axes give a sphere.
    false_east, false_north : float, default=0
        Offsets added to the map coordinates, in meters.
    zone : int, default=0
        Projection zone, only meaningful for zoned systems such as UTM.

    Attributes
    ----------
    system : int
        GCTP projection system code.
    title : str
        Projection name, as reported with the parameters.
    spheroid : int
        Spheroid code matching the axes, or -1 for user defined axes.
    datum : pygctp.datum.Datum
    parameters : ndarray
        The 15 GCTP parameter slots describing this projection.
    """

    system = None
    title = None

    def __init__(self, r_major, r_minor, false_east=0.0, false_north=0.0, zone=0):
        self.zone = zone
        self.spheroid = get_spheroid(r_major, r_minor)
        self.datum = Datum.from_axes(r_major, r_minor)
        self.ec2 = self.datum.e2
        self.ec = math.sqrt(self.ec2)
        self.r_major = self.datum.axis
        self.r_minor = r_minor
        self.false_east = false_east
        self.false_north = false_north
        self.parameters = np.zeros(NUM_PARAMETERS)

    def _set_parameter_slots(self, slots):
        """Fill the GCTP parameter array from a mapping of slot to value."""
        params = np.zeros(NUM_PARAMETERS)
        for index, value in slots.items():
            params[index] = value
        self.parameters = params

    def _forward(self, lat, lon):
        raise NotImplementedError

    def _inverse(self, x, y):
        raise NotImplementedError

    def _run(self, func, a, b, where):
        if not (math.isfinite(a) and math.isfinite(b)):
            return TransformResult(math.nan, math.nan, Status.ERROR, -1)
        try:
            out_a, out_b = func(a, b)
        except InBreakError as err:
            logger.debug('%s %s: %s', self.title, where, err)
            return TransformResult(math.nan, math.nan, Status.IN_BREAK, err.code)
        except ConvergenceError as err:
            logger.debug('%s %s: %s', self.title, where, err)
            return TransformResult(math.nan, math.nan, Status.NOT_CONVERGED, err.code)
        except ProjectionError as err:
            logger.debug('%s %s: %s', self.title, where, err)
            return TransformResult(math.nan, math.nan, Status.ERROR, err.code)
        except (ValueError, ZeroDivisionError, OverflowError) as err:
            # Math domain failures at singular points.
            logger.debug('%s %s: %s at (%r, %r)', self.title, where, err, a, b)
            return TransformResult(math.nan, math.nan, Status.ERROR, -1)
        if not (math.isfinite(out_a) and math.isfinite(out_b)):
            return TransformResult(math.nan, math.nan, Status.ERROR, -1)
        return TransformResult(float(out_a), float(out_b), Status.OK, 0)

    def forward_result(self, lat, lon):
        """Forward transform with the outcome of the computation.

        Parameters
        ----------
        lat, lon : float
            Geodetic location in radians.

        Returns
        -------
        result : TransformResult
            Map ``(x, y)`` in ``a`` and ``b``.
        """
        return self._run(self._forward, lat, lon, 'forward')

    def inverse_result(self, x, y):
        """Inverse transform with the outcome of the computation.

        Parameters
        ----------
        x, y : float
            Map coordinates.

        Returns
        -------
        result : TransformResult
            Geodetic ``(lat, lon)`` in radians in ``a`` and ``b``.
        """
        return self._run(self._inverse, x, y, 'inverse')

    def forward(self, lat, lon):
        """Map coordinates ``(x, y)`` of a location in radians, NaN on failure."""
        result = self.forward_result(lat, lon)
        return result.a, result.b

    def inverse(self, x, y):
        """Location ``(lat, lon)`` in radians of map coordinates, NaN on failure."""
        result = self.inverse_result(x, y)
        return result.a, result.b

    def forward_array(self, lat, lon):
        """Element-wise :meth:`forward` over broadcastable arrays."""
        lat, lon = np.broadcast_arrays(np.asarray(lat, dtype=float), np.asarray(lon, dtype=float))
        x = np.empty(lat.shape)
        y = np.empty(lat.shape)
        for idx in np.ndindex(lat.shape):
            x[idx], y[idx] = self.forward(float(lat[idx]), float(lon[idx]))
        return x, y

    def inverse_array(self, x, y):
        """Element-wise :meth:`inverse` over broadcastable arrays."""
        x, y = np.broadcast_arrays(np.asarray(x, dtype=float), np.asarray(y, dtype=float))
        lat = np.empty(x.shape)
        lon = np.empty(x.shape)
        for idx in np.ndindex(x.shape):
            lat[idx], lon[idx] = self.inverse(float(x[idx]), float(y[idx]))
        return lat, lon

    def describe_parameters(self):
        """List of ``(label, value, unit)`` tuples describing the projection."""
        return []

    def create_boundary_handler(self, is_valid):
        """Boundary handler for the edge of the projected area, if any.

        Parameters
        ----------
        is_valid : callable
            Takes an :class:`~pygctp.coords.EarthLocation` and returns True
            if it has a valid image in the data grid.

        Returns
        -------
        handler : pygctp.trans.boundary.BoundaryHandler or None
        """
        return None

    def adapted_to_extent(self, inverse_affine, dims):
        """Projection to use for a grid with the given extent.

        Projections whose behavior depends on the grid (the longitude
        range of geographic grids) return an adjusted copy.
        """
        return self

    def __repr__(self):
        return '%s(system=%r, zone=%r, spheroid=%r)' % (
            type(self).__name__, self.system, self.zone, self.spheroid)
