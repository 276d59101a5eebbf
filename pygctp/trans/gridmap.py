"""Data grids described by CF grid mapping metadata.

A CF style dataset carries its projection as the attributes of a grid
mapping variable plus two regularly spaced 1-D coordinate axes. This
module turns that description into an :class:`EarthTransform` backed
by ``pyproj``.

Examples
--------
::

    ds = xr.open_dataset('goes_sst.nc')
    trans = GridMappedProjection.from_dataset(ds, 'sea_surface_temperature')
    loc = trans.to_earth(DataLocation(2749.5, 2749.5))
"""
import math

import numpy as np
import pint
import pyproj
from pyproj.exceptions import CRSError

from pygctp.coords import distance, lon_range
from pygctp.datum import Datum
from pygctp.exceptions import ConfigurationError, UnitsError
from pygctp.logging_config import get_logger
from pygctp.trans.transform import EarthTransform

logger = get_logger(__name__)

ureg = pint.UnitRegistry()
Q_ = ureg.Quantity

# One km of arc seen from geostationary orbit, in radians.
GEOSTATIONARY_KM_ANGLE = 1.0/(42164.0 - 6378.137)

# Regular axis spacing must agree to this relative tolerance.
AXIS_SPACING_TOLERANCE = 1e-5


def ellipsoid_axes(semi_major, semi_minor=None, inverse_flattening=None):
    """Fill in whichever of the minor axis and inverse flattening is missing.

    Parameters
    ----------
    semi_major : float
        Semi-major axis in meters.
    semi_minor : float, optional
        Semi-minor axis in meters.
    inverse_flattening : float, optional
        Inverse flattening; zero or infinite for a sphere.

    Returns
    -------
    semi_major, semi_minor, inverse_flattening : float
        ``inverse_flattening`` is ``inf`` for a sphere.
    """
    if inverse_flattening is not None and (inverse_flattening == 0 or math.isinf(inverse_flattening)):
        inverse_flattening = math.inf
    if semi_minor is None:
        if inverse_flattening is None or math.isinf(inverse_flattening):
            semi_minor = semi_major
        else:
            semi_minor = semi_major - semi_major/inverse_flattening
    if inverse_flattening is None:
        if semi_major == semi_minor:
            inverse_flattening = math.inf
        else:
            inverse_flattening = semi_major/(semi_major - semi_minor)
    return float(semi_major), float(semi_minor), float(inverse_flattening)


def datum_from_attrs(attrs, crs=None):
    """Datum for the ellipsoid in a set of CF grid mapping attributes.

    ``earth_radius`` takes precedence over the axis attributes. With none
    of them present the ellipsoid of ``crs`` is used.
    """
    if 'earth_radius' in attrs:
        radius = float(attrs['earth_radius'])
        r_major, r_minor, _ = ellipsoid_axes(radius, radius)
    elif 'semi_major_axis' in attrs:
        def get(name):
            value = attrs.get(name)
            return None if value is None else float(value)
        r_major, r_minor, _ = ellipsoid_axes(get('semi_major_axis'), get('semi_minor_axis'),
                                             get('inverse_flattening'))
    elif crs is not None:
        r_major = crs.ellipsoid.semi_major_metre
        r_minor = crs.ellipsoid.semi_minor_metre
    else:
        raise ConfigurationError("Grid mapping has no ellipsoid attributes")
    return Datum.from_axes(r_major, r_minor)


def projection_units(to_earth, crs=None):
    """Native units of a projection, probed from its inverse.

    The distance covered by one projection unit from the origin decides
    between km and degrees; the distance covered by one km of arc seen
    from geostationary orbit detects radians. Anything else takes the
    CRS's declared axis unit.

    Parameters
    ----------
    to_earth : callable
        Maps projection ``(x, y)`` to ``(lat, lon)`` in degrees.
    crs : pyproj.CRS, optional
        Source of the fallback unit.

    Returns
    -------
    unit : pint.Quantity
        One native projection unit.
    """
    lat0, lon0 = to_earth(0.0, 0.0)
    lat1, lon1 = to_earth(1.0, 0.0)
    unit_dist = distance(lat0, lon0, lat1, lon1)
    lat2, lon2 = to_earth(GEOSTATIONARY_KM_ANGLE, 0.0)
    angle_dist = distance(lat0, lon0, lat2, lon2)

    if abs(1 - unit_dist) < 0.2:
        return Q_(1.0, 'km')
    elif abs(100 - unit_dist) < 20:
        return Q_(1.0, 'degree')
    elif abs(1 - angle_dist) < 0.2:
        return Q_(1.0, 'radian')
    if crs is not None and crs.axis_info:
        return Q_(crs.axis_info[0].unit_conversion_factor, 'm')
    return Q_(1.0, 'm')


def axis_transform(values, units, native, name='axis'):
    """Scale and offset mapping an axis index to native projection units.

    Parameters
    ----------
    values : array_like
        Regularly spaced 1-D coordinate values.
    units : str or None
        Units of ``values``; None leaves them as they are.
    native : pint.Quantity
        One native projection unit.
    name : str
        Axis name for error messages.

    Returns
    -------
    scale, offset : float

    Raises
    ------
    ConfigurationError
        If the axis is not 1-D and regularly spaced.
    UnitsError
        If ``units`` cannot be converted to the projection units.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 1 or values.size < 2:
        raise ConfigurationError("Axis %s must be 1-D with at least two values" % name)
    steps = np.diff(values)
    if not np.allclose(steps, steps[0], rtol=AXIS_SPACING_TOLERANCE, atol=0):
        raise ConfigurationError("Axis %s is not regularly spaced" % name)
    scale = float(steps[0])
    offset = float(values[0])
    if units:
        try:
            factor = Q_(1.0, units).to(native.units).magnitude/native.magnitude
        except (pint.DimensionalityError, pint.UndefinedUnitError) as err:
            raise UnitsError("Axis %s units '%s' incompatible with projection units '%s'"
                             % (name, units, native.units)) from err
        scale *= factor
        offset *= factor
    return scale, offset


class GridMappedProjection(EarthTransform):
    """Earth transform for a grid on a CF grid mapping.

    Parameters
    ----------
    attrs : dict
        Grid mapping variable attributes, e.g. ``grid_mapping_name``,
        ``semi_major_axis`` and the projection parameters.
    x, y : array_like
        Regularly spaced 1-D coordinates of the columns and rows.
    x_units, y_units : str, optional
        Units of ``x`` and ``y``.

    Raises
    ------
    ConfigurationError
        If the grid mapping is not a projection or an axis is irregular.
    UnitsError
        If the axis units do not match the projection.
    """

    def __init__(self, attrs, x, y, x_units=None, y_units=None):
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        attrs = dict(attrs)
        try:
            self.crs = pyproj.CRS.from_cf(attrs)
        except CRSError as err:
            raise ConfigurationError("Unusable grid mapping: %s" % err) from err
        if not self.crs.is_projected:
            raise ConfigurationError("Grid mapping %r is not a map projection"
                                     % attrs.get('grid_mapping_name'))
        super().__init__((y.size, x.size), datum_from_attrs(attrs, self.crs))
        self.attrs = attrs

        # CF geostationary coordinates are scan angles; proj works in
        # angle times the perspective height.
        self.map_scale = 1.0
        if attrs.get('grid_mapping_name') == 'geostationary':
            self.map_scale = float(attrs['perspective_point_height'])

        geodetic = self.crs.geodetic_crs
        self._to_map = pyproj.Transformer.from_crs(geodetic, self.crs, always_xy=True)
        self._to_geo = pyproj.Transformer.from_crs(self.crs, geodetic, always_xy=True)

        self.native_units = projection_units(self._map_to_earth, self.crs)
        self.x_transform = axis_transform(x, x_units, self.native_units, 'x')
        self.y_transform = axis_transform(y, y_units, self.native_units, 'y')
        logger.debug('%s grid %r, native units %s, x %r, y %r',
                     attrs.get('grid_mapping_name'), self.dims, self.native_units,
                     self.x_transform, self.y_transform)

    @classmethod
    def from_dataset(cls, ds, var_name):
        """Transform for a gridded variable of an ``xarray.Dataset``.

        The variable's ``grid_mapping`` attribute names the mapping
        variable. The x and y axes are the coordinates along the last
        two dimensions, or those tagged ``projection_x_coordinate`` and
        ``projection_y_coordinate``.
        """
        var = ds[var_name]
        mapping_name = var.attrs.get('grid_mapping')
        if mapping_name is None:
            raise ConfigurationError("Variable %s has no grid_mapping attribute" % var_name)
        attrs = ds[mapping_name].attrs

        x_name, y_name = var.dims[-1], var.dims[-2]
        for dim in var.dims:
            if dim not in ds.coords:
                continue
            std = ds[dim].attrs.get('standard_name')
            axis = ds[dim].attrs.get('axis')
            if std == 'projection_x_coordinate' or axis == 'X':
                x_name = dim
            elif std == 'projection_y_coordinate' or axis == 'Y':
                y_name = dim
        x = ds[x_name]
        y = ds[y_name]
        return cls(attrs, x.values, y.values, x.attrs.get('units'), y.attrs.get('units'))

    def describe(self):
        return 'grid mapped'

    def _map_to_earth(self, x, y):
        lon, lat = self._to_geo.transform(np.multiply(x, self.map_scale),
                                          np.multiply(y, self.map_scale))
        lat = np.where(np.isfinite(lat), lat, np.nan)
        lon = np.where(np.isfinite(lon), lon, np.nan)
        if np.ndim(lat) == 0:
            return float(lat), float(lon)
        return lat, lon

    def _earth_to_map(self, lat, lon):
        x, y = self._to_map.transform(lon, lat)
        x = np.where(np.isfinite(x), np.divide(x, self.map_scale), np.nan)
        y = np.where(np.isfinite(y), np.divide(y, self.map_scale), np.nan)
        if np.ndim(x) == 0:
            return float(x), float(y)
        return x, y

    def _to_earth(self, data_loc):
        x_scale, x_offset = self.x_transform
        y_scale, y_offset = self.y_transform
        return self._map_to_earth(data_loc.col*x_scale + x_offset,
                                  data_loc.row*y_scale + y_offset)

    def _to_data(self, earth_loc):
        x, y = self._earth_to_map(earth_loc.lat, earth_loc.lon)
        x_scale, x_offset = self.x_transform
        y_scale, y_offset = self.y_transform
        return (y - y_offset)/y_scale, (x - x_offset)/x_scale

    def to_earth_arrays(self, rows, cols):
        rows, cols = np.broadcast_arrays(np.asarray(rows, dtype=float),
                                         np.asarray(cols, dtype=float))
        x_scale, x_offset = self.x_transform
        y_scale, y_offset = self.y_transform
        lat, lon = self._map_to_earth(cols*x_scale + x_offset, rows*y_scale + y_offset)
        return np.asarray(lat, dtype=float), lon_range(np.asarray(lon, dtype=float))

    def to_data_arrays(self, lats, lons):
        lats, lons = np.broadcast_arrays(np.asarray(lats, dtype=float),
                                         np.asarray(lons, dtype=float))
        x, y = self._earth_to_map(lats, lons)
        x_scale, x_offset = self.x_transform
        y_scale, y_offset = self.y_transform
        rows = (np.asarray(y, dtype=float) - y_offset)/y_scale
        cols = (np.asarray(x, dtype=float) - x_offset)/x_scale
        return rows, cols

    def __eq__(self, other):
        if not isinstance(other, GridMappedProjection):
            return NotImplemented
        return (self.crs == other.crs
                and self.datum == other.datum
                and self.dims == other.dims
                and np.allclose(self.x_transform, other.x_transform)
                and np.allclose(self.y_transform, other.y_transform))

    __hash__ = None

    def __repr__(self):
        return 'GridMappedProjection(%s, dims=%r)' % (
            self.attrs.get('grid_mapping_name'), self.dims)
