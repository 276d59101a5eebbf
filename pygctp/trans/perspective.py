"""Sensor scan model for an imager viewing the WGS 84 ellipsoid.

Distances are in units of the equatorial radius. The satellite sits at
``sat_vector`` in earth centered, earth fixed (ECEF) coordinates and
scans the earth in two angles. A horizontal scanner sweeps columns
about the satellite z axis and steps rows about y; a vertical scanner
does the reverse. The ``(row, col)`` grid is centered on the sub
satellite point:

    row_angle = row_step*(row - (rows-1)/2)
    col_angle = -col_step*(col - (cols-1)/2)
"""
import math

import numpy as np

from pygctp.coords import EarthLocation
from pygctp.datum import SPHEROIDS, WGS84
from pygctp.exceptions import ConfigurationError
from pygctp.logging_config import get_logger
from pygctp.trans.boundary import BoundaryHandler
from pygctp.trans.transform import EarthTransform

logger = get_logger(__name__)

REM = SPHEROIDS[WGS84].semi_major
RPM = SPHEROIDS[WGS84].semi_minor
RE = 1.0
RE2 = RE*RE
RP = RPM/REM
RP2 = RP*RP
RE_O_RP_2 = (REM/RPM)**2

XHAT = np.array([1.0, 0.0, 0.0])
YHAT = np.array([0.0, 1.0, 0.0])
ZHAT = np.array([0.0, 0.0, 1.0])

# Ellipsoid as the quadric p.A.p + ELL_C = 0.
ELL_A = np.diag([1.0, 1.0, RE_O_RP_2])
ELL_C = -1.0

SENSOR_TYPE = 'geostationary'
SENSOR_CODE = 0

BOUNDARY_POINTS = 720
GD_MAX_ITERATIONS = 50


def gd_to_gc_lat(phi_gd, height):
    """Geocentric latitude of a geodetic latitude at a height, radians."""
    beta = height*RP*math.sqrt(RE_O_RP_2*math.cos(phi_gd)**2 + math.sin(phi_gd)**2)
    return math.atan(((RP2 + beta)/(RE2 + beta))*math.tan(phi_gd))


def gc_to_gd_lat(phi_gc, height):
    """Geodetic latitude of a geocentric latitude at a height, radians.

    Iterated to 1e-10 since the height term depends on the result, for
    at most GD_MAX_ITERATIONS passes. The last estimate is returned at the
    cap, NaN for a NaN input.
    """
    tan_phi_gc = math.tan(phi_gc)
    phi_gd = phi_gc
    for i in range(GD_MAX_ITERATIONS):
        beta = height*RP*math.sqrt(RE_O_RP_2*math.cos(phi_gd)**2 + math.sin(phi_gd)**2)
        last = phi_gd
        phi_gd = math.atan(((RE2 + beta)/(RP2 + beta))*tan_phi_gc)
        if abs(last - phi_gd) <= 1e-10:
            break
    return phi_gd


def gd_to_ecef(lat, lon, height=0.0):
    """ECEF vector of a geodetic location in degrees."""
    theta = math.radians(lon)
    phi = gd_to_gc_lat(math.radians(lat), height)
    direction = np.array([math.cos(theta)*math.cos(phi),
                          math.sin(theta)*math.cos(phi),
                          math.sin(phi)])
    alpha = direction @ ELL_A @ direction
    t = math.sqrt(-ELL_C/alpha)
    return direction*(t + height)


def gc_to_ecef(lat, lon, radius):
    """ECEF vector of a geocentric location in degrees at a radius."""
    theta = math.radians(lon)
    phi = math.radians(lat)
    return radius*np.array([math.cos(theta)*math.cos(phi),
                            math.sin(theta)*math.cos(phi),
                            math.sin(phi)])


def ecef_to_gd(vector, height=0.0):
    """Geodetic ``(lat, lon)`` in degrees of an ECEF vector."""
    phi_gc = math.asin(vector[2]/np.linalg.norm(vector))
    lat = math.degrees(gc_to_gd_lat(phi_gc, height))
    lon = math.degrees(math.atan2(vector[1], vector[0]))
    return lat, lon


def qsolve(a, b, c):
    """Roots of ``a*t**2 + b*t + c``, NaN when there are none.

    Uses the form that avoids cancellation between ``-b`` and the square
    root.
    """
    disc = b*b - 4*a*c
    if disc < 0:
        return math.nan, math.nan
    alpha = -b + (-1 if b > 0 else 1)*math.sqrt(disc)
    return alpha/(2*a), (2*c)/alpha


def rotation_matrix(axis, theta):
    """Rotation of the coordinate frame by ``theta`` about axis 0, 1 or 2."""
    s = math.sin(-theta)
    c = math.cos(-theta)
    if axis == 0:
        return np.array([[1, 0, 0], [0, c, s], [0, -s, c]])
    if axis == 1:
        return np.array([[c, 0, -s], [0, 1, 0], [s, 0, c]])
    return np.array([[c, s, 0], [-s, c, 0], [0, 0, 1]])


def _normalize(vector):
    return vector/np.linalg.norm(vector)


class EllipsoidPerspectiveProjection(EarthTransform):
    """Sensor scan transform for a satellite imager.

    Parameters
    ----------
    parameters : sequence of float
        ``[sat_lat, sat_lon, sat_radius, row_step, col_step]`` with an
        optional sixth element, nonzero for a vertical scanner. The
        satellite position is geocentric in degrees, the radius is in km
        from the earth center and the scan steps are in radians.
    dims : sequence of int
        Grid ``(rows, cols)``.

    Raises
    ------
    ConfigurationError
        If the parameters are malformed or the satellite is not above
        the earth's surface.
    """

    sensor_type = SENSOR_TYPE
    sensor_code = SENSOR_CODE

    def __init__(self, parameters, dims):
        super().__init__(dims)
        parameters = [float(p) for p in parameters]
        if len(parameters) not in (5, 6):
            raise ConfigurationError("Expected 5 or 6 sensor parameters, got %d" % len(parameters))
        self.parameters = parameters
        sat_lat, sat_lon, radius, row_step, col_step = parameters[:5]
        if row_step == 0 or col_step == 0:
            raise ConfigurationError("Scan steps must be nonzero")
        self.is_vertical_scanner = len(parameters) == 6 and parameters[5] != 0

        self.sat_vector = gc_to_ecef(sat_lat, sat_lon, radius*1000/REM)
        rows, cols = self.dims
        self.scanner_affine = np.array([
            [row_step, 0.0, -row_step*((rows - 1)/2.0)],
            [0.0, -col_step, col_step*((cols - 1)/2.0)],
            [0.0, 0.0, 1.0],
        ])
        self.scanner_affine_inv = np.linalg.inv(self.scanner_affine)

        # Rows of the inverse rotation are the satellite frame axes in ECEF.
        x_axis = -self.sat_vector
        y_axis = np.cross(ZHAT, x_axis)
        z_axis = np.cross(x_axis, y_axis)
        self.sat_rotation_inv = np.array([_normalize(x_axis), _normalize(y_axis),
                                          _normalize(z_axis)])
        self.sat_rotation = np.linalg.inv(self.sat_rotation_inv)

        self.gamma = ELL_C + self.sat_vector @ ELL_A @ self.sat_vector
        if self.gamma <= 0:
            raise ConfigurationError("Satellite radius %r km is not above the surface" % radius)
        logger.debug('Sensor at (%r, %r), %r km, %s scanner', sat_lat, sat_lon, radius,
                     'vertical' if self.is_vertical_scanner else 'horizontal')
        self.boundary_handler = self._create_boundary_handler()

    def describe(self):
        return 'sensor scan'

    def _to_data(self, earth_loc):
        loc_vector = gd_to_ecef(earth_loc.lat, earth_loc.lon)
        dir_vector = loc_vector - self.sat_vector

        surface_normal = np.array([loc_vector[0]/RE, loc_vector[1]/RE, loc_vector[2]/RP])
        if dir_vector @ surface_normal > 0:
            return math.nan, math.nan

        dir_p = self.sat_rotation_inv @ dir_vector
        mag = np.linalg.norm(dir_p)
        if self.is_vertical_scanner:
            row_angle = -math.atan2(dir_p[2], dir_p[0])
            col_angle = math.asin(dir_p[1]/mag)
        else:
            row_angle = -math.asin(dir_p[2]/mag)
            col_angle = math.atan2(dir_p[1], dir_p[0])

        row, col, _ = self.scanner_affine_inv @ np.array([row_angle, col_angle, 1.0])
        return row, col

    def _to_earth(self, data_loc):
        row_angle, col_angle, _ = self.scanner_affine @ np.array([data_loc.row, data_loc.col, 1.0])
        ry = rotation_matrix(1, row_angle)
        rz = rotation_matrix(2, col_angle)
        scan_rotation = ry @ rz if self.is_vertical_scanner else rz @ ry

        dir_vector = self.sat_rotation @ (scan_rotation @ XHAT)
        alpha = dir_vector @ ELL_A @ dir_vector
        beta = 2*(dir_vector @ ELL_A @ self.sat_vector)
        t1, t2 = qsolve(alpha, beta, self.gamma)
        if math.isnan(t1) or math.isnan(t2):
            return math.nan, math.nan
        return ecef_to_gd(self.sat_vector + dir_vector*min(t1, t2))

    def _intersect(self, p, d_hat):
        product = ELL_A @ d_hat
        alpha = d_hat @ product
        beta = 2*(p @ product)
        gamma = ELL_C + p @ ELL_A @ p
        return qsolve(alpha, beta, gamma)

    def limb_locations(self):
        """Earth locations where the line of sight grazes the ellipsoid.

        Points ``b`` on the limb satisfy ``p.A.b = 1`` for satellite
        position ``p``, so they lie on a plane. The plane is walked in a
        circle about its intersection with the line from the satellite to
        the earth center, and each ray is intersected with the
        ellipsoid.
        """
        p = self.sat_vector
        center = p*(1/(p @ ELL_A @ p))
        nc_hat = _normalize(ELL_A @ p)
        axis = int(np.argmin(np.abs(nc_hat)))
        u_hat = _normalize(np.cross(nc_hat, (XHAT, YHAT, ZHAT)[axis]))
        v_hat = np.cross(nc_hat, u_hat)

        locs = []
        d_theta = 2*math.pi/BOUNDARY_POINTS
        for point in range(BOUNDARY_POINTS + 1):
            theta = d_theta*point
            r_hat = u_hat*math.cos(theta) + v_hat*math.sin(theta)
            t = max(self._intersect(center, r_hat))
            if math.isnan(t):
                raise ConfigurationError("No limb intersection at theta = %r" % theta)
            lat, lon = ecef_to_gd(center + r_hat*t)
            locs.append(EarthLocation(lat, lon, self.datum))
        return locs

    def _is_cut(self, a, b):
        return not (self.to_data(a).is_valid() and self.to_data(b).is_valid())

    def _create_boundary_handler(self):
        return BoundaryHandler(self._is_cut, [self.limb_locations()])

    def __repr__(self):
        return 'EllipsoidPerspectiveProjection(parameters=%r, dims=%r)' % (
            self.parameters, self.dims)
