"""Azimuthal projections.

The stereographic, Lambert equal-area, equidistant, gnomonic,
orthographic and vertical perspective projections are sphere only and
share the center point setup. Polar stereographic accepts an ellipsoid.
"""
import math

from pygctp.coords import EarthLocation
from pygctp.exceptions import ProjectionError
from pygctp.projlib import systems
from pygctp.projlib.base import (ProjectionTransform, axes_items, center_lat_item,
                                 center_lon_item, offset_items, packed, radius_item)
from pygctp.projlib.gctpmath import (EPSLN, HALF_PI, R2D, adjust_lon, asinz, e4fn, msfnz,
                                     phi2z, tsfnz)
from pygctp.trans.boundary import BoundaryHandler

# Points around the edge of the visible disk.
BOUNDARY_POINTS = 720


def _center_lon(lon_center, lat_center, sinp, cosp, x, y, rh, sinz, cosz, lat):
    """Longitude for the common tail of the spherical azimuthal inverses."""
    con = abs(lat_center) - HALF_PI
    if abs(con) <= EPSLN:
        if lat_center >= 0.0:
            return adjust_lon(lon_center + math.atan2(x, -y))
        return adjust_lon(lon_center - math.atan2(-x, y))
    con = cosz - sinp*math.sin(lat)
    if abs(con) < EPSLN and abs(x) < EPSLN:
        return lon_center
    return adjust_lon(lon_center + math.atan2(x*sinz*cosp, con*rh))


class _SphericalAzimuthal(ProjectionTransform):
    """Sphere based azimuthal projection centered on (center_lat, center_lon)."""

    def __init__(self, radius, center_lon, center_lat, false_east=0.0, false_north=0.0):
        super().__init__(radius, radius, false_east, false_north)
        self.R = radius
        self.lon_center = center_lon
        self.lat_center = center_lat
        self.sin_p = math.sin(center_lat)
        self.cos_p = math.cos(center_lat)
        self._set_parameter_slots({0: radius, 4: packed(center_lon), 5: packed(center_lat),
                                   6: false_east, 7: false_north})

    def _boundary_ring(self, r_max):
        """Earth locations around a circle of map radius ``r_max``."""
        locs = []
        dtheta = 2*math.pi/BOUNDARY_POINTS
        for point in range(BOUNDARY_POINTS + 1):
            theta = dtheta*point
            x = r_max*math.cos(theta) + self.false_east
            y = r_max*math.sin(theta) + self.false_north
            lat, lon = self._inverse(x, y)
            locs.append(EarthLocation(lat*R2D, lon*R2D, self.datum))
        return locs

    def _disk_boundary_handler(self, r_max, is_valid):
        def cut_test(a, b):
            return not is_valid(a) or not is_valid(b)
        return BoundaryHandler(cut_test, [self._boundary_ring(r_max)])

    def describe_parameters(self):
        return (radius_item(self.R) + center_lon_item(self.lon_center)
                + center_lat_item(self.lat_center)
                + offset_items(self.false_east, self.false_north))


class Stereographic(_SphericalAzimuthal):
    """Stereographic projection on a sphere."""

    system = systems.STEREO
    title = 'STEREOGRAPHIC'

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        sinphi, cosphi = math.sin(lat), math.cos(lat)
        coslon = math.cos(dlon)
        g = self.sin_p*sinphi + self.cos_p*cosphi*coslon
        if abs(g + 1.0) <= EPSLN:
            raise ProjectionError(103, "Point projects into infinity", "ster-for")
        ksp = 2.0/(1.0 + g)
        x = self.false_east + self.R*ksp*cosphi*math.sin(dlon)
        y = self.false_north + self.R*ksp*(self.cos_p*sinphi - self.sin_p*cosphi*coslon)
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        rh = math.sqrt(x*x + y*y)
        z = 2.0*math.atan(rh/(2.0*self.R))
        sinz, cosz = math.sin(z), math.cos(z)
        if abs(rh) <= EPSLN:
            return self.lat_center, self.lon_center
        lat = math.asin(cosz*self.sin_p + (y*sinz*self.cos_p)/rh)
        lon = _center_lon(self.lon_center, self.lat_center, self.sin_p, self.cos_p,
                          x, y, rh, sinz, cosz, lat)
        return lat, lon


class LambertAzimuthalEqualArea(_SphericalAzimuthal):
    """Lambert azimuthal equal-area projection on a sphere."""

    system = systems.LAMAZ
    title = 'LAMBERT AZIMUTHAL EQUAL-AREA'

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self.lon_center)
        sin_lat, cos_lat = math.sin(lat), math.cos(lat)
        sin_delta_lon, cos_delta_lon = math.sin(delta_lon), math.cos(delta_lon)
        g = self.sin_p*sin_lat + self.cos_p*cos_lat*cos_delta_lon
        if g == -1.0:
            raise ProjectionError(113, "Point projects to a circle of radius = %f" % (2.0*self.R),
                                  "lamaz-forward")
        ksp = self.R*math.sqrt(2.0/(1.0 + g))
        x = ksp*cos_lat*sin_delta_lon + self.false_east
        y = ksp*(self.cos_p*sin_lat - self.sin_p*cos_lat*cos_delta_lon) + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        rh = math.sqrt(x*x + y*y)
        temp = rh/(2.0*self.R)
        if temp > 1:
            raise ProjectionError(115, "Input data error", "lamaz-inverse")
        z = 2.0*asinz(temp)
        sin_z, cos_z = math.sin(z), math.cos(z)
        lon = self.lon_center
        if abs(rh) <= EPSLN:
            return self.lat_center, lon
        lat = asinz(self.sin_p*cos_z + self.cos_p*sin_z*y/rh)
        temp = abs(self.lat_center) - HALF_PI
        if abs(temp) > EPSLN:
            temp = cos_z - self.sin_p*math.sin(lat)
            if temp != 0.0:
                lon = adjust_lon(self.lon_center + math.atan2(x*sin_z*self.cos_p, temp*rh))
        elif self.lat_center < 0.0:
            lon = adjust_lon(self.lon_center - math.atan2(-x, y))
        else:
            lon = adjust_lon(self.lon_center + math.atan2(x, -y))
        return lat, lon


class AzimuthalEquidistant(_SphericalAzimuthal):
    """Azimuthal equidistant projection on a sphere."""

    system = systems.AZMEQD
    title = 'AZIMUTHAL EQUIDISTANT'

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        sinphi, cosphi = math.sin(lat), math.cos(lat)
        coslon = math.cos(dlon)
        g = self.sin_p*sinphi + self.cos_p*cosphi*coslon
        if abs(abs(g) - 1.0) < EPSLN:
            ksp = 1.0
            if g < 0.0:
                raise ProjectionError(
                    123, "Point projects into a circle of radius = %12.2f" % (2.0*HALF_PI*self.R),
                    "azim-for")
        else:
            z = math.acos(g)
            ksp = z/math.sin(z)
        x = self.false_east + self.R*ksp*cosphi*math.sin(dlon)
        y = self.false_north + self.R*ksp*(self.cos_p*sinphi - self.sin_p*cosphi*coslon)
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        rh = math.sqrt(x*x + y*y)
        if rh > (2.0*HALF_PI*self.R):
            raise ProjectionError(125, "Input data error", "azim-inv")
        z = rh/self.R
        sinz, cosz = math.sin(z), math.cos(z)
        if abs(rh) <= EPSLN:
            return self.lat_center, self.lon_center
        lat = asinz(cosz*self.sin_p + (y*sinz*self.cos_p)/rh)
        lon = _center_lon(self.lon_center, self.lat_center, self.sin_p, self.cos_p,
                          x, y, rh, sinz, cosz, lat)
        return lat, lon


class Gnomonic(_SphericalAzimuthal):
    """Gnomonic projection on a sphere. Only the near hemisphere projects."""

    system = systems.GNOMON
    title = 'GNOMONIC'

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        sinphi, cosphi = math.sin(lat), math.cos(lat)
        coslon = math.cos(dlon)
        g = self.sin_p*sinphi + self.cos_p*cosphi*coslon
        if g <= 0.0:
            raise ProjectionError(133, "Point projects into infinity", "gnomfor-conv")
        ksp = 1.0/g
        x = self.false_east + self.R*ksp*cosphi*math.sin(dlon)
        y = self.false_north + self.R*ksp*(self.cos_p*sinphi - self.sin_p*cosphi*coslon)
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        rh = math.sqrt(x*x + y*y)
        z = math.atan(rh/self.R)
        sinz, cosz = math.sin(z), math.cos(z)
        if abs(rh) <= EPSLN:
            return self.lat_center, self.lon_center
        lat = asinz(cosz*self.sin_p + (y*sinz*self.cos_p)/rh)
        lon = _center_lon(self.lon_center, self.lat_center, self.sin_p, self.cos_p,
                          x, y, rh, sinz, cosz, lat)
        return lat, lon


class Orthographic(_SphericalAzimuthal):
    """Orthographic projection: the globe seen from infinitely far away."""

    system = systems.ORTHO
    title = 'ORTHOGRAPHIC'

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        sinphi, cosphi = math.sin(lat), math.cos(lat)
        coslon = math.cos(dlon)
        g = self.sin_p*sinphi + self.cos_p*cosphi*coslon
        if g > 0 or abs(g) <= EPSLN:
            x = self.false_east + self.R*cosphi*math.sin(dlon)
            y = self.false_north + self.R*(self.cos_p*sinphi - self.sin_p*cosphi*coslon)
            return x, y
        raise ProjectionError(143, "Point cannot be projected", "orth-for")

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        rh = math.sqrt(x*x + y*y)
        if rh > self.R + .0000001:
            raise ProjectionError(145, "Input data error", "orth-inv")
        z = asinz(rh/self.R)
        sinz, cosz = math.sin(z), math.cos(z)
        if abs(rh) <= EPSLN:
            return self.lat_center, self.lon_center
        lat = asinz(cosz*self.sin_p + (y*sinz*self.cos_p)/rh)
        lon = _center_lon(self.lon_center, self.lat_center, self.sin_p, self.cos_p,
                          x, y, rh, sinz, cosz, lat)
        return lat, lon

    def create_boundary_handler(self, is_valid):
        r_max = (self.R + .0000001)*(1.0 - EPSLN)
        return self._disk_boundary_handler(r_max, is_valid)


class GeneralVerticalNearsidePerspective(_SphericalAzimuthal):
    """Perspective view of a sphere from height ``h`` meters above the center."""

    system = systems.GVNSP
    title = 'GENERAL VERTICAL NEAR-SIDE PERSPECTIVE'

    def __init__(self, radius, h, center_lon, center_lat, false_east=0.0, false_north=0.0):
        super().__init__(radius, center_lon, center_lat, false_east, false_north)
        self.h = h
        self.p = 1.0 + h/radius
        self.parameters[2] = h

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        sinphi, cosphi = math.sin(lat), math.cos(lat)
        coslon = math.cos(dlon)
        g = self.sin_p*sinphi + self.cos_p*cosphi*coslon
        if g < (1.0/self.p):
            raise ProjectionError(153, "Point cannot be projected", "gvnsp-for")
        ksp = (self.p - 1.0)/(self.p - g)
        x = self.false_east + self.R*ksp*cosphi*math.sin(dlon)
        y = self.false_north + self.R*ksp*(self.cos_p*sinphi - self.sin_p*cosphi*coslon)
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        rh = math.sqrt(x*x + y*y)
        r = rh/self.R
        con = self.p - 1.0
        com = self.p + 1.0
        if r > math.sqrt(con/com):
            raise ProjectionError(155, "Input data error", "gvnsp-inv")
        if abs(rh) <= EPSLN:
            return self.lat_center, self.lon_center
        sinz = (self.p - math.sqrt(1.0 - (r*r*com)/con))/(con/r + r/con)
        z = asinz(sinz)
        sinz, cosz = math.sin(z), math.cos(z)
        lat = asinz(cosz*self.sin_p + (y*sinz*self.cos_p)/rh)
        lon = _center_lon(self.lon_center, self.lat_center, self.sin_p, self.cos_p,
                          x, y, rh, sinz, cosz, lat)
        return lat, lon

    def create_boundary_handler(self, is_valid):
        r_max = self.R*math.sqrt((self.p - 1.0)/(self.p + 1.0))*(1.0 - EPSLN)
        return self._disk_boundary_handler(r_max, is_valid)

    def describe_parameters(self):
        return (radius_item(self.R) + [('Height of Point Above Surface of Sphere', self.h, 'meters')]
                + center_lon_item(self.lon_center) + center_lat_item(self.lat_center)
                + offset_items(self.false_east, self.false_north))


class PolarStereographic(ProjectionTransform):
    """Polar stereographic projection on an ellipsoid.

    Parameters
    ----------
    r_major, r_minor : float
        Ellipsoid axes in meters.
    c_lon : float
        Longitude directed straight down below the pole.
    c_lat : float
        Latitude of true scale. Its sign selects the north or south pole.
    false_east, false_north : float, default=0
    """

    system = systems.PS
    title = 'POLAR STEREOGRAPHIC'

    def __init__(self, r_major, r_minor, c_lon, c_lat, false_east=0.0, false_north=0.0):
        super().__init__(r_major, r_minor, false_east, false_north)
        self.a = r_major
        temp = r_minor/r_major
        self.es = 1.0 - temp*temp
        self.e = math.sqrt(self.es)
        self.e4 = e4fn(self.e)
        self.center_lon = c_lon
        self.center_lat = c_lat
        self.fac = -1.0 if c_lat < 0 else 1.0
        self.ind = 0
        if abs(abs(c_lat) - HALF_PI) > EPSLN:
            self.ind = 1
            con1 = self.fac*c_lat
            sinphi, cosphi = math.sin(con1), math.cos(con1)
            self.mcs = msfnz(self.e, sinphi, cosphi)
            self.tcs = tsfnz(self.e, con1, sinphi)
        self._set_parameter_slots({0: r_major, 1: r_minor, 4: packed(c_lon), 5: packed(c_lat),
                                   6: false_east, 7: false_north})

    def _forward(self, lat, lon):
        con1 = self.fac*adjust_lon(lon - self.center_lon)
        con2 = self.fac*lat
        ts = tsfnz(self.e, con2, math.sin(con2))
        if self.ind != 0:
            rh = self.a*self.mcs*ts/self.tcs
        else:
            rh = 2.0*self.a*ts/self.e4
        x = self.fac*rh*math.sin(con1) + self.false_east
        y = -self.fac*rh*math.cos(con1) + self.false_north
        return x, y

    def _inverse(self, x, y):
        x = (x - self.false_east)*self.fac
        y = (y - self.false_north)*self.fac
        rh = math.sqrt(x*x + y*y)
        if self.ind != 0:
            ts = rh*self.tcs/(self.a*self.mcs)
        else:
            ts = rh*self.e4/(self.a*2.0)
        lat = self.fac*phi2z(self.e, ts)
        if rh == 0:
            lon = self.fac*self.center_lon
        else:
            lon = adjust_lon(self.fac*math.atan2(x, -y) + self.center_lon)
        return lat, lon

    def describe_parameters(self):
        return (axes_items(self.r_major, self.r_minor)
                + [('Longitude of Pole', self.center_lon*R2D, 'degrees'),
                   ('Latitude of True Scale', self.center_lat*R2D, 'degrees')]
                + offset_items(self.false_east, self.false_north))
