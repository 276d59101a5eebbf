"""Modified stereographic conformal projection for Alaska.

An oblique stereographic projection on the Clarke 1866 ellipsoid,
centered at 64N 152W, followed by a sixth order complex polynomial that
keeps the scale error low over the whole state. The polynomial and its
derivative are summed with Knuth's algorithm for complex terms.
"""
import math

from pygctp.exceptions import ConvergenceError
from pygctp.projlib import systems
from pygctp.projlib.base import (ProjectionTransform, axes_items, center_lat_item,
                                 center_lon_item, offset_items)
from pygctp.projlib.gctpmath import D2R, EPSLN, HALF_PI, adjust_lon, asinz

# Real and imaginary polynomial coefficients, indexed 1..6.
ACOEF = (0.0, 0.9945303, 0.0052083, 0.0072721, -0.0151089, 0.0642675, 0.3582802)
BCOEF = (0.0, 0.0, -.0027404, 0.0048181, -0.1932526, -0.1381226, -0.2884586)
N = 6

# Eccentricity squared the coefficients were fitted for.
ALASKA_ES = .006768657997291094

MAX_ITER = 20


def _knuth_sum(xp, yp):
    """Polynomial value at ``xp + i*yp`` by Knuth's complex summation.

    Returns the real and imaginary parts of the value, and of the
    derivative terms ``(cr, ci, dr)`` used by the Newton inversion.
    """
    r = xp + xp
    s = xp*xp + yp*yp
    ar, ai = ACOEF[N], BCOEF[N]
    br, bi = ACOEF[N - 1], BCOEF[N - 1]
    cr, ci = N*ar, N*ai
    dr, di = (N - 1)*br, (N - 1)*bi
    arn = ain = 0.0
    for j in range(2, N + 1):
        arn = br + r*ar
        ain = bi + r*ai
        if j < N:
            br = ACOEF[N - j] - s*ar
            bi = BCOEF[N - j] - s*ai
            ar, ai = arn, ain
            crn = dr + r*cr
            cin = di + r*ci
            dr = (N - j)*ACOEF[N - j] - s*cr
            di = (N - j)*BCOEF[N - j] - s*ci
            cr, ci = crn, cin
    br = -s*ar
    bi = -s*ai
    ar, ai = arn, ain
    fr = xp*ar - yp*ai + br
    fi = yp*ar + xp*ai + bi
    return fr, fi, cr, ci, dr


class AlaskaConformal(ProjectionTransform):
    """Alaska conformal projection.

    Parameters
    ----------
    r_major, r_minor : float
        Ellipsoid axes in meters. Only the major axis scales the result;
        the eccentricity is fixed.
    false_east, false_north : float, default=0
    """

    system = systems.ALASKA
    title = 'ALASKA CONFORMAL'

    def __init__(self, r_major, r_minor, false_east=0.0, false_north=0.0):
        super().__init__(r_major, r_minor, false_east, false_north)
        self.a = r_major
        self.lon_center = -152.0*D2R
        self.lat_center = 64.0*D2R
        self.e = math.sqrt(ALASKA_ES)
        chi = self._conformal_lat(self.lat_center)
        self.sin_p26 = math.sin(chi)
        self.cos_p26 = math.cos(chi)
        self._set_parameter_slots({0: r_major, 1: r_minor, 6: false_east, 7: false_north})

    def _conformal_lat(self, lat):
        esphi = self.e*math.sin(lat)
        return (2.0*math.atan(math.tan((HALF_PI + lat)/2.0)
                              * math.pow(((1.0 - esphi)/(1.0 + esphi)), (self.e/2.0))) - HALF_PI)

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        sinlon, coslon = math.sin(dlon), math.cos(dlon)
        chi = self._conformal_lat(lat)
        sinphi, cosphi = math.sin(chi), math.cos(chi)
        g = self.sin_p26*sinphi + self.cos_p26*cosphi*coslon
        s = 2.0/(1.0 + g)
        xp = s*cosphi*sinlon
        yp = s*(self.cos_p26*sinphi - self.sin_p26*cosphi*coslon)
        fr, fi, _, _, _ = _knuth_sum(xp, yp)
        return fr*self.a + self.false_east, fi*self.a + self.false_north

    def _inverse(self, x, y):
        x = (x - self.false_east)/self.a
        y = (y - self.false_north)/self.a

        # Newton-Raphson back to the oblique stereographic plane.
        xp, yp = x, y
        nn = 0
        while True:
            fr, fi, cr, ci, dr = _knuth_sum(xp, yp)
            fxyr = fr - x
            fxyi = fi - y
            fpxyr = xp*cr - yp*ci + dr
            # As published: the last term is ci rather than di.
            fpxyi = yp*cr + xp*ci + ci
            den = fpxyr*fpxyr + fpxyi*fpxyi
            dxp = -(fxyr*fpxyr + fxyi*fpxyi)/den
            dyp = -(fxyi*fpxyr - fxyr*fpxyi)/den
            xp += dxp
            yp += dyp
            nn += 1
            if nn > MAX_ITER:
                raise ConvergenceError(235, "Too many iterations in inverse", "alcon-inv")
            if abs(dxp) + abs(dyp) <= EPSLN:
                break

        rh = math.sqrt(xp*xp + yp*yp)
        z = 2.0*math.atan(rh/2.0)
        sinz, cosz = math.sin(z), math.cos(z)
        if abs(rh) <= EPSLN:
            return self.lat_center, self.lon_center
        chi = asinz(cosz*self.sin_p26 + (yp*sinz*self.cos_p26)/rh)
        phi = chi
        nn = 0
        while True:
            esphi = self.e*math.sin(phi)
            dphi = (2.0*math.atan(math.tan((HALF_PI + chi)/2.0)
                                  * math.pow(((1.0 + esphi)/(1.0 - esphi)), (self.e/2.0)))
                    - HALF_PI - phi)
            phi += dphi
            nn += 1
            if nn > MAX_ITER:
                raise ConvergenceError(236, "Too many iterations in inverse", "alcon-inv")
            if abs(dphi) <= EPSLN:
                break

        lon = adjust_lon(self.lon_center + math.atan2(
            (xp*sinz), (rh*self.cos_p26*cosz - yp*self.sin_p26*sinz)))
        return phi, lon

    def describe_parameters(self):
        return (axes_items(self.r_major, self.r_minor) + center_lon_item(self.lon_center)
                + center_lat_item(self.lat_center) + offset_items(self.false_east, self.false_north))
