"""World projections on a sphere: pseudocylindrical and related.

All take a sphere radius, a central meridian and false easting and
northing. The oblated equal-area projection adds an oval shape and a
center latitude.
"""
import math

from pygctp.exceptions import ConvergenceError, ProjectionError
from pygctp.projlib import systems
from pygctp.projlib.base import (ProjectionTransform, center_lat_item, center_lon_item,
                                 central_meridian_item, offset_items, packed, radius_item)
from pygctp.projlib.gctpmath import EPSLN, HALF_PI, PI, R2D, adjust_lon, asinz

SQRT2 = 1.4142135623731
MOLLWEIDE_X = 0.900316316158


def mollweide_theta(lat, code=241, where='Mollweide-forward'):
    """Auxiliary Mollweide angle for a latitude.

    Solves ``2t + sin(2t) = pi sin(lat)`` by Newton-Raphson and returns
    ``t``. The poles are a double root and are returned directly.
    """
    if HALF_PI - abs(lat) < EPSLN:
        return math.copysign(HALF_PI, lat)
    theta = lat
    con = PI*math.sin(lat)
    i = 0
    while True:
        delta_theta = -(theta + math.sin(theta) - con)/(1.0 + math.cos(theta))
        theta += delta_theta
        if abs(delta_theta) < EPSLN:
            break
        if i >= 50:
            raise ConvergenceError(code, "Iteration failed to converge", where)
        i += 1
    return theta/2.0


class _WorldProjection(ProjectionTransform):
    """Sphere with a central meridian, the common setup of this module."""

    def __init__(self, radius, center_lon, false_east=0.0, false_north=0.0):
        super().__init__(radius, radius, false_east, false_north)
        self.R = radius
        self.lon_center = center_lon
        self._set_parameter_slots({0: radius, 4: packed(center_lon),
                                   6: false_east, 7: false_north})

    def describe_parameters(self):
        return (radius_item(self.R) + central_meridian_item(self.lon_center)
                + offset_items(self.false_east, self.false_north))


class Sinusoidal(_WorldProjection):
    system = systems.SNSOID
    title = 'SINUSOIDAL'

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self.lon_center)
        x = self.R*delta_lon*math.cos(lat) + self.false_east
        y = self.R*lat + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        lat = y/self.R
        if abs(lat) > HALF_PI:
            raise ProjectionError(164, "Input data error", "sinusoidal-inverse")
        if abs(abs(lat) - HALF_PI) > EPSLN:
            return lat, adjust_lon(self.lon_center + x/(self.R*math.cos(lat)))
        return lat, self.lon_center


# Robinson table at 5 degree intervals from -5 to 90 degrees latitude:
# parallel distance from the equator and parallel length.
_ROBINSON_PR = (0.0, -0.062, 0.0, 0.062, 0.124, 0.186, 0.248, 0.31, 0.372, 0.434, 0.4958,
                0.5571, 0.6176, 0.6769, 0.7346, 0.7903, 0.8435, 0.8936, 0.9394, 0.9761, 1.0)
_ROBINSON_XLR = tuple(v*0.9858 for v in (
    0.0, 0.9986, 1.0, 0.9986, 0.9954, 0.99, 0.9822, 0.973, 0.96, 0.9427, 0.9216,
    0.8962, 0.8679, 0.835, 0.7986, 0.7597, 0.7186, 0.6732, 0.6213, 0.5722, 0.5322))


def _stirling(table, ip1, p2):
    """Stirling interpolation with second differences around ``ip1 + 2``."""
    return (table[ip1 + 2] + p2*(table[ip1 + 3] - table[ip1 + 1])/2.0
            + p2*p2*(table[ip1 + 3] - 2.0*table[ip1 + 2] + table[ip1 + 1])/2.0)


class Robinson(_WorldProjection):
    """Robinson projection, interpolated from its defining table."""

    system = systems.ROBIN
    title = 'ROBINSON'

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        p2 = abs(lat/5.0/.01745329252)
        ip1 = int(p2 - EPSLN)
        p2 -= ip1
        x = self.R*_stirling(_ROBINSON_XLR, ip1, p2)*dlon + self.false_east
        y = self.R*_stirling(_ROBINSON_PR, ip1, p2)*PI/2.0
        if lat < 0:
            y = -y
        return x, y + self.false_north

    def _inverse(self, x, y):
        pr = _ROBINSON_PR
        R = self.R
        x -= self.false_east
        y -= self.false_north
        yy = 2.0*y/PI/R
        phid = yy*90.0
        p2 = abs(phid/5.0)
        ip1 = int(p2 - EPSLN)
        if ip1 == 0:
            ip1 = 1

        # Invert the interpolation for a first guess, then refine the
        # latitude until the forward series reproduces y.
        i = 0
        while True:
            u = pr[ip1 + 3] - pr[ip1 + 1]
            v = pr[ip1 + 3] - 2.0*pr[ip1 + 2] + pr[ip1 + 1]
            t = 2.0*(abs(yy) - pr[ip1 + 2])/u
            c = v/u
            p2 = t*(1.0 - c*t*(1.0 - 2.0*c*t))
            if p2 >= 0.0 or ip1 == 1:
                phid = (p2 + ip1)*5.0
                if y < 0:
                    phid = -phid
                while True:
                    p2 = abs(phid/5.0)
                    ip1 = int(p2 - EPSLN)
                    p2 -= ip1
                    y1 = R*_stirling(pr, ip1, p2)*PI/2.0
                    if y < 0:
                        y1 = -y1
                    phid += -180.0*(y1 - y)/PI/R
                    i += 1
                    if i > 75:
                        raise ConvergenceError(234, "Too many iterations in inverse",
                                               "robinv-conv")
                    if abs(y1 - y) <= .00001:
                        break
                break
            ip1 -= 1
            if ip1 < 0:
                raise ConvergenceError(234, "Too many iterations in inverse", "robinv-conv")

        lat = phid*.01745329252
        lon = self.lon_center + x/R/_stirling(_ROBINSON_XLR, ip1, p2)
        return lat, adjust_lon(lon)


class Mollweide(_WorldProjection):
    system = systems.MOLL
    title = 'MOLLWEIDE'

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self.lon_center)
        if HALF_PI - abs(lat) < EPSLN:
            delta_lon = 0.0
        theta = mollweide_theta(lat)
        x = MOLLWEIDE_X*self.R*delta_lon*math.cos(theta) + self.false_east
        y = SQRT2*self.R*math.sin(theta) + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        arg = y/(SQRT2*self.R)
        # Stay off the poles, where cos(theta) is zero.
        if abs(arg) > 0.999999999999:
            arg = math.copysign(0.999999999999, arg)
        theta = math.asin(arg)
        lon = adjust_lon(self.lon_center + (x/(MOLLWEIDE_X*self.R*math.cos(theta))))
        lon = min(max(lon, -PI), PI)
        arg = (2.0*theta + math.sin(2.0*theta))/PI
        if abs(arg) > 1.0:
            arg = math.copysign(1.0, arg)
        return math.asin(arg), lon


class Hammer(_WorldProjection):
    system = systems.HAMMER
    title = 'HAMMER'

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self.lon_center)
        fac = self.R*1.414213562/math.sqrt(1.0 + math.cos(lat)*math.cos(dlon/2.0))
        x = self.false_east + fac*2.0*math.cos(lat)*math.sin(dlon/2.0)
        y = self.false_north + fac*math.sin(lat)
        return x, y

    def _inverse(self, x, y):
        R = self.R
        x -= self.false_east
        y -= self.false_north
        fac = math.sqrt(4.0*R*R - (x*x)/4.0 - y*y)/2.0
        lon = adjust_lon(self.lon_center + 2.0*math.atan2((x*fac), (2.0*R*R - x*x/4 - y*y)))
        lat = asinz(y*fac/R/R)
        return lat, lon


class WagnerIV(_WorldProjection):
    system = systems.WAGIV
    title = 'WAGNER IV'

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self.lon_center)
        theta = lat
        con = 2.9604205062*math.sin(lat)
        i = 0
        while True:
            delta_theta = -(theta + math.sin(theta) - con)/(1.0 + math.cos(theta))
            theta += delta_theta
            if abs(delta_theta) < EPSLN:
                break
            if i >= 30:
                raise ConvergenceError(281, "Iteration failed to converge", "wagneriv-forward")
            i += 1
        theta /= 2.0
        x = 0.86310*self.R*delta_lon*math.cos(theta) + self.false_east
        y = 1.56548*self.R*math.sin(theta) + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        theta = math.asin(y/(1.56548*self.R))
        lon = adjust_lon(self.lon_center + (x/(0.86310*self.R*math.cos(theta))))
        lat = math.asin((2.0*theta + math.sin(2.0*theta))/2.9604205062)
        return lat, lon


class WagnerVII(_WorldProjection):
    system = systems.WAGVII
    title = 'WAGNER VII'

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self.lon_center)
        sin_lon = math.sin(delta_lon/3.0)
        cos_lon = math.cos(delta_lon/3.0)
        s = 0.90631*math.sin(lat)
        c0 = math.sqrt(1 - s*s)
        c1 = math.sqrt(2.0/(1.0 + c0*cos_lon))
        x = 2.66723*self.R*c0*c1*sin_lon + self.false_east
        y = 1.24104*self.R*s*c1 + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        t1 = x/2.66723
        t2 = y/1.24104
        p = math.sqrt(t1*t1 + t2*t2)
        c = 2.0*asinz(p/(2.0*self.R))
        lat = asinz(y*math.sin(c)/(1.24104*0.90631*p))
        lon = adjust_lon(self.lon_center + 3.0*math.atan2(x*math.tan(c), 2.66723*p))
        return lat, lon


class VanDerGrinten(_WorldProjection):
    """Van der Grinten projection.

    Parameters
    ----------
    radius : float
    center_lon : float
    center_lat : float, default=0
        Latitude of origin. Recorded in the parameters but not used by
        the equations.
    false_east, false_north : float, default=0
    """

    system = systems.VGRINT
    title = 'VAN DER GRINTEN'

    def __init__(self, radius, center_lon, center_lat=0.0, false_east=0.0, false_north=0.0):
        super().__init__(radius, center_lon, false_east, false_north)
        self.lat_origin = center_lat
        self.parameters[5] = packed(center_lat)

    def _forward(self, lat, lon):
        R = self.R
        dlon = adjust_lon(lon - self.lon_center)
        if abs(lat) <= EPSLN:
            return self.false_east + R*dlon, self.false_north
        theta = asinz(2.0*abs(lat/PI))
        if abs(dlon) <= EPSLN or abs(abs(lat) - HALF_PI) <= EPSLN:
            y = PI*R*math.tan(.5*theta)
            if lat < 0:
                y = -y
            return self.false_east, self.false_north + y
        al = .5*abs((PI/dlon) - (dlon/PI))
        asq = al*al
        sinth = math.sin(theta)
        costh = math.cos(theta)
        g = costh/(sinth + costh - 1.0)
        gsq = g*g
        m = g*(2.0/sinth - 1.0)
        msq = m*m
        con = PI*R*(al*(g - msq) + math.sqrt(asq*(g - msq)*(g - msq) - (msq + asq)
                                             * (gsq - msq)))/(msq + asq)
        if dlon < 0:
            con = -con
        x = self.false_east + con
        con = abs(con/(PI*R))
        y = PI*R*math.sqrt(1.0 - con*con - 2.0*al*con)
        if lat < 0:
            y = -y
        return x, self.false_north + y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        con = PI*self.R
        xx = x/con
        yy = y/con
        xys = xx*xx + yy*yy
        c1 = -abs(yy)*(1.0 + xys)
        c2 = c1 - 2.0*yy*yy + xx*xx
        c3 = -2.0*c1 + 1.0 + 2.0*yy*yy + xys*xys
        d = yy*yy/c3 + (2.0*c2*c2*c2/c3/c3/c3 - 9.0*c1*c2/c3/c3)/27.0
        a1 = (c1 - c2*c2/3.0/c3)/c3
        m1 = 2.0*math.sqrt(-a1/3.0)
        if abs(m1) < EPSLN:
            lat = 0.0
        else:
            con = ((3.0*d)/a1)/m1
            con = min(max(con, -1.0), 1.0)
            th1 = math.acos(con)/3.0
            lat = (-m1*math.cos(th1 + PI/3.0) - c2/3.0/c3)*PI
            if y < 0:
                lat = -lat
        if abs(xx) < EPSLN:
            return lat, self.lon_center
        lon = adjust_lon(self.lon_center + PI*(xys - 1.0 + math.sqrt(1.0 + 2.0*(xx*xx - yy*yy)
                                                                    + xys*xys))/2.0/xx)
        return lat, lon


class OblatedEqualArea(ProjectionTransform):
    """Oblated equal-area projection.

    Parameters
    ----------
    radius : float
    center_lon, center_lat : float
        Center of the projection.
    shape_m, shape_n : float
        Oval shape parameters.
    angle : float
        Oval rotation angle.
    false_east, false_north : float, default=0
    """

    system = systems.OBEQA
    title = 'OBLATED EQUAL-AREA'

    def __init__(self, radius, center_lon, center_lat, shape_m, shape_n, angle,
                 false_east=0.0, false_north=0.0):
        super().__init__(radius, radius, false_east, false_north)
        self.R = radius
        self.lon_center = center_lon
        self.lat_origin = center_lat
        self.m = shape_m
        self.n = shape_n
        self.theta = angle
        self.sin_lat_o = math.sin(center_lat)
        self.cos_lat_o = math.cos(center_lat)
        self._set_parameter_slots({0: radius, 2: shape_m, 3: shape_n, 4: packed(center_lon),
                                   5: packed(center_lat), 6: false_east, 7: false_north,
                                   8: packed(angle)})

    def _forward(self, lat, lon):
        m, n = self.m, self.n
        delta_lon = lon - self.lon_center
        sin_lat, cos_lat = math.sin(lat), math.cos(lat)
        sin_delta_lon, cos_delta_lon = math.sin(delta_lon), math.cos(delta_lon)
        z = math.acos(self.sin_lat_o*sin_lat + self.cos_lat_o*cos_lat*cos_delta_lon)
        az = math.atan2(cos_lat*sin_delta_lon,
                        self.cos_lat_o*sin_lat - self.sin_lat_o*cos_lat*cos_delta_lon) + self.theta
        temp = 2.0*math.sin(z/2.0)
        x_prime = temp*math.sin(az)
        y_prime = temp*math.cos(az)
        big_m = math.asin(x_prime/2.0)
        temp = y_prime/2.0*math.cos(big_m)/math.cos(2.0*big_m/m)
        big_n = math.asin(temp)
        x = m*self.R*math.sin(2.0*big_m/m)*math.cos(big_n)/math.cos(2.0*big_n/n) + self.false_east
        y = n*self.R*math.sin(2.0*big_n/n) + self.false_north
        return x, y

    def _inverse(self, x, y):
        m, n = self.m, self.n
        x -= self.false_east
        y -= self.false_north
        big_n = (n/2.0)*math.asin(y/(n*self.R))
        temp = x/(m*self.R)*math.cos(2.0*big_n/n)/math.cos(big_n)
        big_m = (m/2.0)*math.asin(temp)
        x_prime = 2.0*math.sin(big_m)
        y_prime = 2.0*math.sin(big_n)*math.cos(2.0*big_m/m)/math.cos(big_m)
        temp = math.sqrt(x_prime*x_prime + y_prime*y_prime)/2.0
        z = 2.0*math.asin(temp)
        diff_angle = math.atan2(x_prime, y_prime) - self.theta
        sin_diff, cos_diff = math.sin(diff_angle), math.cos(diff_angle)
        sin_z, cos_z = math.sin(z), math.cos(z)
        lat = math.asin(self.sin_lat_o*cos_z + self.cos_lat_o*sin_z*cos_diff)
        lon = adjust_lon(self.lon_center + math.atan2(
            (sin_z*sin_diff), (self.cos_lat_o*cos_z - self.sin_lat_o*sin_z*cos_diff)))
        return lat, lon

    def describe_parameters(self):
        return (radius_item(self.R) + center_lon_item(self.lon_center)
                + center_lat_item(self.lat_origin)
                + [('Parameter m', self.m, ''), ('Parameter n', self.n, ''),
                   ('Theta', self.theta*R2D, 'degrees')]
                + offset_items(self.false_east, self.false_north))
