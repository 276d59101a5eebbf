"""Conic projections: Albers, Lambert conformal, equidistant and polyconic.

All four accept an ellipsoid. Angles passed to the constructors are in
radians.
"""
import math

from pygctp.exceptions import ConfigurationError, ProjectionError
from pygctp.projlib import systems
from pygctp.projlib.base import (ProjectionTransform, axes_items, central_meridian_item,
                                 offset_items, origin_item, packed, parallel_item,
                                 parallels_items)
from pygctp.projlib.gctpmath import (EPSLN, HALF_PI, PI, adjust_lon, asinz, e0fn, e1fn, e2fn,
                                     e3fn, mlfn, msfnz, phi1z, phi2z, phi3z, phi4z, qsfnz,
                                     tsfnz)


def _eccentricity(r_major, r_minor):
    temp = r_minor/r_major
    es = 1.0 - temp*temp
    return es, math.sqrt(es)


class AlbersConicalEqualArea(ProjectionTransform):
    """Albers conical equal-area projection.

    Parameters
    ----------
    r_major, r_minor : float
        Ellipsoid axes in meters.
    lat1, lat2 : float
        Standard parallels.
    lon0 : float
        Central meridian.
    lat0 : float
        Latitude of the projection origin.
    false_east, false_north : float, default=0
    """

    system = systems.ALBERS
    title = 'ALBERS CONICAL EQUAL-AREA'

    def __init__(self, r_major, r_minor, lat1, lat2, lon0, lat0,
                 false_east=0.0, false_north=0.0):
        super().__init__(r_major, r_minor, false_east, false_north)
        if abs(lat1 + lat2) < EPSLN:
            raise ConfigurationError("Equal latitudes for standard parallels on opposite "
                                     "sides of equator")
        self.lat1, self.lat2, self.lat0 = lat1, lat2, lat0
        self.lon_center = lon0
        self.es, self.e3 = _eccentricity(r_major, r_minor)
        self.a = r_major

        sin_po, cos_po = math.sin(lat1), math.cos(lat1)
        con = sin_po
        ms1 = msfnz(self.e3, sin_po, cos_po)
        qs1 = qsfnz(self.e3, sin_po)
        sin_po, cos_po = math.sin(lat2), math.cos(lat2)
        ms2 = msfnz(self.e3, sin_po, cos_po)
        qs2 = qsfnz(self.e3, sin_po)
        qs0 = qsfnz(self.e3, math.sin(lat0))

        if abs(lat1 - lat2) > EPSLN:
            self.ns0 = (ms1*ms1 - ms2*ms2)/(qs2 - qs1)
        else:
            self.ns0 = con
        self.c = ms1*ms1 + self.ns0*qs1
        self.rh = self.a*math.sqrt(self.c - self.ns0*qs0)/self.ns0

        self._set_parameter_slots({0: r_major, 1: r_minor, 2: packed(lat1), 3: packed(lat2),
                                   4: packed(lon0), 5: packed(lat0),
                                   6: false_east, 7: false_north})

    def _forward(self, lat, lon):
        qs = qsfnz(self.e3, math.sin(lat))
        rh1 = self.a*math.sqrt(self.c - self.ns0*qs)/self.ns0
        theta = self.ns0*adjust_lon(lon - self.lon_center)
        x = rh1*math.sin(theta) + self.false_east
        y = self.rh - rh1*math.cos(theta) + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y = self.rh - y + self.false_north
        if self.ns0 >= 0:
            rh1 = math.sqrt(x*x + y*y)
            con = 1.0
        else:
            rh1 = -math.sqrt(x*x + y*y)
            con = -1.0
        theta = 0.0
        if rh1 != 0.0:
            theta = math.atan2(con*x, con*y)
        con = rh1*self.ns0/self.a
        qs = (self.c - con*con)/self.ns0
        if self.e3 >= 1e-10:
            con = 1 - .5*(1.0 - self.es)*math.log((1.0 - self.e3)/(1.0 + self.e3))/self.e3
            if abs(abs(con) - abs(qs)) > .0000000001:
                lat = phi1z(self.e3, qs)
            elif qs >= 0:
                lat = .5*PI
            else:
                lat = -.5*PI
        else:
            lat = phi1z(self.e3, qs)
        lon = adjust_lon(theta/self.ns0 + self.lon_center)
        return lat, lon

    def describe_parameters(self):
        return (axes_items(self.r_major, self.r_minor) + parallels_items(self.lat1, self.lat2)
                + central_meridian_item(self.lon_center) + origin_item(self.lat0)
                + offset_items(self.false_east, self.false_north))


class LambertConformalConic(ProjectionTransform):
    """Lambert conformal conic projection.

    Parameters
    ----------
    r_major, r_minor : float
        Ellipsoid axes in meters.
    lat1, lat2 : float
        Standard parallels.
    c_lon, c_lat : float
        Central meridian and latitude of the projection origin.
    false_east, false_north : float, default=0
    """

    system = systems.LAMCC
    title = 'LAMBERT CONFORMAL CONIC'

    def __init__(self, r_major, r_minor, lat1, lat2, c_lon, c_lat,
                 false_east=0.0, false_north=0.0):
        super().__init__(r_major, r_minor, false_east, false_north)
        if abs(lat1 + lat2) < EPSLN:
            raise ConfigurationError("Equal latitudes for standard parallels on opposite "
                                     "sides of equator")
        self.lat1, self.lat2 = lat1, lat2
        self.center_lon, self.center_lat = c_lon, c_lat
        self.es, self.e = _eccentricity(r_major, r_minor)
        self.a = r_major

        sin_po, cos_po = math.sin(lat1), math.cos(lat1)
        con = sin_po
        ms1 = msfnz(self.e, sin_po, cos_po)
        ts1 = tsfnz(self.e, lat1, sin_po)
        sin_po, cos_po = math.sin(lat2), math.cos(lat2)
        ms2 = msfnz(self.e, sin_po, cos_po)
        ts2 = tsfnz(self.e, lat2, sin_po)
        ts0 = tsfnz(self.e, c_lat, math.sin(c_lat))

        if abs(lat1 - lat2) > EPSLN:
            self.ns = math.log(ms1/ms2)/math.log(ts1/ts2)
        else:
            self.ns = con
        self.f0 = ms1/(self.ns*math.pow(ts1, self.ns))
        self.rh = self.a*self.f0*math.pow(ts0, self.ns)

        self._set_parameter_slots({0: r_major, 1: r_minor, 2: packed(lat1), 3: packed(lat2),
                                   4: packed(c_lon), 5: packed(c_lat),
                                   6: false_east, 7: false_north})

    def _forward(self, lat, lon):
        con = abs(abs(lat) - HALF_PI)
        if con > EPSLN:
            ts = tsfnz(self.e, lat, math.sin(lat))
            rh1 = self.a*self.f0*math.pow(ts, self.ns)
        else:
            con = lat*self.ns
            if con <= 0:
                raise ProjectionError(44, "Point can not be projected", "lamcc-for")
            rh1 = 0
        theta = self.ns*adjust_lon(lon - self.center_lon)
        x = rh1*math.sin(theta) + self.false_east
        y = self.rh - rh1*math.cos(theta) + self.false_north
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y = self.rh - y + self.false_north
        if self.ns > 0:
            rh1 = math.sqrt(x*x + y*y)
            con = 1.0
        else:
            rh1 = -math.sqrt(x*x + y*y)
            con = -1.0
        theta = 0.0
        if rh1 != 0:
            theta = math.atan2(con*x, con*y)
        if rh1 != 0 or self.ns > 0.0:
            ts = math.pow(rh1/(self.a*self.f0), 1.0/self.ns)
            lat = phi2z(self.e, ts)
        else:
            lat = -HALF_PI
        lon = adjust_lon(theta/self.ns + self.center_lon)
        return lat, lon

    def describe_parameters(self):
        return (axes_items(self.r_major, self.r_minor) + parallels_items(self.lat1, self.lat2)
                + central_meridian_item(self.center_lon) + origin_item(self.center_lat)
                + offset_items(self.false_east, self.false_north))


class EquidistantConic(ProjectionTransform):
    """Equidistant conic projection.

    Format A (``mode=0``) has a single standard parallel ``lat1``; format
    B (``mode=1``) uses both ``lat1`` and ``lat2``.
    """

    system = systems.EQUIDC
    title = 'EQUIDISTANT CONIC'

    def __init__(self, r_major, r_minor, lat1, lat2, center_lon, center_lat, mode=1,
                 false_east=0.0, false_north=0.0):
        super().__init__(r_major, r_minor, false_east, false_north)
        self.lat1, self.lat2 = lat1, lat2
        self.lon_center, self.lat_origin = center_lon, center_lat
        self.mode = mode
        self.a = r_major
        self.es, self.e = _eccentricity(r_major, r_minor)
        self.e0 = e0fn(self.es)
        self.e1 = e1fn(self.es)
        self.e2 = e2fn(self.es)
        self.e3 = e3fn(self.es)

        sinphi, cosphi = math.sin(lat1), math.cos(lat1)
        ms1 = msfnz(self.e, sinphi, cosphi)
        ml1 = mlfn(self.e0, self.e1, self.e2, self.e3, lat1)

        if mode != 0:
            if abs(lat1 + lat2) < EPSLN:
                raise ConfigurationError("Standard parallels on opposite sides of equator")
            sinphi, cosphi = math.sin(lat2), math.cos(lat2)
            ms2 = msfnz(self.e, sinphi, cosphi)
            ml2 = mlfn(self.e0, self.e1, self.e2, self.e3, lat2)
            if abs(lat1 - lat2) >= EPSLN:
                self.ns = (ms1 - ms2)/(ml2 - ml1)
            else:
                self.ns = sinphi
        else:
            self.ns = sinphi
        self.g = ml1 + ms1/self.ns
        self.ml0 = mlfn(self.e0, self.e1, self.e2, self.e3, center_lat)
        self.rh = self.a*(self.g - self.ml0)

        slots = {0: r_major, 1: r_minor, 2: packed(lat1), 4: packed(center_lon),
                 5: packed(center_lat), 6: false_east, 7: false_north, 8: mode}
        if mode != 0:
            slots[3] = packed(lat2)
        self._set_parameter_slots(slots)

    def _forward(self, lat, lon):
        ml = mlfn(self.e0, self.e1, self.e2, self.e3, lat)
        rh1 = self.a*(self.g - ml)
        theta = self.ns*adjust_lon(lon - self.lon_center)
        x = self.false_east + rh1*math.sin(theta)
        y = self.false_north + self.rh - rh1*math.cos(theta)
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y = self.rh - y + self.false_north
        if self.ns >= 0:
            rh1 = math.sqrt(x*x + y*y)
            con = 1.0
        else:
            rh1 = -math.sqrt(x*x + y*y)
            con = -1.0
        theta = 0.0
        if rh1 != 0.0:
            theta = math.atan2(con*x, con*y)
        ml = self.g - rh1/self.a
        lat = phi3z(ml, self.e0, self.e1, self.e2, self.e3)
        lon = adjust_lon(self.lon_center + theta/self.ns)
        return lat, lon

    def describe_parameters(self):
        if self.mode != 0:
            parallels = parallels_items(self.lat1, self.lat2)
        else:
            parallels = parallel_item(self.lat1)
        return (axes_items(self.r_major, self.r_minor) + parallels
                + central_meridian_item(self.lon_center) + origin_item(self.lat_origin)
                + offset_items(self.false_east, self.false_north))


class Polyconic(ProjectionTransform):
    """Polyconic projection on an ellipsoid."""

    system = systems.POLYC
    title = 'POLYCONIC'

    def __init__(self, r_major, r_minor, center_lon, center_lat,
                 false_east=0.0, false_north=0.0):
        super().__init__(r_major, r_minor, false_east, false_north)
        self.lon_center, self.lat_origin = center_lon, center_lat
        self.a = r_major
        self.es, self.e = _eccentricity(r_major, r_minor)
        self.e0 = e0fn(self.es)
        self.e1 = e1fn(self.es)
        self.e2 = e2fn(self.es)
        self.e3 = e3fn(self.es)
        self.ml0 = mlfn(self.e0, self.e1, self.e2, self.e3, center_lat)
        self._set_parameter_slots({0: r_major, 1: r_minor, 4: packed(center_lon),
                                   5: packed(center_lat), 6: false_east, 7: false_north})

    def _forward(self, lat, lon):
        con = adjust_lon(lon - self.lon_center)
        if abs(lat) <= .0000001:
            x = self.false_east + self.a*con
            y = self.false_north - self.a*self.ml0
        else:
            sinphi, cosphi = math.sin(lat), math.cos(lat)
            ml = mlfn(self.e0, self.e1, self.e2, self.e3, lat)
            ms = msfnz(self.e, sinphi, cosphi)
            con *= sinphi
            x = self.false_east + self.a*ms*math.sin(con)/sinphi
            y = self.false_north + self.a*(ml - self.ml0 + ms*(1.0 - math.cos(con))/sinphi)
        return x, y

    def _inverse(self, x, y):
        x -= self.false_east
        y -= self.false_north
        al = self.ml0 + y/self.a
        if abs(al) <= .0000001:
            return 0.0, x/self.a + self.lon_center
        b = al*al + (x/self.a)*(x/self.a)
        lat, c = phi4z(self.es, self.e0, self.e1, self.e2, self.e3, al, b)
        lon = adjust_lon((asinz(x*c/self.a)/math.sin(lat)) + self.lon_center)
        return lat, lon

    def describe_parameters(self):
        return (axes_items(self.r_major, self.r_minor) + central_meridian_item(self.lon_center)
                + origin_item(self.lat_origin) + offset_items(self.false_east, self.false_north))
