"""Interrupted world projections on a sphere.

Each lobe of an interrupted projection has its own central meridian and
false easting. Inverse points falling in the gaps between lobes raise
:class:`~pygctp.exceptions.InBreakError`.
"""
import math

from pygctp.exceptions import InBreakError, ProjectionError
from pygctp.projlib import systems
from pygctp.projlib.base import ProjectionTransform, radius_item
from pygctp.projlib.gctpmath import EPSLN, HALF_PI, PI, adjust_lon, sign
from pygctp.projlib.pseudocyl import MOLLWEIDE_X, SQRT2, mollweide_theta

# GCTP status value for a point in an interruption.
IN_BREAK = -2

_LAT_SPLIT = 0.710987989993     # 40 44' 11.8", where the homolosine lobes meet
_HOMOLOSINE_OFFSET = 0.0528035274542

_W100 = -1.74532925199
_E30 = 0.523598775598
_W160 = -2.79252680319
_W60 = -1.0471975512
_E20 = 0.349065850399
_E140 = 2.44346095279
_W40 = -0.698131700798
_W20 = -0.349065850399
_E80 = 1.3962634016


def _in_break(where):
    return InBreakError(IN_BREAK, "Point lies in an interrupted area", where)


class InterruptedGoodeHomolosine(ProjectionTransform):
    """Goode's interrupted homolosine projection.

    Twelve regions: sinusoidal between the 40 44' parallels and
    Mollweide poleward of them, interrupted over the oceans.

    Parameters
    ----------
    radius : float
        Sphere radius in meters.
    """

    system = systems.GOOD
    title = "GOODE'S HOMOLOSINE EQUAL-AREA"

    LON_CENTER = (_W100, _W100, _E30, _E30, _W160, _W60, _W160, _W60,
                  _E20, _E140, _E20, _E140)
    SINUSOIDAL_REGIONS = frozenset([1, 3, 4, 5, 8, 9])

    # Longitude extent of each region, checked after the inverse.
    REGION_LIMITS = (
        (-(PI + EPSLN), _W40), (-(PI + EPSLN), _W40),
        (_W40, PI + EPSLN), (_W40, PI + EPSLN),
        (-(PI + EPSLN), _W100), (_W100, _W20),
        (-(PI + EPSLN), _W100), (_W100, _W20),
        (_W20, _E80), (_E80, PI + EPSLN),
        (_W20, _E80), (_E80, PI + EPSLN),
    )

    def __init__(self, radius):
        super().__init__(radius, radius)
        self.R = radius
        self.feast = tuple(radius*lon for lon in self.LON_CENTER)
        self._set_parameter_slots({0: radius})

    @staticmethod
    def _southern_region(u, scale):
        if u <= scale*_W100:
            return 0
        if u <= scale*_W20:
            return 1
        if u <= scale*_E80:
            return 2
        return 3

    def _region(self, u, v, scale):
        """Region of a point from its latitude-like ``v`` and longitude-like ``u``."""
        if v >= scale*_LAT_SPLIT:
            return 0 if u <= scale*_W40 else 2
        if v >= 0.0:
            return 1 if u <= scale*_W40 else 3
        if v >= -scale*_LAT_SPLIT:
            return (4, 5, 8, 9)[self._southern_region(u, scale)]
        return (6, 7, 10, 11)[self._southern_region(u, scale)]

    def _forward(self, lat, lon):
        R = self.R
        region = self._region(lon, lat, 1.0)
        delta_lon = adjust_lon(lon - self.LON_CENTER[region])
        if region in self.SINUSOIDAL_REGIONS:
            return self.feast[region] + R*delta_lon*math.cos(lat), R*lat

        theta = mollweide_theta(lat, 251, 'goode-forward')
        if PI/2 - abs(lat) < EPSLN:
            delta_lon = 0.0
        x = self.feast[region] + MOLLWEIDE_X*R*delta_lon*math.cos(theta)
        y = R*(SQRT2*math.sin(theta) - _HOMOLOSINE_OFFSET*sign(lat))
        return x, y

    def _inverse(self, x, y):
        R = self.R
        region = self._region(x, y, R)
        x = x - self.feast[region]
        center = self.LON_CENTER[region]
        if region in self.SINUSOIDAL_REGIONS:
            lat = y/R
            if abs(lat) > HALF_PI:
                raise ProjectionError(252, "Input data error", "goode-inverse")
            if abs(abs(lat) - HALF_PI) > EPSLN:
                lon = adjust_lon(center + x/(R*math.cos(lat)))
            else:
                lon = center
        else:
            arg = (y + _HOMOLOSINE_OFFSET*R*sign(y))/(SQRT2*R)
            if abs(arg) > 1.0:
                raise _in_break('goode-inverse')
            theta = math.asin(arg)
            lon = center + (x/(MOLLWEIDE_X*R*math.cos(theta)))
            if lon < -(PI + EPSLN):
                raise _in_break('goode-inverse')
            arg = (2.0*theta + math.sin(2.0*theta))/PI
            if abs(arg) > 1.0:
                raise _in_break('goode-inverse')
            lat = math.asin(arg)

        # 180 and -180 degrees may be swapped by rounding.
        if (x < 0 and PI - lon < EPSLN) or (x > 0 and PI + lon < EPSLN):
            lon = -lon

        low, high = self.REGION_LIMITS[region]
        if lon < low or lon > high:
            raise _in_break('goode-inverse')
        return lat, lon

    def describe_parameters(self):
        return radius_item(self.R)


class InterruptedMollweide(ProjectionTransform):
    """Interrupted Mollweide projection with three lobes per hemisphere."""

    system = systems.IMOLL
    title = 'INTERRUPTED MOLLWEIDE EQUAL-AREA'

    LON_CENTER = (1.0471975512, -2.96705972839, -0.523598776,
                  1.57079632679, -2.44346095279, -0.34906585)
    FEAST = (-2.19988776387, -0.15713484, 2.04275292359,
             -1.72848324304, 0.31426968, 2.19988776387)

    def __init__(self, radius):
        super().__init__(radius, radius)
        self.R = radius
        self.feast = tuple(radius*f for f in self.FEAST)
        self._set_parameter_slots({0: radius})

    @staticmethod
    def _forward_region(lat, lon):
        # PI is widened so that 180 degrees falls in the right region.
        wide_pi = PI + 1.0E-14
        if lat >= 0.0:
            if 0.34906585 <= lon < 1.91986217719:
                return 0
            if 1.919862177 <= lon <= wide_pi or -wide_pi <= lon < -1.745329252:
                return 1
            return 2
        if 0.34906585 <= lon < 2.44346095279:
            return 3
        if 2.44346095279 <= lon <= wide_pi or -wide_pi <= lon < -1.2217304764:
            return 4
        return 5

    def _forward(self, lat, lon):
        region = self._forward_region(lat, lon)
        delta_lon = adjust_lon(lon - self.LON_CENTER[region])
        theta = mollweide_theta(lat, 261, 'IntMoll-forward')
        if PI/2 - abs(lat) < EPSLN:
            delta_lon = 0.0
        x = self.feast[region] + MOLLWEIDE_X*self.R*delta_lon*math.cos(theta)
        y = self.R*SQRT2*math.sin(theta)
        return x, y

    def _inverse(self, x, y):
        R = self.R
        if y >= 0.0:
            if x <= R*-1.41421356248:
                region = 0
            elif x <= R*0.942809042:
                region = 1
            else:
                region = 2
        else:
            if x <= R*-0.942809042:
                region = 3
            elif x <= R*1.41421356248:
                region = 4
            else:
                region = 5
        x = x - self.feast[region]
        theta = math.asin(y/(SQRT2*R))
        lon = adjust_lon(self.LON_CENTER[region] + (x/(MOLLWEIDE_X*R*math.cos(theta))))
        lat = math.asin((2.0*theta + math.sin(2.0*theta))/PI)

        if region == 0 and (lon < 0.34906585 or lon > 1.91986217719):
            raise _in_break('IntMoll-inverse')
        if region == 1 and (0.34906585 < lon < 1.91986217719 or -1.74532925199 < lon < 0.34906585):
            raise _in_break('IntMoll-inverse')
        if region == 2 and (lon < -1.745329252 or lon > 0.34906585):
            raise _in_break('IntMoll-inverse')
        if region == 3 and (lon < 0.34906585 or lon > 2.44346095279):
            raise _in_break('IntMoll-inverse')
        if region == 4 and (0.34906585 < lon < 2.44346095279 or -1.2217304764 < lon < 0.34906585):
            raise _in_break('IntMoll-inverse')
        if region == 5 and (lon < -1.2217304764 or lon > 0.34906585):
            raise _in_break('IntMoll-inverse')
        return lat, lon

    def describe_parameters(self):
        return radius_item(self.R)
