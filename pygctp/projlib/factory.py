"""Map projections from GCTP style parameter sets.

A GCTP projection is described by a system code, a zone, an array of
15 parameters and a spheroid code. Angles in the parameter array are
packed DDDMMMSSS.SS values; slots 6 and 7 hold the false easting and
northing for the systems that use them. See
:func:`pygctp.projlib.systems.get_requirements` for the slots each
system reads.

Examples
--------
A 512 x 512 polar stereographic grid of 1 km pixels centered on the
north pole::

    params = np.zeros(15)
    params[4] = pack_angle(-45.0)
    params[5] = pack_angle(90.0)
    proj = create_centered(systems.PS, 0, params, WGS84, (512, 512),
                           EarthLocation(90, 0), (1000.0, 1000.0))
"""
import warnings

import numpy as np
from affine import Affine

from pygctp.coords import DataLocation
from pygctp.datum import MAX_SPHEROIDS
from pygctp.exceptions import AngleFormatError, ConfigurationError, UnsupportedProjectionError
from pygctp.logging_config import get_logger
from pygctp.projlib import systems
from pygctp.projlib.alaska import AlaskaConformal
from pygctp.projlib.azimuthal import (AzimuthalEquidistant, GeneralVerticalNearsidePerspective,
                                      Gnomonic, LambertAzimuthalEqualArea, Orthographic,
                                      PolarStereographic, Stereographic)
from pygctp.projlib.conic import (AlbersConicalEqualArea, EquidistantConic,
                                  LambertConformalConic, Polyconic)
from pygctp.projlib.cylindrical import (Equirectangular, HotineObliqueMercator, Mercator,
                                        MillerCylindrical, SpaceObliqueMercator,
                                        TransverseMercator, UniversalTransverseMercator)
from pygctp.projlib.gctpmath import D2R, R2D, calc_utm_zone, paksz, sphdz
from pygctp.projlib.geographic import Geographic
from pygctp.projlib.interrupted import InterruptedGoodeHomolosine, InterruptedMollweide
from pygctp.projlib.pseudocyl import (Hammer, Mollweide, OblatedEqualArea, Robinson,
                                      Sinusoidal, VanDerGrinten, WagnerIV, WagnerVII)
from pygctp.trans.mapproj import MapProjection

logger = get_logger(__name__)

UTM_SCALE_FACTOR = 0.9996


def _angle(p, index):
    """Packed angle slot in radians."""
    return paksz(p[index])*D2R


# One builder per system: (parameters, r_major, r_minor, radius, fe, fn) -> projection

def _albers(p, r_major, r_minor, radius, fe, fn):
    return AlbersConicalEqualArea(r_major, r_minor, _angle(p, 2), _angle(p, 3),
                                  _angle(p, 4), _angle(p, 5), fe, fn)


def _lamcc(p, r_major, r_minor, radius, fe, fn):
    return LambertConformalConic(r_major, r_minor, _angle(p, 2), _angle(p, 3),
                                 _angle(p, 4), _angle(p, 5), fe, fn)


def _mercat(p, r_major, r_minor, radius, fe, fn):
    return Mercator(r_major, r_minor, _angle(p, 4), _angle(p, 5), fe, fn)


def _ps(p, r_major, r_minor, radius, fe, fn):
    return PolarStereographic(r_major, r_minor, _angle(p, 4), _angle(p, 5), fe, fn)


def _polyc(p, r_major, r_minor, radius, fe, fn):
    return Polyconic(r_major, r_minor, _angle(p, 4), _angle(p, 5), fe, fn)


def _equidc(p, r_major, r_minor, radius, fe, fn):
    mode = 0 if p[8] == 0 else 1
    return EquidistantConic(r_major, r_minor, _angle(p, 2), _angle(p, 3),
                            _angle(p, 4), _angle(p, 5), mode, fe, fn)


def _tm(p, r_major, r_minor, radius, fe, fn):
    return TransverseMercator(r_major, r_minor, p[2], _angle(p, 4), _angle(p, 5), fe, fn)


def _azimuthal(cls):
    def build(p, r_major, r_minor, radius, fe, fn):
        return cls(radius, _angle(p, 4), _angle(p, 5), fe, fn)
    return build


def _gvnsp(p, r_major, r_minor, radius, fe, fn):
    return GeneralVerticalNearsidePerspective(radius, p[2], _angle(p, 4), _angle(p, 5), fe, fn)


def _world(cls):
    def build(p, r_major, r_minor, radius, fe, fn):
        return cls(radius, _angle(p, 4), false_east=fe, false_north=fn)
    return build


def _eqrect(p, r_major, r_minor, radius, fe, fn):
    return Equirectangular(radius, _angle(p, 4), _angle(p, 5), fe, fn)


def _hom(p, r_major, r_minor, radius, fe, fn):
    scale_factor = p[2]
    lat_origin = _angle(p, 5)
    if p[12] != 0:
        # Format B: azimuth through the point of origin.
        return HotineObliqueMercator(r_major, r_minor, scale_factor, _angle(p, 3), _angle(p, 4),
                                     lat_origin, 0.0, 0.0, 0.0, 0.0, 1, fe, fn)
    return HotineObliqueMercator(r_major, r_minor, scale_factor, 0.0, 0.0, lat_origin,
                                 _angle(p, 8), _angle(p, 9), _angle(p, 10), _angle(p, 11),
                                 0, fe, fn)


def _som(p, r_major, r_minor, radius, fe, fn):
    satnum = int(p[2])
    path = int(p[3])
    if p[12] == 0:
        # Orbital elements.
        return SpaceObliqueMercator(r_major, r_minor, satnum, path, _angle(p, 3), _angle(p, 4),
                                    p[8], int(p[10]), 1, fe, fn)
    return SpaceObliqueMercator(r_major, r_minor, satnum, path, 0.0, 0.0, 0.0, 0, 0, fe, fn)


def _good(p, r_major, r_minor, radius, fe, fn):
    return InterruptedGoodeHomolosine(radius)


def _imoll(p, r_major, r_minor, radius, fe, fn):
    return InterruptedMollweide(radius)


def _alaska(p, r_major, r_minor, radius, fe, fn):
    return AlaskaConformal(r_major, r_minor, fe, fn)


def _obeqa(p, r_major, r_minor, radius, fe, fn):
    return OblatedEqualArea(radius, _angle(p, 4), _angle(p, 5), p[2], p[3], _angle(p, 8), fe, fn)


def _geo(p, r_major, r_minor, radius, fe, fn):
    return Geographic(r_major, r_minor)


_BUILDERS = {
    systems.GEO: _geo,
    systems.ALBERS: _albers,
    systems.LAMCC: _lamcc,
    systems.MERCAT: _mercat,
    systems.PS: _ps,
    systems.POLYC: _polyc,
    systems.EQUIDC: _equidc,
    systems.TM: _tm,
    systems.STEREO: _azimuthal(Stereographic),
    systems.LAMAZ: _azimuthal(LambertAzimuthalEqualArea),
    systems.AZMEQD: _azimuthal(AzimuthalEquidistant),
    systems.GNOMON: _azimuthal(Gnomonic),
    systems.ORTHO: _azimuthal(Orthographic),
    systems.GVNSP: _gvnsp,
    systems.SNSOID: _world(Sinusoidal),
    systems.EQRECT: _eqrect,
    systems.MILLER: _world(MillerCylindrical),
    systems.VGRINT: _world(VanDerGrinten),
    systems.HOM: _hom,
    systems.ROBIN: _world(Robinson),
    systems.SOM: _som,
    systems.ALASKA: _alaska,
    systems.GOOD: _good,
    systems.MOLL: _world(Mollweide),
    systems.IMOLL: _imoll,
    systems.HAMMER: _world(Hammer),
    systems.WAGIV: _world(WagnerIV),
    systems.WAGVII: _world(WagnerVII),
    systems.OBEQA: _obeqa,
}


def _utm(zone, p, spheroid):
    if spheroid < 0:
        r_major, r_minor, _ = sphdz(0, p)
    else:
        r_major, r_minor, _ = sphdz(spheroid, p)
    if zone == 0:
        lon1 = _angle(p, 0)
        lat1 = _angle(p, 1)
        zone = calc_utm_zone(lon1*R2D)
        if lat1 < 0:
            zone = -zone
        logger.debug('UTM zone %d from parameter location', zone)
    return UniversalTransverseMercator(r_major, r_minor, zone, UTM_SCALE_FACTOR)


def create_projection(system, zone, parameters, spheroid):
    """Projection for a GCTP system, zone, parameter array and spheroid.

    Parameters
    ----------
    system : int
        Projection system code from :mod:`pygctp.projlib.systems`.
    zone : int
        Zone for UTM; 0 derives the zone from parameter slots 0 and 1.
    parameters : sequence of float
        The 15 GCTP projection parameters.
    spheroid : int
        Spheroid code, or -1 to take the axes from the parameters.

    Returns
    -------
    projection : pygctp.projlib.base.ProjectionTransform
        The projection, carrying a copy of ``parameters``.

    Raises
    ------
    UnsupportedProjectionError
        For an unknown system and for State Plane.
    ConfigurationError
        If a packed angle is malformed or the parameters are inconsistent.
    """
    p = np.asarray(parameters, dtype=float)
    if len(p) < 15:
        p = np.concatenate([p, np.zeros(15 - len(p))])
    try:
        if system == systems.UTM:
            proj = _utm(zone, p, spheroid)
        else:
            builder = _BUILDERS.get(system)
            if builder is None:
                raise UnsupportedProjectionError("Unsupported projection system: %r" % (system,))
            r_major, r_minor, radius = sphdz(spheroid, p)
            if 0 <= spheroid < MAX_SPHEROIDS and not systems.is_supported_spheroid(spheroid, system):
                warnings.warn("%s supports only a sphere, using radius %r m in place of spheroid %d"
                              % (systems.PROJECTION_NAMES[system], radius, spheroid))
            proj = builder(p, r_major, r_minor, radius, p[6], p[7])
    except AngleFormatError as err:
        raise ConfigurationError("Projection parameter angles invalid") from err
    proj.parameters = np.array(p)
    logger.debug('Created %s projection with spheroid %d', proj.title, proj.spheroid)
    return proj


def _set_lon_flag(map_proj):
    """Positive longitude copy of a geographic grid that needs one.

    A grid whose top right pixel comes back at a negative column holds
    longitudes past 180, so earth locations are made positive first.
    """
    if map_proj.system != systems.GEO:
        return map_proj
    top_right = map_proj.to_data(map_proj.to_earth(DataLocation(0, map_proj.dims[1] - 1)))
    if top_right.col < 0:
        logger.debug('Using positive longitudes for geographic grid')
        return map_proj.with_positive_lon(True)
    return map_proj


def create(system, zone, parameters, spheroid, dims, affine=None):
    """Map projection for a grid from GCTP parameters and an affine.

    Parameters
    ----------
    system, zone, parameters, spheroid
        See :func:`create_projection`.
    dims : sequence of int
        Grid ``(rows, cols)``.
    affine : affine.Affine, optional
        Maps ``(row, col)`` to map ``(x, y)``, identity by default.

    Returns
    -------
    map_proj : pygctp.trans.mapproj.MapProjection
    """
    if affine is None:
        affine = Affine.identity()
    proj = create_projection(system, zone, parameters, spheroid)
    return _set_lon_flag(MapProjection(proj, dims, affine))


def create_centered(system, zone, parameters, spheroid, dims, center_loc, pixel_dims):
    """Map projection for a grid centered on an earth location.

    Parameters
    ----------
    system, zone, parameters, spheroid
        See :func:`create_projection`.
    dims : sequence of int
        Grid ``(rows, cols)``.
    center_loc : pygctp.coords.EarthLocation
        Location at the center of the grid.
    pixel_dims : sequence of float
        Pixel ``(height, width)`` in map units at the projection
        reference point.

    Returns
    -------
    map_proj : pygctp.trans.mapproj.MapProjection
    """
    map_proj = create(system, zone, parameters, spheroid, dims)
    return _set_lon_flag(map_proj.with_center(center_loc, pixel_dims))
