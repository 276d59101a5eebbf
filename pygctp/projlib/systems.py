"""GCTP projection system codes, names and parameter requirements."""
from collections import namedtuple

from pygctp.datum import CLARKE1866, GRS1980, MAX_SPHEROIDS, SPHERE

GEO = 0
UTM = 1
SPCS = 2
ALBERS = 3
LAMCC = 4
MERCAT = 5
PS = 6
POLYC = 7
EQUIDC = 8
TM = 9
STEREO = 10
LAMAZ = 11
AZMEQD = 12
GNOMON = 13
ORTHO = 14
GVNSP = 15
SNSOID = 16
EQRECT = 17
MILLER = 18
VGRINT = 19
HOM = 20
ROBIN = 21
SOM = 22
ALASKA = 23
GOOD = 24
MOLL = 25
IMOLL = 26
HAMMER = 27
WAGIV = 28
WAGVII = 29
OBEQA = 30

PROJECTION_NAMES = (
    'Geographic',
    'Universal Transverse Mercator',
    'State Plane Coordinates',
    'Albers Conical Equal Area',
    'Lambert Conformal Conic',
    'Mercator',
    'Polar Stereographic',
    'Polyconic',
    'Equidistant Conic',
    'Transverse Mercator',
    'Stereographic',
    'Lambert Azimuthal Equal Area',
    'Azimuthal Equidistant',
    'Gnomonic',
    'Orthographic',
    'General Vertical Near-Side Perspective',
    'Sinusoidal',
    'Equirectangular',
    'Miller Cylindrical',
    'Van der Grinten',
    'Hotine Oblique Mercator',
    'Robinson',
    'Space Oblique Mercator',
    'Alaska Conformal',
    'Interrupted Goode Homolosine',
    'Mollweide',
    'Interrupted Mollweide',
    'Hammer',
    'Wagner IV',
    'Wagner VII',
    'Oblated Equal Area',
)

MAX_PROJECTIONS = len(PROJECTION_NAMES)

# Systems whose formulas accept an ellipsoid; the rest are sphere only.
ELLIPSOID_SYSTEMS = frozenset([GEO, UTM, SPCS, ALBERS, LAMCC, MERCAT, PS, POLYC,
                               EQUIDC, TM, HOM, SOM, ALASKA])

_DESCRIPTIONS = {
    'Lon/Z': ('Longitude point or zero', 'degrees'),
    'Lat/Z': ('Latitude point or zero', 'degrees'),
    'SMajor': ('Semi-major axis of ellipsoid or zero', 'meters'),
    'SMinor': ('Semi-minor axis of ellipsoid or zero', 'meters'),
    'Sphere': ('Radius of reference sphere or zero', 'meters'),
    'STDPAR': ('Latitude of standard parallel', 'degrees'),
    'STDPR1': ('Latitude of first standard parallel', 'degrees'),
    'STDPR2': ('Latitude of second standard parallel', 'degrees'),
    'CentMer': ('Longitude of central meridian', 'degrees'),
    'OriginLat': ('Latitude of projection origin', 'degrees'),
    'FE': ('False easting', 'meters'),
    'FN': ('False northing', 'meters'),
    'TrueScale': ('Latitude of true scale', 'degrees'),
    'LongPol': ('Longitude down below pole of map', 'degrees'),
    'FactorMer': ('Scale factor at central meridian', ''),
    'FactorCent': ('Scale factor at center of projection', ''),
    'CentLon': ('Longitude of center of projection', 'degrees'),
    'CentLat': ('Latitude of center of projection', 'degrees'),
    'Height': ('Height of perspective point', 'meters'),
    'Long1': ('Longitude of first point on center line', 'degrees'),
    'Long2': ('Longitude of second point on center line', 'degrees'),
    'Lat1': ('Latitude of first point on center line', 'degrees'),
    'Lat2': ('Latitude of second point on center line', 'degrees'),
    'AziAng': ('Azimuth angle east of north of center line', 'degrees'),
    'AzmthPt': ('Longitude of central meridian azimuth point', 'degrees'),
    'IncAng': ('Inclination of orbit at ascending node', 'degrees'),
    'AscLong': ('Longitude of ascending orbit at equator', 'degrees'),
    'PSRev': ('Period of sat revolution', 'minutes'),
    'LRat': ('Landsat ratio', ''),
    'PFlag': ('End of path flag for Landsat', ''),
    'Satnum': ('Landsat satellite number', ''),
    'Path': ('Landsat path number', ''),
    'Shapem': ('Oval shape parameter m', ''),
    'Shapen': ('Oval shape parameter n', ''),
    'Angle': ('Oval rotation angle', 'degrees'),
    'zero': ('Parameter mode flag, must be zero', ''),
    'one': ('Parameter mode flag, must be one', ''),
}

_CONIC = ['SMajor', 'SMinor', 'STDPR1', 'STDPR2', 'CentMer', 'OriginLat', 'FE', 'FN']
_AZIMUTHAL = ['Sphere', '', '', '', 'CentLon', 'CentLat', 'FE', 'FN']
_PSEUDOCYL = ['Sphere', '', '', '', 'CentMer', '', 'FE', 'FN']

_REQUIREMENTS = {
    GEO: ([],),
    UTM: (['Lon/Z', 'Lat/Z'],),
    SPCS: ([],),
    ALBERS: (_CONIC,),
    LAMCC: (_CONIC,),
    MERCAT: (['SMajor', 'SMinor', '', '', 'CentMer', 'TrueScale', 'FE', 'FN'],),
    PS: (['SMajor', 'SMinor', '', '', 'LongPol', 'TrueScale', 'FE', 'FN'],),
    POLYC: (['SMajor', 'SMinor', '', '', 'CentMer', 'OriginLat', 'FE', 'FN'],),
    EQUIDC: (['SMajor', 'SMinor', 'STDPAR', '', 'CentMer', 'OriginLat', 'FE', 'FN', 'zero'],
             ['SMajor', 'SMinor', 'STDPR1', 'STDPR2', 'CentMer', 'OriginLat', 'FE', 'FN', 'one']),
    TM: (['SMajor', 'SMinor', 'FactorMer', '', 'CentMer', 'OriginLat', 'FE', 'FN'],),
    STEREO: (_AZIMUTHAL,),
    LAMAZ: (_AZIMUTHAL,),
    AZMEQD: (_AZIMUTHAL,),
    GNOMON: (_AZIMUTHAL,),
    ORTHO: (_AZIMUTHAL,),
    GVNSP: (['Sphere', '', 'Height', '', 'CentLon', 'CentLat', 'FE', 'FN'],),
    SNSOID: (_PSEUDOCYL,),
    EQRECT: (['Sphere', '', '', '', 'CentMer', 'TrueScale', 'FE', 'FN'],),
    MILLER: (_PSEUDOCYL,),
    VGRINT: (['Sphere', '', '', '', 'CentMer', 'OriginLat', 'FE', 'FN'],),
    HOM: (['SMajor', 'SMinor', 'FactorCent', '', '', 'OriginLat', 'FE', 'FN',
           'Long1', 'Lat1', 'Long2', 'Lat2', 'zero'],
          ['SMajor', 'SMinor', 'FactorCent', 'AziAng', 'AzmthPt', 'OriginLat', 'FE', 'FN',
           '', '', '', '', 'one']),
    ROBIN: (_PSEUDOCYL,),
    SOM: (['SMajor', 'SMinor', '', 'IncAng', 'AscLong', '', 'FE', 'FN',
           'PSRev', 'LRat', 'PFlag', '', 'zero'],
          ['SMajor', 'SMinor', 'Satnum', 'Path', '', '', 'FE', 'FN',
           '', '', '', '', 'one']),
    ALASKA: (['SMajor', 'SMinor', '', '', '', '', 'FE', 'FN'],),
    GOOD: (['Sphere'],),
    MOLL: (_PSEUDOCYL,),
    IMOLL: (['Sphere'],),
    HAMMER: (_PSEUDOCYL,),
    WAGIV: (_PSEUDOCYL,),
    WAGVII: (_PSEUDOCYL,),
    OBEQA: (['Sphere', '', 'Shapem', 'Shapen', 'CentLon', 'CentLat', 'FE', 'FN', 'Angle'],),
}

Requirement = namedtuple('Requirement', ['index', 'short_name', 'description', 'units'])


def _check_system(system):
    if not 0 <= system < MAX_PROJECTIONS:
        raise ValueError("No projection system with code %r" % (system,))


def get_projection(name):
    """Return the system code of a projection by case-insensitive name, or -1."""
    name = name.lower()
    for code, proj_name in enumerate(PROJECTION_NAMES):
        if proj_name.lower() == name:
            return code
    return -1


def supports_spheroid(system):
    """True if the system accepts an ellipsoid rather than only a sphere.

    State Plane accepts only Clarke 1866 and GRS 1980, see
    :func:`is_supported_spheroid`.
    """
    _check_system(system)
    return system in ELLIPSOID_SYSTEMS


def is_supported_spheroid(spheroid, system):
    """True if a spheroid code may be used with a projection system."""
    if not 0 <= spheroid < MAX_SPHEROIDS:
        raise ValueError("No spheroid with code %r" % (spheroid,))
    _check_system(system)
    if system == SPCS:
        return spheroid in (CLARKE1866, GRS1980)
    if system in ELLIPSOID_SYSTEMS:
        return True
    return spheroid == SPHERE


def get_requirements(system):
    """Parameter slots read by a projection system.

    Parameters
    ----------
    system : int
        Projection system code.

    Returns
    -------
    requirements : list of list of Requirement
        One list per parameter format. Systems with two formats (the A
        and B forms selected by a mode flag) return two lists.
    """
    _check_system(system)
    formats = []
    for names in _REQUIREMENTS[system]:
        reqs = []
        for index, short_name in enumerate(names):
            if short_name:
                description, units = _DESCRIPTIONS[short_name]
                reqs.append(Requirement(index, short_name, description, units))
        formats.append(reqs)
    return formats
