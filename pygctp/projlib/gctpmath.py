"""Numerical primitives shared by the GCTP projections.

Everything here is a pure function of its arguments. The iterative
latitude solvers raise :class:`~pygctp.exceptions.ConvergenceError` when
they run out of iterations, so a projection can never hand back a
plausible looking but wrong angle.

All angles are radians unless the name says otherwise.
"""
import math

from pygctp.datum import SPHEROIDS, CLARKE1866, SPHERE, MAX_SPHEROIDS
from pygctp.exceptions import AngleFormatError, ConvergenceError

PI = math.pi
HALF_PI = PI*0.5
TWO_PI = PI*2.0
EPSLN = 1.0e-10
R2D = 57.2957795131823
D2R = 1.745329251994328e-2
S2R = 4.848136811095359e-6

MAXLONG = 2147483647.
DBLLONG = 4.61168601e18
MAX_VAL = 4

# Radius of the default sphere in meters.
SPHERE_RADIUS = 6370997.0


def sign(x):
    """-1 for negative values, 1 otherwise."""
    if x < 0.0:
        return -1
    return 1


def adjust_lon(x):
    """Reduce a longitude to [-pi, pi].

    Whole turns are subtracted using progressively coarser multiples of
    2 pi so that very large inputs cannot overflow the integer turn count.
    At most a handful of passes are made, so the reduction is only
    approximate for pathological inputs.

    Parameters
    ----------
    x : float
        Longitude in radians.

    Returns
    -------
    x : float
        Longitude in radians, in [-pi, pi] for inputs of ordinary size.
    """
    if not math.isfinite(x):
        return x
    count = 0
    while True:
        if abs(x) <= PI:
            break
        elif int(abs(x/PI)) < 2:
            x = x - (sign(x)*TWO_PI)
        elif int(abs(x/TWO_PI)) < MAXLONG:
            x = x - (int(x/TWO_PI)*TWO_PI)
        elif int(abs(x/(MAXLONG*TWO_PI))) < MAXLONG:
            x = x - (int(x/(MAXLONG*TWO_PI))*(TWO_PI*MAXLONG))
        elif int(abs(x/(DBLLONG*TWO_PI))) < MAXLONG:
            x = x - (int(x/(DBLLONG*TWO_PI))*(TWO_PI*DBLLONG))
        else:
            x = x - (sign(x)*TWO_PI)
        count += 1
        if count > MAX_VAL:
            break
    return x


def asinz(con):
    """arcsin with the argument clamped to [-1, 1]."""
    if abs(con) > 1.0:
        con = 1.0 if con > 1.0 else -1.0
    return math.asin(con)


def msfnz(eccent, sinphi, cosphi):
    """Constant m of the conformal and equal-area conics."""
    con = eccent*sinphi
    return cosphi/math.sqrt(1.0 - con*con)


def qsfnz(eccent, sinphi):
    """Constant q of the equal-area projections (Snyder 3-12)."""
    if eccent > 1.0e-7:
        con = eccent*sinphi
        return ((1.0 - eccent*eccent)*(sinphi/(1.0 - con*con)
                - (.5/eccent)*math.log((1.0 - con)/(1.0 + con))))
    return 2.0*sinphi


def tsfnz(eccent, phi, sinphi):
    """Constant t of the Lambert conformal conic and polar stereographic."""
    con = eccent*sinphi
    com = .5*eccent
    con = math.pow(((1.0 - con)/(1.0 + con)), com)
    return math.tan(.5*(HALF_PI - phi))/con


def e0fn(x):
    return 1.0 - 0.25*x*(1.0 + x/16.0*(3.0 + 1.25*x))


def e1fn(x):
    return 0.375*x*(1.0 + 0.25*x*(1.0 + 0.46875*x))


def e2fn(x):
    return 0.05859375*x*x*(1.0 + 0.75*x)


def e3fn(x):
    return x*x*x*(35.0/3072.0)


def e4fn(x):
    con = 1.0 + x
    com = 1.0 - x
    return math.sqrt(math.pow(con, con)*math.pow(com, com))


def mlfn(e0, e1, e2, e3, phi):
    """Distance along the meridian from the equator, in units of the semi-major axis."""
    return e0*phi - e1*math.sin(2.0*phi) + e2*math.sin(4.0*phi) - e3*math.sin(6.0*phi)


def calc_utm_zone(lon):
    """UTM zone number for a longitude in degrees."""
    return int(((lon + 180.0)/6.0) + 1.0)


def phi1z(eccent, qs):
    """Latitude from the authalic constant q (Albers inverse).

    Raises
    ------
    ConvergenceError
        After 25 iterations without reaching 1e-7.
    """
    phi = asinz(.5*qs)
    if eccent < EPSLN:
        return phi
    eccnts = eccent*eccent
    for i in range(25):
        sinpi = math.sin(phi)
        cospi = math.cos(phi)
        con = eccent*sinpi
        com = 1.0 - con*con
        dphi = .5*com*com/cospi*(qs/(1.0 - eccnts) - sinpi/com
                                 + .5/eccent*math.log((1.0 - con)/(1.0 + con)))
        phi = phi + dphi
        if abs(dphi) <= 1e-7:
            return phi
    raise ConvergenceError(1, "Convergence error", "phi1z-conv")


def phi2z(eccent, ts):
    """Latitude from the isometric constant t (conformal inverses).

    Raises
    ------
    ConvergenceError
        After 15 iterations without reaching 1e-10.
    """
    eccnth = .5*eccent
    phi = HALF_PI - 2*math.atan(ts)
    for i in range(15):
        sinpi = math.sin(phi)
        con = eccent*sinpi
        dphi = HALF_PI - 2*math.atan(ts*(math.pow(((1.0 - con)/(1.0 + con)), eccnth))) - phi
        phi += dphi
        if abs(dphi) <= .0000000001:
            return phi
    raise ConvergenceError(2, "Convergence error", "phi2z-conv")


def phi3z(ml, e0, e1, e2, e3):
    """Latitude from the rectifying latitude (equidistant conic inverse).

    Raises
    ------
    ConvergenceError
        After 15 iterations without reaching 1e-10.
    """
    phi = ml
    for i in range(15):
        dphi = (ml + e1*math.sin(2.0*phi) - e2*math.sin(4.0*phi) + e3*math.sin(6.0*phi))/e0 - phi
        phi += dphi
        if abs(dphi) <= .0000000001:
            return phi
    raise ConvergenceError(3, "Latitude failed to converge after 15 iterations", "PHI3Z-CONV")


def phi4z(eccent, e0, e1, e2, e3, a, b):
    """Latitude for the polyconic inverse by Newton-Raphson iteration.

    Parameters
    ----------
    eccent : float
        Eccentricity squared.
    e0, e1, e2, e3 : float
        Meridian distance series coefficients.
    a, b : float
        Polyconic inverse constants A and B (Snyder 18-18, 18-19).

    Returns
    -------
    phi : float
        Latitude in radians.
    c : float
        The constant C evaluated at ``phi``, needed for the longitude.

    Raises
    ------
    ConvergenceError
        After 15 iterations without reaching 1e-10.
    """
    phi = a
    for i in range(15):
        sinphi = math.sin(phi)
        tanphi = math.tan(phi)
        c = tanphi*math.sqrt(1.0 - eccent*sinphi*sinphi)
        sin2ph = math.sin(2.0*phi)
        ml = e0*phi - e1*sin2ph + e2*math.sin(4.0*phi) - e3*math.sin(6.0*phi)
        mlp = e0 - 2.0*e1*math.cos(2.0*phi) + 4.0*e2*math.cos(4.0*phi) - 6.0*e3*math.cos(6.0*phi)
        con1 = 2.0*ml + c*(ml*ml + b) - 2.0*a*(c*ml + 1.0)
        con2 = eccent*sin2ph*(ml*ml + b - 2.0*a*ml)/(2.0*c)
        con3 = 2.0*(a - ml)*(c*mlp - 2.0/sin2ph) - 2.0*mlp
        dphi = con1/(con2 + con3)
        phi += dphi
        if abs(dphi) <= .0000000001:
            return phi, c
    raise ConvergenceError(4, "Latitude failed to converge", "phi4z-conv")


def sphdz(isph, parm):
    """Select ellipsoid axes and sphere radius for a projection.

    Parameters
    ----------
    isph : int
        Spheroid code. A negative code takes the axes from ``parm``,
        otherwise the spheroid table is used; codes past the end of the
        table fall back to Clarke 1866.
    parm : sequence of float
        GCTP projection parameters. Only slots 0 and 1 are read: the
        semi-major axis, and the semi-minor axis (values above 1) or the
        eccentricity squared (values up to 1).

    Returns
    -------
    r_major, r_minor, radius : float
        Axes and sphere radius in meters.
    """
    if isph < 0:
        t_major = abs(parm[0])
        t_minor = abs(parm[1])
        if t_major > 0.0:
            if t_minor > 1.0:
                return t_major, t_minor, t_major
            elif t_minor > 0.0:
                return t_major, math.sqrt(1.0 - t_minor)*t_major, t_major
            return t_major, t_major, t_major
        elif t_minor > 0.0:
            clarke = SPHEROIDS[CLARKE1866]
            return clarke.semi_major, clarke.semi_minor, clarke.semi_major
        return SPHERE_RADIUS, SPHERE_RADIUS, SPHERE_RADIUS

    jsph = isph
    if jsph > MAX_SPHEROIDS - 1:
        jsph = CLARKE1866
    sph = SPHEROIDS[jsph]
    return sph.semi_major, sph.semi_minor, SPHEROIDS[SPHERE].semi_major


def pack_angle(angle):
    """Pack decimal degrees into DDDMMMSSS.SS format."""
    degrees = int(angle)
    minutes = int(angle*60 - degrees*60)
    seconds = angle*3600 - degrees*3600 - minutes*60
    return degrees*1000000 + minutes*1000 + seconds


def unpack_angle(angle):
    """Unpack a DDDMMMSSS.SS angle to decimal degrees."""
    degrees = int(int(angle)/1000000)
    minutes = int(int(angle)/1000) - degrees*1000
    seconds = angle - degrees*1000000 - minutes*1000
    return degrees + minutes/60.0 + seconds/3600.0


def paksz(ang):
    """Convert a packed DMS angle to decimal degrees, checking each field.

    Raises
    ------
    AngleFormatError
        If degrees exceed 360, or minutes or seconds exceed 60.
    """
    fac = -1 if ang < 0.0 else 1

    sec = abs(ang)
    tmp = 1000000.0
    i = int(sec/tmp)
    if i > 360:
        raise AngleFormatError("Illegal DMS field in %r: degrees" % (ang,))
    deg = i

    sec = sec - deg*tmp
    tmp = 1000
    i = int(sec/tmp)
    if i > 60:
        raise AngleFormatError("Illegal DMS field in %r: minutes" % (ang,))
    mins = i

    sec = sec - mins*tmp
    if sec > 60:
        raise AngleFormatError("Illegal DMS field in %r: seconds" % (ang,))
    return fac*(deg*3600.0 + mins*60.0 + sec)/3600.0


def pakr2dm(pak):
    """Convert radians to packed DDDMMMSSS.SS degrees."""
    pak *= R2D
    con = abs(pak)
    degs = int(con)
    con = (con - degs)*60
    mins = int(con)
    secs = (con - mins)*60
    con = degs*1000000.0 + mins*1000.0 + secs
    return -con if pak < 0.0 else con


def pakcz(pak):
    """Convert a DDDMMSS.SS angle to packed DDDMMMSSS.SS."""
    con = abs(pak)
    degs = int((con/10000.0) + .001)
    con = con - degs*10000
    mins = int((con/100.0) + .001)
    secs = con - mins*100
    con = degs*1000000.0 + mins*1000.0 + secs
    return -con if pak < 0.0 else con
