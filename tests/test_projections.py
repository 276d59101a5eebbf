from pygctp.projlib import systems
from pygctp.projlib.factory import create_projection
from pygctp.projlib.gctpmath import D2R, pack_angle, paksz
from pygctp.projlib.base import Status
from pygctp.datum import CLARKE1866, GRS1980, SPHERE, WGS84
from pygctp.exceptions import ConfigurationError, UnsupportedProjectionError
import math
import pytest
import numpy as np
import pyproj

SPHERE_R = 6370997.0


def params(**slots):
    """GCTP parameter array from ``p<index>=value`` keywords, angles in degrees."""
    p = np.zeros(15)
    for key, value in slots.items():
        p[int(key[1:])] = value
    return p


def dms(angle):
    return pack_angle(angle)


def paksz_rad(packed):
    return paksz(packed)*D2R


# (system, zone, parameters, spheroid, test points in degrees, tolerance in radians)
round_trip_cases = [
    (systems.UTM, 18, params(), WGS84, [(40.0, -75.0), (10.0, -77.5)], 1e-8),
    (systems.ALBERS, 0, params(p2=dms(29.5), p3=dms(45.5), p4=dms(-96), p5=dms(23)), GRS1980,
     [(35.0, -100.0), (48.0, -80.0)], 1e-7),
    (systems.LAMCC, 0, params(p2=dms(33), p3=dms(45), p4=dms(-97), p5=dms(40)), WGS84,
     [(35.0, -100.0), (48.0, -80.0)], 1e-8),
    (systems.MERCAT, 0, params(p4=dms(0), p5=dms(0)), WGS84,
     [(45.0, 10.0), (-60.0, -120.0)], 1e-8),
    (systems.PS, 0, params(p4=dms(-45), p5=dms(70)), WGS84,
     [(75.0, -40.0), (60.0, 10.0)], 1e-8),
    (systems.POLYC, 0, params(p4=dms(-96), p5=dms(30)), CLARKE1866,
     [(35.0, -100.0), (25.0, -90.0)], 1e-8),
    (systems.EQUIDC, 0, params(p2=dms(29.5), p3=dms(45.5), p4=dms(-96), p5=dms(23), p8=1),
     CLARKE1866, [(35.0, -100.0), (48.0, -80.0)], 1e-8),
    (systems.EQUIDC, 0, params(p2=dms(40), p4=dms(-96), p5=dms(23)),
     CLARKE1866, [(35.0, -100.0)], 1e-8),
    (systems.TM, 0, params(p2=0.9996, p4=dms(-75), p5=dms(0)), WGS84,
     [(40.0, -74.0), (-20.0, -77.0)], 1e-8),
    (systems.STEREO, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     [(45.0, -95.0), (35.0, -105.0)], 1e-8),
    (systems.LAMAZ, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     [(45.0, -95.0), (35.0, -105.0)], 1e-8),
    (systems.AZMEQD, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     [(45.0, -95.0), (35.0, -105.0)], 1e-8),
    (systems.GNOMON, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     [(45.0, -95.0), (35.0, -105.0)], 1e-8),
    (systems.ORTHO, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     [(45.0, -95.0), (35.0, -105.0)], 1e-8),
    (systems.GVNSP, 0, params(p2=35786000.0, p4=dms(-75), p5=dms(0)), SPHERE,
     [(10.0, -70.0), (-30.0, -90.0)], 1e-8),
    (systems.SNSOID, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-8),
    (systems.EQRECT, 0, params(p4=dms(0), p5=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-8),
    (systems.MILLER, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-8),
    (systems.VGRINT, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-7),
    (systems.ROBIN, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-5),
    (systems.MOLL, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-8),
    (systems.HAMMER, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-8),
    (systems.WAGIV, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-7),
    (systems.WAGVII, 0, params(p4=dms(0)), SPHERE, [(30.0, 40.0), (-45.0, -60.0)], 1e-8),
    (systems.HOM, 0, params(p2=0.9996, p5=dms(40), p8=dms(-100), p9=dms(35),
                            p10=dms(-90), p11=dms(45)), WGS84,
     [(40.0, -95.0), (38.0, -97.0)], 1e-8),
    (systems.HOM, 0, params(p2=0.9996, p3=dms(45), p4=dms(-95), p5=dms(40), p12=1), WGS84,
     [(40.0, -95.0), (42.0, -93.0)], 1e-8),
    (systems.ALASKA, 0, params(), CLARKE1866, [(64.0, -152.0), (60.0, -150.0), (66.0, -145.0)], 1e-7),
    (systems.GOOD, 0, params(), SPHERE, [(30.0, -100.0), (-20.0, 20.0), (60.0, 80.0)], 1e-8),
    (systems.IMOLL, 0, params(), SPHERE, [(30.0, -120.0), (-20.0, 20.0)], 1e-8),
    (systems.OBEQA, 0, params(p2=2.0, p3=1.0, p4=dms(-100), p5=dms(40)), SPHERE,
     [(42.0, -98.0), (38.0, -103.0)], 1e-8),
    (systems.GEO, 0, params(), WGS84, [(40.0, -75.0), (-10.0, 120.0)], 1e-12),
]


@pytest.mark.parametrize('system,zone,p,spheroid,points,tol', round_trip_cases)
def test_round_trip(system, zone, p, spheroid, points, tol):
    proj = create_projection(system, zone, p, spheroid)
    assert proj.system == system
    for lat, lon in points:
        result = proj.forward_result(lat*D2R, lon*D2R)
        assert result.status == Status.OK
        assert result.code == 0
        back_lat, back_lon = proj.inverse(result.a, result.b)
        assert np.isclose(back_lat, lat*D2R, atol=tol)
        assert np.isclose(back_lon, lon*D2R, atol=tol)


# Systems whose projection center maps to the false easting and northing
center_cases = [
    (systems.ALBERS, params(p2=dms(29.5), p3=dms(45.5), p4=dms(-96), p5=dms(23)), GRS1980),
    (systems.LAMCC, params(p2=dms(33), p3=dms(45), p4=dms(-97), p5=dms(40)), WGS84),
    (systems.MERCAT, params(p4=dms(-80), p5=dms(0)), WGS84),
    (systems.POLYC, params(p4=dms(-96), p5=dms(30)), CLARKE1866),
    (systems.TM, params(p2=0.9996, p4=dms(-75), p5=dms(10)), WGS84),
    (systems.STEREO, params(p4=dms(-100), p5=dms(40)), SPHERE),
    (systems.LAMAZ, params(p4=dms(-100), p5=dms(40)), SPHERE),
    (systems.AZMEQD, params(p4=dms(-100), p5=dms(40)), SPHERE),
    (systems.GNOMON, params(p4=dms(-100), p5=dms(40)), SPHERE),
    (systems.ORTHO, params(p4=dms(-100), p5=dms(40)), SPHERE),
    (systems.EQRECT, params(p4=dms(20), p5=dms(0)), SPHERE),
    (systems.SNSOID, params(p4=dms(20)), SPHERE),
    (systems.MOLL, params(p4=dms(20)), SPHERE),
]


@pytest.mark.parametrize('system,p,spheroid', center_cases)
def test_center_maps_to_false_origin(system, p, spheroid):
    p = p.copy()
    p[6], p[7] = 1000.0, 2000.0
    proj = create_projection(system, 0, p, spheroid)
    center_lat = 0.0 if system in (systems.SNSOID, systems.MOLL, systems.MERCAT) else p[5]
    x, y = proj.forward(paksz_rad(center_lat), paksz_rad(p[4]))
    assert np.isclose(x, 1000.0, atol=1e-6)
    assert np.isclose(y, 2000.0, atol=1e-6)
    lat, lon = proj.inverse(1000.0, 2000.0)
    assert np.isclose(lat, paksz_rad(center_lat), atol=1e-9)
    assert np.isclose(lon, paksz_rad(p[4]), atol=1e-9)


def test_orthographic_back_face():
    proj = create_projection(systems.ORTHO, 0, params(p4=dms(-100), p5=dms(40)), SPHERE)
    result = proj.forward_result(-40.0*D2R, 80.0*D2R)
    assert result.status == Status.ERROR
    assert result.code == 143
    x, y = proj.forward(-40.0*D2R, 80.0*D2R)
    assert math.isnan(x) and math.isnan(y)
    # Off the disk
    result = proj.inverse_result(2*SPHERE_R, 0.0)
    assert result.status == Status.ERROR
    assert result.code == 145

def test_gnomonic_back_face():
    proj = create_projection(systems.GNOMON, 0, params(p4=dms(-100), p5=dms(40)), SPHERE)
    result = proj.forward_result(0.0, 80.0*D2R)
    assert result.status == Status.ERROR
    assert result.code == 133

def test_equirectangular_quarter_turn():
    p = params(p0=6378137.0, p4=dms(0), p5=dms(0))
    proj = create_projection(systems.EQRECT, 0, p, -1)
    x, y = proj.forward(0.0, 90.0*D2R)
    assert np.isclose(x, 10018754.17, atol=0.01)
    assert y == 0.0

def test_goode_region_center():
    proj = create_projection(systems.GOOD, 0, params(), SPHERE)
    x, y = proj.forward(0.0, -100.0*D2R)
    assert np.isclose(x, -100.0*D2R*SPHERE_R, atol=1e-3)
    assert np.isclose(y, 0.0)
    lat, lon = proj.inverse(x, y)
    assert np.isclose(lat, 0.0)
    assert np.isclose(lon, -100.0*D2R)

def test_goode_interruption():
    proj = create_projection(systems.GOOD, 0, params(), SPHERE)
    result = proj.inverse_result(4.0*SPHERE_R, 0.1*SPHERE_R)
    assert result.status == Status.IN_BREAK
    assert math.isnan(result.a)

def test_nonfinite_input():
    proj = create_projection(systems.MERCAT, 0, params(), WGS84)
    result = proj.forward_result(math.nan, 0.0)
    assert result.status == Status.ERROR
    assert math.isnan(proj.inverse(math.inf, 0.0)[0])

def test_mercator_pole():
    proj = create_projection(systems.MERCAT, 0, params(), WGS84)
    result = proj.forward_result(90.0*D2R, 0.0)
    assert result.status == Status.ERROR
    assert result.code == 53

def test_array_transforms():
    proj = create_projection(systems.SNSOID, 0, params(), SPHERE)
    lats = np.radians([[0.0, 30.0], [-45.0, 60.0]])
    lons = np.radians([[0.0, 40.0], [-60.0, 10.0]])
    x, y = proj.forward_array(lats, lons)
    assert x.shape == (2, 2)
    back_lat, back_lon = proj.inverse_array(x, y)
    assert np.allclose(back_lat, lats)
    assert np.allclose(back_lon, lons)

def test_utm_zone_from_parameters():
    p = params(p0=dms(-75.5), p1=dms(-33.0))
    proj = create_projection(systems.UTM, 0, p, WGS84)
    assert proj.zone == -18
    x, y = proj.forward(-33.0*D2R, -75.0*D2R)
    # Southern hemisphere false northing
    assert y > 5000000.0
    assert np.isclose(x, 500000.0, atol=60000.0)

def test_utm_user_spheroid_is_clarke():
    proj = create_projection(systems.UTM, 18, params(), -1)
    assert proj.spheroid == CLARKE1866

def test_parameters_round_trip():
    p = params(p2=dms(33), p3=dms(45), p4=dms(-97), p5=dms(40), p6=100.0)
    proj = create_projection(systems.LAMCC, 0, p, WGS84)
    assert len(proj.parameters) == 15
    assert np.allclose(proj.parameters, p)
    labels = [label for label, _, _ in proj.describe_parameters()]
    assert 'False Easting' in labels

def test_short_parameter_array_padded():
    proj = create_projection(systems.SNSOID, 0, [SPHERE_R], SPHERE)
    assert len(proj.parameters) == 15

def test_unsupported_systems():
    with pytest.raises(UnsupportedProjectionError):
        create_projection(systems.SPCS, 0, params(), CLARKE1866)
    with pytest.raises(UnsupportedProjectionError):
        create_projection(99, 0, params(), WGS84)

def test_bad_packed_angle():
    with pytest.raises(ConfigurationError):
        create_projection(systems.MERCAT, 0, params(p4=45070000.0), WGS84)

def test_opposite_parallels():
    with pytest.raises(ConfigurationError):
        create_projection(systems.LAMCC, 0, params(p2=dms(30), p3=dms(-30)), WGS84)

def test_system_names():
    assert systems.get_projection('mercator') == systems.MERCAT
    assert systems.get_projection('Nonesuch') == -1
    assert systems.PROJECTION_NAMES[systems.GOOD].startswith('Interrupted Goode')
    assert systems.supports_spheroid(systems.UTM)
    assert not systems.supports_spheroid(systems.ROBIN)
    assert systems.is_supported_spheroid(GRS1980, systems.SPCS)
    assert not systems.is_supported_spheroid(WGS84, systems.SPCS)
    assert systems.is_supported_spheroid(SPHERE, systems.MOLL)
    assert not systems.is_supported_spheroid(WGS84, systems.MOLL)

def test_requirements():
    reqs = systems.get_requirements(systems.HOM)
    assert len(reqs) == 2
    reqs = systems.get_requirements(systems.MERCAT)[0]
    assert [r.index for r in reqs] == [0, 1, 4, 5, 6, 7]
    with pytest.raises(ValueError):
        systems.get_requirements(systems.MAX_PROJECTIONS)


# Cross checks against PROJ
proj_cases = [
    (systems.UTM, 18, params(), WGS84, '+proj=utm +zone=18 +ellps=WGS84', 0.1),
    (systems.MERCAT, 0, params(p4=dms(0), p5=dms(0)), WGS84, '+proj=merc +lon_0=0 +ellps=WGS84', 1e-3),
    (systems.LAMCC, 0, params(p2=dms(33), p3=dms(45), p4=dms(-97), p5=dms(40)), WGS84,
     '+proj=lcc +lat_1=33 +lat_2=45 +lat_0=40 +lon_0=-97 +ellps=WGS84', 1e-3),
    (systems.ALBERS, 0, params(p2=dms(29.5), p3=dms(45.5), p4=dms(-96), p5=dms(23)), GRS1980,
     '+proj=aea +lat_1=29.5 +lat_2=45.5 +lat_0=23 +lon_0=-96 +ellps=GRS80', 1e-3),
    (systems.PS, 0, params(p4=dms(-45), p5=dms(70)), WGS84,
     '+proj=stere +lat_0=90 +lat_ts=70 +lon_0=-45 +ellps=WGS84', 1e-3),
    (systems.SNSOID, 0, params(), SPHERE, '+proj=sinu +lon_0=0 +R=6370997', 1e-3),
    (systems.MOLL, 0, params(), SPHERE, '+proj=moll +lon_0=0 +R=6370997', 1e-3),
    (systems.LAMAZ, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     '+proj=laea +lat_0=40 +lon_0=-100 +R=6370997', 1e-3),
    (systems.ORTHO, 0, params(p4=dms(-100), p5=dms(40)), SPHERE,
     '+proj=ortho +lat_0=40 +lon_0=-100 +R=6370997', 1e-3),
    (systems.EQRECT, 0, params(), SPHERE, '+proj=eqc +lat_ts=0 +lon_0=0 +R=6370997', 1e-3),
    (systems.MILLER, 0, params(), SPHERE, '+proj=mill +lon_0=0 +R=6370997', 1e-3),
]

proj_points = [(40.0, -75.0), (35.0, -77.0), (45.0, -73.5)]


@pytest.mark.parametrize('system,zone,p,spheroid,projstring,atol', proj_cases)
def test_against_proj(system, zone, p, spheroid, projstring, atol):
    proj = create_projection(system, zone, p, spheroid)
    reference = pyproj.Proj(projstring)
    for lat, lon in proj_points:
        if system == systems.PS:
            lat = lat + 30.0
        x, y = proj.forward(lat*D2R, lon*D2R)
        ref_x, ref_y = reference(lon, lat)
        assert np.isclose(x, ref_x, atol=atol)
        assert np.isclose(y, ref_y, atol=atol)

def test_sphere_only_system_warns():
    with pytest.warns(UserWarning, match='supports only a sphere'):
        proj = create_projection(systems.MOLL, 0, params(), WGS84)
    x, y = proj.forward(0.0, 90.0*D2R)
    sphere = create_projection(systems.MOLL, 0, params(), SPHERE)
    assert np.isclose(x, sphere.forward(0.0, 90.0*D2R)[0])

def test_inverse_not_converged():
    albers = create_projection(systems.ALBERS, 0, params(p2=dms(29.5), p3=dms(45.5), p4=dms(-96),
                                                         p5=dms(23)), GRS1980)
    result = albers.inverse_result(0.0, 1.2e7)
    assert result.status == Status.NOT_CONVERGED
    assert result.code == 1
    assert math.isnan(result.a) and math.isnan(result.b)
    polyc = create_projection(systems.POLYC, 0, params(p4=dms(-96), p5=dms(30)), CLARKE1866)
    result = polyc.inverse_result(3e7, 1e6)
    assert result.status == Status.NOT_CONVERGED
    assert result.code == 4
    lat, lon = polyc.inverse(3e7, 1e6)
    assert math.isnan(lat) and math.isnan(lon)

def test_results_are_floats():
    albers = create_projection(systems.ALBERS, 0, params(p2=dms(29.5), p3=dms(45.5), p4=dms(-96),
                                                         p5=dms(23)), GRS1980)
    x, y = albers.forward(35.0*D2R, -100.0*D2R)
    lat, lon = albers.inverse(x, y)
    assert type(x) is float and type(y) is float
    assert type(lat) is float and type(lon) is float


# Landsat 5 path 31, and the same orbit given by its elements
som_landsat = params(p2=5, p3=31, p12=1)
som_orbit = params(p3=dms(98.2), p4=dms(129.30 - 360.0/233.0*31), p8=98.8841202)
som_points = [(40.0, -100.0), (35.0, -98.0), (45.0, -103.0)]


@pytest.mark.parametrize('p', [som_landsat, som_orbit])
def test_space_oblique_mercator_round_trip(p):
    proj = create_projection(systems.SOM, 0, p, WGS84)
    for lat, lon in som_points:
        result = proj.forward_result(lat*D2R, lon*D2R)
        assert result.status == Status.OK
        back_lat, back_lon = proj.inverse(result.a, result.b)
        assert np.isclose(back_lat, lat*D2R, atol=1e-6)
        assert np.isclose(back_lon, lon*D2R, atol=1e-6)

def test_space_oblique_mercator_modes_agree():
    landsat = create_projection(systems.SOM, 0, som_landsat, WGS84)
    orbit = create_projection(systems.SOM, 0, som_orbit, WGS84)
    for lat, lon in som_points:
        assert np.allclose(landsat.forward(lat*D2R, lon*D2R), orbit.forward(lat*D2R, lon*D2R),
                           rtol=0, atol=1e-3)
    labels = [label for label, value, unit in landsat.describe_parameters()]
    assert 'Path Number' in labels
    labels = [label for label, value, unit in orbit.describe_parameters()]
    assert 'Path Number' not in labels
