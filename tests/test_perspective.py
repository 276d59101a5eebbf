from pygctp.coords import DataLocation, EarthLocation
from pygctp.exceptions import ConfigurationError
from pygctp.trans.perspective import *
import math
import pytest
import numpy as np

# GOES-East like full disk imager
goes_params = [0.0, -75.0, 42164.0, 5.6e-5, 5.6e-5]
goes_dims = (5424, 5424)
center = DataLocation(2711.5, 2711.5)

test_lats = np.array([30.0, -45.0, 0.0, 60.0, 10.0])
test_lons = np.array([-80.0, -60.0, -120.0, -75.0, -30.0])


@pytest.fixture(scope='module')
def horizontal():
    return EllipsoidPerspectiveProjection(goes_params, goes_dims)


@pytest.fixture(scope='module')
def vertical():
    return EllipsoidPerspectiveProjection(goes_params + [1], goes_dims)


def test_sub_satellite_point(horizontal, vertical):
    for trans in (horizontal, vertical):
        loc = trans.to_earth(center)
        assert np.isclose(loc.lat, 0.0, atol=1e-8)
        assert np.isclose(loc.lon, -75.0, atol=1e-8)
        loc = trans.to_data(EarthLocation(0.0, -75.0))
        assert np.isclose(loc.row, center.row, atol=1e-6)
        assert np.isclose(loc.col, center.col, atol=1e-6)

def test_round_trip(horizontal, vertical):
    for trans in (horizontal, vertical):
        for lat, lon in zip(test_lats, test_lons):
            data_loc = trans.to_data(EarthLocation(lat, lon))
            assert data_loc.is_contained(goes_dims)
            loc = trans.to_earth(data_loc)
            assert np.isclose(loc.lat, lat, atol=1e-7)
            assert np.isclose(loc.lon, lon, atol=1e-7)

def test_scan_orientation(horizontal):
    # Rows run south and columns run east
    assert horizontal.to_earth(DataLocation(1000, 2711.5)).lat > 0
    assert horizontal.to_earth(DataLocation(4000, 2711.5)).lat < 0
    assert horizontal.to_earth(DataLocation(2711.5, 4000)).lon > -75.0

def test_scanners_differ_off_axis(horizontal, vertical):
    a = horizontal.to_earth(DataLocation(1000, 1000))
    b = vertical.to_earth(DataLocation(1000, 1000))
    assert not (np.isclose(a.lat, b.lat) and np.isclose(a.lon, b.lon))

def test_back_face(horizontal):
    assert not horizontal.to_data(EarthLocation(0.0, 105.0)).is_valid()
    assert not horizontal.to_data(EarthLocation(0.0, -170.0)).is_valid()
    # Corner pixels look past the limb
    assert not horizontal.to_earth(DataLocation(0, 0)).is_valid()

def test_array_transforms(horizontal):
    rows, cols = horizontal.to_data_arrays(test_lats, test_lons)
    lats, lons = horizontal.to_earth_arrays(rows, cols)
    assert np.allclose(lats, test_lats, atol=1e-7)
    assert np.allclose(lons, test_lons, atol=1e-7)

def test_limb_locations(horizontal):
    limb = horizontal.limb_locations()
    assert len(limb) == BOUNDARY_POINTS + 1
    assert np.isclose(limb[0].lat, limb[-1].lat) and np.isclose(limb[0].lon, limb[-1].lon)
    sub_point = EarthLocation(0.0, -75.0)
    for loc in limb:
        assert 8900 < sub_point.distance(loc) < 9200

def test_limb_at_antimeridian():
    trans = EllipsoidPerspectiveProjection([0.0, 180.0, 42164.0, 5.6e-5, 5.6e-5], goes_dims)
    limb = trans.limb_locations()
    assert all(loc.is_valid() for loc in limb)

def test_boundary_cut(horizontal):
    assert horizontal.has_boundary_check()
    assert not horizontal.is_boundary_cut(EarthLocation(0, -75), EarthLocation(0, -70))
    assert horizontal.is_boundary_cut(EarthLocation(0, -75), EarthLocation(0, 105))
    assert horizontal.boundary_splitter() is not None

def test_resolution(horizontal):
    row_res, col_res = horizontal.get_resolution(center)
    # About 2 km at the sub satellite point
    assert 1.9 < row_res < 2.1
    assert 1.9 < col_res < 2.1

def test_bad_parameters():
    with pytest.raises(ConfigurationError):
        EllipsoidPerspectiveProjection(goes_params[:4], goes_dims)
    with pytest.raises(ConfigurationError):
        EllipsoidPerspectiveProjection([0.0, -75.0, 3000.0, 5.6e-5, 5.6e-5], goes_dims)
    with pytest.raises(ConfigurationError):
        EllipsoidPerspectiveProjection([0.0, -75.0, 42164.0, 0.0, 5.6e-5], goes_dims)

def test_describe(horizontal):
    assert horizontal.describe() == 'sensor scan'
    assert horizontal.sensor_type == 'geostationary'
    assert not horizontal.is_vertical_scanner

def test_qsolve():
    roots = sorted(qsolve(1.0, -3.0, 2.0))
    assert np.allclose(roots, [1.0, 2.0])
    roots = sorted(qsolve(2.0, 4.0, -6.0))
    assert np.allclose(roots, [-3.0, 1.0])
    assert all(math.isnan(t) for t in qsolve(1.0, 0.0, 1.0))

def test_rotation_matrix():
    assert np.allclose(rotation_matrix(2, math.pi/2) @ XHAT, YHAT)
    for axis in (0, 1, 2):
        rot = rotation_matrix(axis, 0.3)
        assert np.allclose(rot @ rot.T, np.eye(3))
        assert np.isclose(np.linalg.det(rot), 1.0)

def test_geodetic_geocentric():
    for lat in (-1.2, -0.3, 0.0, 0.5, 1.4):
        assert np.isclose(gc_to_gd_lat(gd_to_gc_lat(lat, 0.0), 0.0), lat)
    assert abs(gd_to_gc_lat(0.5, 0.0)) < 0.5
    assert math.isnan(gc_to_gd_lat(math.nan, 0.0))
    # Above the surface the height term changes the result
    assert np.isclose(gc_to_gd_lat(gd_to_gc_lat(0.7, 0.05), 0.05), 0.7)
    for lat, lon in zip(test_lats, test_lons):
        back = ecef_to_gd(gd_to_ecef(lat, lon))
        assert np.allclose(back, (lat, lon))
