from pygctp.coords import DataLocation, EarthLocation
from pygctp.datum import GRS1980, SPHERE, WGS84, create_datum
from pygctp.exceptions import ConfigurationError, UnitsError
from pygctp.trans.gridmap import *
import math
import pytest
import numpy as np
import xarray as xr

# Himawari full disk at 2 km, coordinates are scan angles in degrees
geos_attrs = {
    'grid_mapping_name': 'geostationary',
    'semi_major_axis': 6378137.0,
    'semi_minor_axis': 6356752.3,
    'inverse_flattening': 298.257024882281,
    'latitude_of_projection_origin': 0.0,
    'longitude_of_projection_origin': 140.7,
    'perspective_point_height': 35785863.0,
    'sweep_angle_axis': 'y',
}
geos_step = 0.00320214596940
geos_x = -8.80430034288115 + geos_step*np.arange(5500)
geos_y = 8.80430034288115 - geos_step*np.arange(5500)
geos_center = DataLocation(5499/2.0, 5499/2.0)

lcc_attrs = {
    'grid_mapping_name': 'lambert_conformal_conic',
    'standard_parallel': [33.0, 45.0],
    'longitude_of_central_meridian': -97.0,
    'latitude_of_projection_origin': 40.0,
    'semi_major_axis': 6378137.0,
    'inverse_flattening': 298.257223563,
}
lcc_x = np.arange(-500.0, 501.0, 10.0)
lcc_y = np.arange(500.0, -501.0, -10.0)

test_lats = np.array([40.0, 36.5, 43.0])
test_lons = np.array([-97.0, -100.0, -93.5])


@pytest.fixture(scope='module')
def geos():
    return GridMappedProjection(geos_attrs, geos_x, geos_y, 'degrees', 'degrees')


@pytest.fixture(scope='module')
def lcc():
    return GridMappedProjection(lcc_attrs, lcc_x, lcc_y, 'km', 'km')


def test_geostationary_units(geos):
    assert geos.native_units.units == ureg.radian
    assert geos.map_scale == 35785863.0
    scale, offset = geos.x_transform
    assert np.isclose(scale, math.radians(geos_step))
    assert np.isclose(offset, math.radians(-8.80430034288115))
    scale, offset = geos.y_transform
    assert np.isclose(scale, math.radians(-geos_step))
    assert np.isclose(offset, math.radians(8.80430034288115))

def test_geostationary_datum(geos):
    assert geos.datum == create_datum(GRS1980)

def test_geostationary_center(geos):
    assert geos.dims == (5500, 5500)
    center = geos.to_earth(geos_center)
    assert abs(center.lat) < 1e-5
    assert abs(center.lon - 140.7) < 1e-5
    offset_lon = geos.to_earth(geos_center.translate(0, -1))
    assert abs(offset_lon.lat) < 1e-5
    assert abs(offset_lon.lon - (140.7 - 0.01796)) < 1e-4
    offset_lat = geos.to_earth(geos_center.translate(-1, 0))
    assert abs(offset_lat.lat - 0.0180873890) < 1e-4
    assert abs(offset_lat.lon - 140.7) < 1e-5

def test_geostationary_round_trip(geos):
    for lat, lon in [(35.0, 139.0), (-30.0, 150.0), (10.0, 100.0)]:
        data_loc = geos.to_data(EarthLocation(lat, lon))
        assert data_loc.is_contained(geos.dims)
        loc = geos.to_earth(data_loc)
        assert np.isclose(loc.lat, lat, atol=1e-6)
        assert np.isclose(loc.lon, lon, atol=1e-6)

def test_geostationary_off_disk(geos):
    assert not geos.to_earth(DataLocation(0, 0)).is_valid()
    assert not geos.to_data(EarthLocation(0.0, -39.3)).is_valid()

def test_projected_units(lcc):
    assert lcc.native_units == Q_(1.0, 'm')
    assert lcc.map_scale == 1.0
    assert np.allclose(lcc.x_transform, (10000.0, -500000.0))
    assert np.allclose(lcc.y_transform, (-10000.0, 500000.0))
    assert lcc.datum == create_datum(WGS84)

def test_projected_center(lcc):
    center = lcc.to_earth(DataLocation(50, 50))
    assert np.isclose(center.lat, 40.0)
    assert np.isclose(center.lon, -97.0)
    loc = lcc.to_data(EarthLocation(40.0, -97.0))
    assert np.isclose(loc.row, 50.0) and np.isclose(loc.col, 50.0)

def test_projected_arrays(lcc):
    rows, cols = lcc.to_data_arrays(test_lats, test_lons)
    lats, lons = lcc.to_earth_arrays(rows, cols)
    assert np.allclose(lats, test_lats)
    assert np.allclose(lons, test_lons)
    loc = lcc.to_data(EarthLocation(test_lats[1], test_lons[1]))
    assert np.isclose(loc.row, rows[1]) and np.isclose(loc.col, cols[1])

def test_axis_units_in_meters():
    trans = GridMappedProjection(lcc_attrs, lcc_x*1000, lcc_y*1000)
    assert np.allclose(trans.x_transform, (10000.0, -500000.0))
    assert trans == GridMappedProjection(lcc_attrs, lcc_x, lcc_y, 'km', 'km')

def test_equality(lcc):
    assert lcc == GridMappedProjection(lcc_attrs, lcc_x, lcc_y, 'km', 'km')
    other = dict(lcc_attrs, longitude_of_central_meridian=-90.0)
    assert lcc != GridMappedProjection(other, lcc_x, lcc_y, 'km', 'km')
    assert lcc != GridMappedProjection(lcc_attrs, lcc_x[:-1], lcc_y, 'km', 'km')
    assert lcc != 'lcc'

def test_describe(lcc):
    assert lcc.describe() == 'grid mapped'
    assert 'lambert_conformal_conic' in repr(lcc)

def test_incompatible_units():
    with pytest.raises(UnitsError):
        GridMappedProjection(lcc_attrs, lcc_x, lcc_y, 'degrees', 'km')
    with pytest.raises(UnitsError):
        GridMappedProjection(lcc_attrs, lcc_x, lcc_y, 'km', 'bogus_unit')
    # Scan angles given in km
    x = geos_x[2700:2800]
    y = geos_y[2700:2800]
    with pytest.raises(UnitsError):
        GridMappedProjection(geos_attrs, x, y, 'km', 'km')

def test_irregular_axis():
    x = lcc_x.copy()
    x[10] += 3.0
    with pytest.raises(ConfigurationError):
        GridMappedProjection(lcc_attrs, x, lcc_y, 'km', 'km')
    with pytest.raises(ConfigurationError):
        GridMappedProjection(lcc_attrs, lcc_x[:1], lcc_y, 'km', 'km')

def test_unusable_grid_mapping():
    with pytest.raises(ConfigurationError):
        GridMappedProjection({'grid_mapping_name': 'latitude_longitude'}, lcc_x, lcc_y)
    with pytest.raises(ConfigurationError):
        GridMappedProjection({'grid_mapping_name': 'nonesuch'}, lcc_x, lcc_y)

def test_from_dataset():
    x = geos_x[2700:2800]
    y = geos_y[2700:2800]
    ds = xr.Dataset(
        {'sea_surface_temperature': (('time', 'nj', 'ni'), np.zeros((1, 100, 100)),
                                     {'grid_mapping': 'perspective_proj'}),
         'perspective_proj': ((), 0, geos_attrs)},
        coords={'ni': ('ni', x, {'standard_name': 'projection_x_coordinate', 'units': 'degrees'}),
                'nj': ('nj', y, {'standard_name': 'projection_y_coordinate', 'units': 'degrees'})})
    trans = GridMappedProjection.from_dataset(ds, 'sea_surface_temperature')
    assert trans.dims == (100, 100)
    center = trans.to_earth(DataLocation(49.5, 49.5))
    assert abs(center.lat) < 1e-5
    assert abs(center.lon - 140.7) < 1e-5
    with pytest.raises(ConfigurationError):
        GridMappedProjection.from_dataset(ds, 'perspective_proj')

def test_ellipsoid_axes():
    r_major, r_minor, rf = ellipsoid_axes(6378137.0, inverse_flattening=298.257223563)
    assert np.isclose(r_minor, 6356752.314245, atol=1e-5)
    assert ellipsoid_axes(6371000.0) == (6371000.0, 6371000.0, math.inf)
    assert ellipsoid_axes(6371000.0, inverse_flattening=0.0) == (6371000.0, 6371000.0, math.inf)
    _, _, rf = ellipsoid_axes(6378137.0, 6356752.3)
    assert np.isclose(rf, 298.257, atol=1e-3)

def test_datum_from_attrs():
    assert datum_from_attrs({'earth_radius': 6370997.0}) == create_datum(SPHERE)
    assert datum_from_attrs({'semi_major_axis': 6378137.0,
                             'inverse_flattening': 298.257024882281}) == create_datum(GRS1980)
    assert datum_from_attrs({'semi_major_axis': 6378137.0,
                             'semi_minor_axis': 6356752.3}) == create_datum(GRS1980)
    with pytest.raises(ConfigurationError):
        datum_from_attrs({})

def test_projection_units_probe():
    assert projection_units(lambda x, y: (y, x)) == Q_(1.0, 'degree')
    assert projection_units(lambda x, y: (0.0, x/111.195)) == Q_(1.0, 'km')
    assert projection_units(lambda x, y: (0.0, x*1e-9)) == Q_(1.0, 'm')
