from pygctp.coords import *
from pygctp.datum import *
from pygctp.config import SearchConfig
from pygctp.exceptions import ConfigurationError
from pygctp.logging_config import setup_logging, get_logger, set_log_level, disable_logging, enable_logging
import logging
import math
import pytest
import numpy as np

test_lats = np.array([33.5, 1.0, 0.0, 0.0, -45.0, 89.0])
test_lons = np.array([-101.5, -75.0, 179.5, -180.0, 200.0, -190.0])
test_norm_lons = np.array([-101.5, -75.0, 179.5, -180.0, -160.0, 170.0])


def test_lon_range():
    assert np.allclose(lon_range(test_lons), test_norm_lons)
    assert lon_range(180.0) == -180.0
    assert lon_range(-180.0) == -180.0
    assert lon_range(359.0) == -1.0

def test_distance():
    # One degree of arc on the standard sphere
    assert np.isclose(distance(0, 0, 0, 1), STD_RADIUS*math.pi/180)
    assert np.isclose(distance(10, 20, 10, 20), 0.0)
    assert np.isclose(distance(0, 179.5, 0, -179.5), distance(0, 0, 0, 1))
    d = distance(test_lats, test_lons, test_lats, test_lons)
    assert np.allclose(d, 0.0)

def test_unit_vectors():
    xyz = to_unit_vector(test_lats, test_lons)
    assert np.allclose(np.linalg.norm(xyz, axis=-1), 1.0)
    lats, lons = from_unit_vector(xyz)
    assert np.allclose(lats, test_lats)
    assert np.allclose(lons, test_norm_lons)
    lats, lons = from_unit_vector(xyz*3.0)
    assert np.allclose(lats, test_lats)

def test_earth_location():
    loc = EarthLocation(40.0, 190.0)
    assert loc.lon == -170.0
    assert loc.is_valid()
    assert not EarthLocation.invalid().is_valid()
    assert not EarthLocation(math.nan, 0).is_valid()
    assert tuple(loc) == (40.0, -170.0)

def test_earth_location_translate():
    loc = EarthLocation(85.0, 10.0).translate(10.0, 0.0)
    assert np.isclose(loc.lat, 85.0)
    assert np.isclose(loc.lon, -170.0)
    loc = EarthLocation(-88.0, 0.0).translate(-4.0, 5.0)
    assert np.isclose(loc.lat, -88.0)
    assert np.isclose(loc.lon, -175.0)
    loc = EarthLocation(0.0, 175.0).translate(0.0, 10.0)
    assert np.isclose(loc.lon, -175.0)

def test_east_west():
    a = EarthLocation(0, 170)
    b = EarthLocation(0, -170)
    assert b.is_east(a)
    assert a.is_west(b)
    assert not a.is_east(b)
    assert a.crosses_antimeridian(b)
    c = EarthLocation(0, 10)
    assert c.is_east(EarthLocation(0, 5))
    assert not c.crosses_antimeridian(EarthLocation(0, 5))
    # Exactly half a turn apart is neither
    d = EarthLocation(0, -170)
    e = EarthLocation(0, 10)
    assert not d.is_east(e)
    assert not d.is_west(e)

def test_data_location():
    loc = DataLocation(2.4, 7.5)
    assert loc.is_valid()
    assert loc.is_contained((10, 10))
    assert not loc.is_contained((2, 10))
    assert loc.round() == DataLocation(2, 8)
    assert DataLocation(-0.5, 1.49).round() == DataLocation(0, 1)
    assert DataLocation(-3, 12).truncate((10, 10)) == DataLocation(0, 9)
    assert loc.translate(1, -1) == DataLocation(3.4, 6.5)
    assert not DataLocation.invalid().is_valid()
    assert not DataLocation.invalid().is_contained((10, 10))
    assert not DataLocation.invalid().round().is_valid()
    assert not DataLocation(3.0, math.nan).round().is_valid()

def test_spheroid_lookup():
    assert get_spheroid(6378137.0, 6356752.314245) == WGS84
    assert get_spheroid(6378137.0, 6356752.3) == GRS1980
    assert get_spheroid(6370997.0, 6370997.0) == SPHERE
    assert get_spheroid(6371000.0, 6371000.0) == -1
    assert get_spheroid_by_name('wgs 84') == WGS84
    assert get_spheroid_by_name('Clarke 1866') == CLARKE1866
    assert get_spheroid_by_name('Nonesuch') == -1
    assert len(SPHEROIDS) == MAX_SPHEROIDS == 20

def test_datum_derived():
    datum = create_datum(WGS84)
    assert datum is create_datum(WGS84)
    assert np.isclose(datum.flat, 1/298.257223563)
    assert np.isclose(datum.e2, 0.00669437999014)
    assert np.isclose(datum.rp, 6356752.314245, atol=1e-3)
    sphere = create_datum(SPHERE)
    assert sphere.flat == 0.0
    assert sphere.e2 == 0.0
    with pytest.raises(ValueError):
        create_datum(MAX_SPHEROIDS)

def test_datum_frozen():
    datum = create_datum(WGS84)
    with pytest.raises(Exception):
        datum.axis = 1.0

def test_datum_from_axes():
    assert Datum.from_axes(6378137.0, 6356752.3) == create_datum(GRS1980)
    user = Datum.from_axes(6371000.0, 6371000.0)
    assert user.name == 'User defined'
    assert math.isinf(user.inv_flat)
    user = Datum.from_axes(6378000.0, 6357000.0)
    assert np.isclose(user.inv_flat, 6378000.0/21000.0)

def test_datum_shift():
    wgs84 = create_datum(WGS84)
    nad27 = Datum.from_spheroid(CLARKE1866, 'NAD27 CONUS', -8, 160, 176)
    lat, lon = wgs84.shift(40.0, -100.0, wgs84)
    assert np.isclose(lat, 40.0) and np.isclose(lon, -100.0)
    lat, lon = wgs84.shift(40.0, -100.0, nad27)
    # NAD27 and WGS 84 differ by tens of meters in the US
    assert abs(lat - 40.0) < 1e-3
    assert 1e-5 < abs(lon + 100.0) < 1e-3
    back_lat, back_lon = nad27.shift(lat, lon, wgs84)
    assert np.isclose(back_lat, 40.0, atol=1e-6)
    assert np.isclose(back_lon, -100.0, atol=1e-6)

def test_location_to_datum():
    wgs84 = create_datum(WGS84)
    nad27 = Datum.from_spheroid(CLARKE1866, 'NAD27 CONUS', -8, 160, 176)
    loc = EarthLocation(40.0, -100.0, wgs84).to_datum(nad27)
    assert loc.datum == nad27
    assert loc.lon != -100.0
    bare = EarthLocation(40.0, -100.0).to_datum(nad27)
    assert (bare.lat, bare.lon) == (40.0, -100.0)

def test_datum_ecf():
    sphere = create_datum(SPHERE)
    xyz = sphere.compute_ecf(test_lats, test_lons)
    assert np.allclose(xyz, to_unit_vector(test_lats, test_lons))

def test_search_config_defaults():
    config = SearchConfig()
    assert config.tolerance_factor == 0.1
    assert config.max_iterations == 100
    assert config.to_dict()['window_factor'] == 3.0

def test_search_config_invalid():
    with pytest.raises(ConfigurationError):
        SearchConfig(tolerance_factor=0)
    with pytest.raises(ConfigurationError):
        SearchConfig(window_factor=1.0)
    with pytest.raises(ConfigurationError):
        SearchConfig(grid_probes=0, stagnation_limit=2)

def test_search_config_save_load(tmp_path):
    config = SearchConfig(max_iterations=50, seed=4)
    path = tmp_path / 'search.json'
    config.save(path)
    loaded = SearchConfig.load(path)
    assert loaded == config

def test_search_config_load_checks(tmp_path):
    path = tmp_path / 'search.json'
    path.write_text('{"max_iterations": 40.0, "window_factor": 2.5}')
    config = SearchConfig.load(path)
    assert config.max_iterations == 40 and isinstance(config.max_iterations, int)
    assert config.window_factor == 2.5
    path.write_text('{"max_iterations": 40, "step_size": 2}')
    with pytest.raises(ConfigurationError, match='step_size'):
        SearchConfig.load(path)
    with pytest.raises(ConfigurationError, match='grid_probes must be at least 1'):
        SearchConfig(grid_probes=0)

def test_logging_setup(tmp_path):
    log_file = tmp_path / 'logs' / 'pygctp.log'
    logger = setup_logging('DEBUG', log_file=log_file)
    assert logger.name == 'pygctp'
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    get_logger('pygctp.coords').debug('message for the log file')
    set_log_level(logging.WARNING)
    assert all(h.level == logging.WARNING for h in logger.handlers)
    disable_logging()
    assert logger.disabled
    enable_logging()
    assert not logger.disabled
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    assert log_file.exists()
