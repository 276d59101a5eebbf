from pygctp.config import SearchConfig
from pygctp.coords import DataLocation, EarthLocation, lon_range
from pygctp.exceptions import ConfigurationError
from pygctp.trans.swath import SearchOutcome, SearchSession, SwathProjection, median
import math
import pytest
import numpy as np
import xarray as xr

swath_dims = (50, 60)
rows, cols = np.meshgrid(np.arange(swath_dims[0]), np.arange(swath_dims[1]), indexing='ij')
# 0.05 degree pixels, north up, lat 40 to 37.55 and lon -100 to -97.05
test_lat = 40.0 - 0.05*rows
test_lon = -100.0 + 0.05*cols
anti_lon = lon_range(178.5 + 0.05*cols)


@pytest.fixture(scope='module')
def swath():
    return SwathProjection(test_lat, test_lon, SearchConfig(seed=1))


def test_properties(swath):
    assert swath.dims == swath_dims
    assert swath.describe() == 'swath'
    assert swath.north_is_up
    # A tenth of the column resolution at the center, about 4.3 km
    assert 0.4 < swath.tolerance < 0.45

def test_to_earth(swath):
    loc = swath.to_earth(DataLocation(20, 30))
    assert np.isclose(loc.lat, 39.0)
    assert np.isclose(loc.lon, -98.5)
    loc = swath.to_earth(DataLocation(20.5, 30))
    assert np.isclose(loc.lat, 38.975)
    assert np.isclose(loc.lon, -98.5)
    # Half a pixel past the edge is extrapolated, beyond that is invalid
    loc = swath.to_earth(DataLocation(-0.5, 0))
    assert np.isclose(loc.lat, 40.025)
    assert not swath.to_earth(DataLocation(-1, 0)).is_valid()
    assert not swath.to_earth(DataLocation(0, 60)).is_valid()

def test_to_earth_arrays(swath):
    lats, lons = swath.to_earth_arrays([0, 20, 49, -2], [0, 30, 59, 0])
    assert np.allclose(lats[:3], [40.0, 39.0, 37.55])
    assert np.allclose(lons[:3], [-100.0, -98.5, -97.05])
    assert math.isnan(lats[3]) and math.isnan(lons[3])

def test_pixel_center_closest(swath):
    assert swath.closest(EarthLocation(39.0, -98.5)) == DataLocation(20, 30)
    assert swath.closest(EarthLocation(39.01, -98.49)) == DataLocation(20, 30)
    assert swath.closest(EarthLocation(37.6, -97.1)) == DataLocation(48, 58)

def test_midpoint_search(swath):
    result = swath.search(EarthLocation(38.975, -98.5))
    assert result.outcome == SearchOutcome.SUCCESS
    assert result.distance <= swath.tolerance
    assert abs(result.location.row - 20.5) < 0.15
    assert abs(result.location.col - 30.0) < 0.15
    loc = swath.to_data(EarthLocation(38.975, -98.5))
    assert abs(loc.row - 20.5) < 0.15

def test_session_hint(swath):
    session = SearchSession()
    first = swath.search(EarthLocation(38.0, -99.0), session)
    assert first.outcome == SearchOutcome.SUCCESS
    assert session.last == first.location
    second = swath.search(EarthLocation(38.02, -98.98), session)
    assert second.outcome == SearchOutcome.SUCCESS
    assert swath.search(EarthLocation(0.0, 50.0), session).outcome == SearchOutcome.NOT_FOUND
    assert session.last is None

def test_outside_coverage(swath):
    target = EarthLocation(0.0, 50.0)
    assert not swath.is_covered(target)
    assert swath.is_covered(EarthLocation(39.0, -98.5))
    result = swath.search(target)
    assert result.outcome == SearchOutcome.NOT_FOUND
    assert not result.location.is_valid()
    assert not swath.closest(target).is_valid()
    assert not swath.to_data(target).is_valid()
    assert not swath.to_data(EarthLocation.invalid()).is_valid()

def test_windowed(swath):
    result = swath.closest_windowed(EarthLocation(39.0, -98.5))
    assert result.outcome == SearchOutcome.SUCCESS
    assert result.location == DataLocation(20, 30)
    result = swath.closest_windowed(EarthLocation(38.01, -97.61))
    assert result.outcome == SearchOutcome.SUCCESS
    assert result.location == DataLocation(40, 48)

def test_windowed_far_target(swath):
    result = swath.closest_windowed(EarthLocation(-40.0, 80.0))
    assert result.outcome != SearchOutcome.SUCCESS
    assert not result.location.is_valid()

def test_exhaustive(swath):
    result = swath.closest_exhaustive(EarthLocation(39.01, -98.49))
    assert result.outcome == SearchOutcome.SUCCESS
    assert result.location == DataLocation(20, 30)
    assert result.distance < 2.0
    result = swath.closest_exhaustive(EarthLocation.invalid())
    assert result.outcome == SearchOutcome.NOT_FOUND

def test_searches_agree(swath):
    for lat, lon in [(39.5, -99.7), (38.21, -97.34), (37.8, -98.0)]:
        target = EarthLocation(lat, lon)
        exhaustive = swath.closest_exhaustive(target).location
        assert swath.closest(target) == exhaustive
        assert swath.closest_windowed(target).location == exhaustive

def test_missing_geolocation():
    lat = test_lat.copy()
    lon = test_lon.copy()
    lat[10:12, :] = np.nan
    lon[10:12, :] = np.nan
    swath = SwathProjection(lat, lon)
    result = swath.closest_exhaustive(EarthLocation(39.0, -98.5))
    assert result.location == DataLocation(20, 30)
    assert swath.closest(EarthLocation(39.0, -98.5)) == DataLocation(20, 30)

def test_antimeridian():
    swath = SwathProjection(test_lat, anti_lon)
    target = EarthLocation(39.0, -179.0)
    assert swath.is_covered(target)
    assert swath.closest(target) == DataLocation(20, 50)
    assert swath.closest_exhaustive(target).location == DataLocation(20, 50)
    loc = swath.to_earth(DataLocation(20, 30))
    assert np.isclose(loc.lon, -180.0) or np.isclose(loc.lon, 180.0)

def test_set_tolerance(swath):
    tolerance = swath.tolerance
    try:
        swath.set_tolerance(1e-3)
        assert swath.tolerance == 1e-3
    finally:
        swath.set_tolerance(tolerance)

def test_bad_arrays():
    with pytest.raises(ConfigurationError):
        SwathProjection(np.zeros((3, 3)), np.zeros((3, 4)))
    with pytest.raises(ConfigurationError):
        SwathProjection(np.zeros(5), np.zeros(5))
    with pytest.raises(ConfigurationError):
        SwathProjection(np.zeros((1, 5)), np.zeros((1, 5)))

def test_from_dataset():
    ds = xr.Dataset({'latitude': (('y', 'x'), test_lat), 'longitude': (('y', 'x'), test_lon)})
    swath = SwathProjection.from_dataset(ds, lat='latitude', lon='longitude', scan_length=10)
    assert swath.dims == swath_dims
    assert swath.search_size_max == 30
    assert swath.closest(EarthLocation(39.0, -98.5)) == DataLocation(20, 30)

def test_median():
    assert math.isnan(median([]))
    assert median([3.0, 1.0, 2.0]) == 2.0

def test_windowed_repeated_rows():
    # A stuck scan: every row repeats the same geolocation
    lat = np.repeat(test_lat[20:21, :], swath_dims[0], axis=0)
    lon = test_lon.copy()
    swath = SwathProjection(lat, lon, SearchConfig(seed=1))
    result = swath.closest_windowed(EarthLocation(39.0, -98.5))
    assert result.outcome == SearchOutcome.NOT_FOUND
    assert not result.location.is_valid()
    # Same when the first window already fits the final scan
    swath = SwathProjection(lat, lon, SearchConfig(min_search_size=60))
    assert swath.closest_windowed(EarthLocation(39.0, -98.5)).outcome == SearchOutcome.NOT_FOUND

def test_windowed_partly_repeated_rows():
    lat = test_lat.copy()
    lat[21:40, :] = lat[20, :]
    swath = SwathProjection(lat, test_lon, SearchConfig(seed=1))
    target = EarthLocation(39.0, -98.5)
    result = swath.closest_windowed(target)
    if result.outcome == SearchOutcome.SUCCESS:
        assert result.location.is_valid()
        assert result.distance < 4.4
    else:
        assert not result.location.is_valid()


# Rows about 5 km apart and columns about 1 km apart
aniso_rows, aniso_cols = np.meshgrid(np.arange(20), np.arange(20), indexing='ij')
aniso_lat = 40.0 - 0.045*aniso_rows
aniso_lon = -100.0 + 0.0117*aniso_cols


def test_windowed_undetermined():
    # The final scan covers the whole grid
    swath = SwathProjection(aniso_lat, aniso_lon, SearchConfig(min_search_size=20))
    # 2 km south of the pixel at (10, 10), between the two resolutions
    target = EarthLocation(aniso_lat[10, 10] - 0.018, aniso_lon[10, 10])
    result = swath.closest_windowed(target)
    assert result.outcome == SearchOutcome.UNDETERMINED
    assert not result.location.is_valid()
    assert 1.9 < result.distance < 2.1
    # Off the pixel centers by less than the column resolution
    target = EarthLocation(aniso_lat[10, 10] - 0.003, aniso_lon[10, 10])
    result = swath.closest_windowed(target)
    assert result.outcome == SearchOutcome.SUCCESS
    assert result.location == DataLocation(10, 10)
    # Farther than the row resolution from every pixel
    target = EarthLocation(aniso_lat[10, 0], aniso_lon[10, 0] - 0.2)
    result = swath.closest_windowed(target)
    assert result.outcome == SearchOutcome.UNDETERMINED
    assert result.distance > 10.0
