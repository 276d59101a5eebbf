"""Earth transforms for swath data with per-pixel geolocation.

Satellite swaths come with latitude and longitude arrays instead of a
closed form projection. Going from a data location to the earth is an
interpolation; going back is a search. Two searches are provided:

* :meth:`SwathProjection.search`, a gradient descent on the distance to
  the target, seeded from fixed points in the swath and from the last
  result of the caller's :class:`SearchSession`;
* :meth:`SwathProjection.closest_windowed`, a probe and shrink window
  search finished by a small exhaustive scan, which is slower but does
  not depend on a smooth distance field. It also serves to check the
  gradient search.

:meth:`SwathProjection.closest_exhaustive` visits every pixel through a
k-d tree and is the reference answer for both.
"""
import enum
import math
import threading
from collections import namedtuple

import numpy as np
import shapely.geometry
import shapely.prepared
import xarray as xr
from scipy.interpolate import RegularGridInterpolator
from sklearn.neighbors import KDTree

from pygctp.config import SearchConfig
from pygctp.coords import DataLocation, distance, from_unit_vector, to_unit_vector
from pygctp.exceptions import ConfigurationError
from pygctp.logging_config import get_logger
from pygctp.trans.transform import EarthTransform

logger = get_logger(__name__)

# Fractions of the row count where the search seeds sit, on the center column.
SEED_ROW_FRACTIONS = (0.125, 0.375, 0.625, 0.875)

# Buffer in degrees around the swath edge polygon.
COVERAGE_BUFFER = 1.0e-3


class SearchOutcome(enum.Enum):
    """Outcome of a nearest data location search."""
    SUCCESS = 0
    UNDETERMINED = 1
    NOT_FOUND = 2


SearchResult = namedtuple('SearchResult', ['location', 'outcome', 'distance'])
SearchResult.__doc__ = """Result of a swath search.

``location`` is a DataLocation, invalid unless ``outcome`` is
``SearchOutcome.SUCCESS``. ``distance`` is the distance in km from the
target to the best location examined, NaN if none was.
"""


class SearchSession(object):
    """Per caller search state.

    Holds the last successful result, used to seed the next search.
    Consecutive targets are usually close together, so this saves most
    of the descent. A session must not be shared between threads.
    """

    def __init__(self):
        self.last = None

    def reset(self):
        self.last = None


def _as_array(values):
    if isinstance(values, xr.DataArray):
        values = values.values
    return np.asarray(values, dtype=float)


def median(values):
    """Median of a list of values, NaN for an empty list."""
    if len(values) == 0:
        return math.nan
    return float(np.median(values))


def _min_defined(a, b):
    """Smaller of two values, ignoring a NaN."""
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return min(a, b)


def _usable_resolution(res):
    return math.isfinite(res) and res > 0


def _round(x):
    return int(math.floor(x + 0.5))


class SwathProjection(EarthTransform):
    """Earth transform for a swath with latitude and longitude arrays.

    Parameters
    ----------
    lat, lon : array_like or xarray.DataArray
        2D latitude and longitude in degrees, one value per pixel. NaN
        marks missing geolocation.
    config : pygctp.config.SearchConfig, optional
        Search tuning, the defaults otherwise.
    scan_length : int, default=1
        Rows between geolocation discontinuities (the scan length of a
        scanning sensor), used to size the windowed search.

    Raises
    ------
    ConfigurationError
        If the arrays are not 2D with the same shape and at least two
        rows and columns.
    """

    def __init__(self, lat, lon, config=None, scan_length=1):
        lat = _as_array(lat)
        lon = _as_array(lon)
        if lat.ndim != 2 or lat.shape != lon.shape:
            raise ConfigurationError("Latitude and longitude must be 2D arrays of the same shape")
        if min(lat.shape) < 2:
            raise ConfigurationError("Swath must have at least 2 rows and 2 columns")
        super().__init__(lat.shape)
        self.config = config if config is not None else SearchConfig()
        self.lat = lat
        self.lon = lon
        self.scan_length = int(scan_length)
        self.search_size_max = max(self.scan_length*3, self.config.min_search_size)

        rows, cols = self.dims
        self._vectors = to_unit_vector(lat, lon)
        self._interp = RegularGridInterpolator(
            (np.arange(rows, dtype=float), np.arange(cols, dtype=float)), self._vectors,
            method='linear', bounds_error=False, fill_value=None)
        self._local = threading.local()
        self._tree = None
        self._tree_index = None
        self._tree_lock = threading.Lock()

        self.north_is_up = self._north_flag()
        self._reset_tolerance()
        self.coverage = self._coverage()

    @classmethod
    def from_dataset(cls, ds, lat='lat', lon='lon', **kwargs):
        """Swath from the latitude and longitude variables of a dataset."""
        return cls(ds[lat], ds[lon], **kwargs)

    def describe(self):
        return 'swath'

    def _north_flag(self):
        rows, cols = self.dims
        center_row = (rows - 1)//2
        center_col = (cols - 1)//2
        column = self.lat[:, center_col]
        above = column[:center_row][::-1]
        below = column[center_row + 1:]
        top = next((v for v in above if not math.isnan(v)), math.nan)
        bottom = next((v for v in below if not math.isnan(v)), math.nan)
        return bool(top > bottom)

    def _reset_tolerance(self):
        rows, cols = self.dims
        center = DataLocation((rows - 1)/2.0, (cols - 1)/2.0)
        self.tolerance = min(self.get_resolution(center))*self.config.tolerance_factor
        self.seed_locations = [DataLocation(rows*f, cols//2) for f in SEED_ROW_FRACTIONS]
        self.seed_earth_locations = [self.to_earth(loc) for loc in self.seed_locations]
        logger.debug('Swath %r search tolerance %.4f km', self.dims, self.tolerance)

    def set_tolerance(self, tolerance):
        """Set the gradient search tolerance in km."""
        self.tolerance = tolerance

    def _coverage(self):
        """Polygon in (lon, lat) around the swath edges, or None.

        None when the edges are missing or circle a pole, in which case
        every target is searched.
        """
        lat, lon = self.lat, self.lon
        ring_lat = np.concatenate([lat[0, :], lat[1:, -1], lat[-1, -2::-1], lat[-2:0:-1, 0]])
        ring_lon = np.concatenate([lon[0, :], lon[1:, -1], lon[-1, -2::-1], lon[-2:0:-1, 0]])
        good = ~(np.isnan(ring_lat) | np.isnan(ring_lon))
        ring_lat, ring_lon = ring_lat[good], ring_lon[good]
        if len(ring_lat) < 3:
            logger.debug('Swath edges have no geolocation, coverage check disabled')
            return None
        ring_lon = np.degrees(np.unwrap(np.radians(ring_lon)))
        closing = ring_lon[-1] + (ring_lon[0] - ring_lon[-1] + 180) % 360 - 180
        if abs(closing - ring_lon[0]) > 180:
            logger.debug('Swath edges circle a pole, coverage check disabled')
            return None
        polygon = shapely.geometry.Polygon(zip(ring_lon, ring_lat))
        if not polygon.is_valid:
            polygon = polygon.buffer(0)
        return shapely.prepared.prep(polygon.buffer(COVERAGE_BUFFER))

    def is_covered(self, earth_loc):
        """True if an earth location may lie within the swath."""
        if self.coverage is None:
            return True
        return any(self.coverage.contains(shapely.geometry.Point(earth_loc.lon + shift, earth_loc.lat))
                   for shift in (0.0, -360.0, 360.0))

    def _to_earth(self, data_loc):
        rows, cols = self.dims
        if not (-0.5 <= data_loc.row <= rows - 0.5 and -0.5 <= data_loc.col <= cols - 0.5):
            return math.nan, math.nan
        vector = self._interp([[data_loc.row, data_loc.col]])[0]
        lat, lon = from_unit_vector(vector)
        return float(lat), float(lon)

    def to_earth_arrays(self, rows, cols):
        rows, cols = np.broadcast_arrays(np.asarray(rows, dtype=float),
                                         np.asarray(cols, dtype=float))
        vectors = self._interp(np.stack([rows.ravel(), cols.ravel()], axis=-1))
        lat, lon = from_unit_vector(vectors)
        nrows, ncols = self.dims
        outside = ((rows < -0.5) | (rows > nrows - 0.5) | (cols < -0.5) | (cols > ncols - 0.5)).ravel()
        lat = np.where(outside, np.nan, lat)
        lon = np.where(outside, np.nan, lon)
        return lat.reshape(rows.shape), lon.reshape(rows.shape)

    def _default_session(self):
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._local.session = SearchSession()
        return session

    def _to_data(self, earth_loc):
        result = self.search(earth_loc)
        return result.location.row, result.location.col

    def closest(self, earth_loc, session=None):
        """Nearest whole grid location, invalid unless the search succeeds."""
        result = self.search(earth_loc, session)
        if result.outcome != SearchOutcome.SUCCESS:
            return DataLocation.invalid()
        return result.location.round().truncate(self.dims)

    def search(self, earth_loc, session=None):
        """Data location of an earth location by gradient descent.

        Parameters
        ----------
        earth_loc : pygctp.coords.EarthLocation
        session : SearchSession, optional
            Holds the seed hint. Defaults to a session private to the
            calling thread.

        Returns
        -------
        result : SearchResult
            ``SUCCESS`` if the distance came within the tolerance,
            ``NOT_FOUND`` otherwise.
        """
        if session is None:
            session = self._default_session()
        if not earth_loc.is_valid() or not self.is_covered(earth_loc):
            session.last = None
            return SearchResult(DataLocation.invalid(), SearchOutcome.NOT_FOUND, math.nan)

        cfg = self.config
        dims = self.dims

        # Start from the hint or the nearest seed.
        init = None
        best = math.inf
        if session.last is not None:
            best = earth_loc.distance(self.to_earth(session.last))
            if math.isfinite(best):
                init = session.last
            else:
                best = math.inf
        for seed, seed_earth in zip(self.seed_locations, self.seed_earth_locations):
            dist = earth_loc.distance(seed_earth)
            if dist < best:
                init, best = seed, dist
        if init is None:
            session.last = None
            return SearchResult(DataLocation.invalid(), SearchOutcome.NOT_FOUND, math.nan)

        loc = init
        d = best
        last_d = d
        inc = [0.5, 0.5]
        iteration = 0
        while d > self.tolerance and iteration < cfg.max_iterations:
            x1 = loc.translate(-inc[0], 0).truncate(dims)
            x2 = loc.translate(inc[0], 0).truncate(dims)
            y1 = loc.translate(0, -inc[1]).truncate(dims)
            y2 = loc.translate(0, inc[1]).truncate(dims)
            x1_geo, x2_geo = self.to_earth(x1), self.to_earth(x2)
            y1_geo, y2_geo = self.to_earth(y1), self.to_earth(y2)
            dx = x2.row - x1.row
            dy = y2.col - y1.col

            # Resolution in km/pixel and unit gradient of the distance.
            res = (x1_geo.distance(x2_geo)/dx, y1_geo.distance(y2_geo)/dy)
            grad = ((earth_loc.distance(x2_geo) - earth_loc.distance(x1_geo))/dx,
                    (earth_loc.distance(y2_geo) - earth_loc.distance(y1_geo))/dy)
            mag = math.hypot(grad[0], grad[1])
            if not mag > 0 or not (res[0] > 0 and res[1] > 0):
                break

            loc = loc.translate(-(d/res[0])*grad[0]/mag, -(d/res[1])*grad[1]/mag).truncate(dims)
            d = earth_loc.distance(self.to_earth(loc))
            if not math.isfinite(d) or last_d == 0:
                break
            if abs((last_d - d)/last_d) < cfg.stagnation_limit:
                break
            last_d = d

            for i in (0, 1):
                if d < inc[i]*cfg.step_shrink_factor*res[i]:
                    inc[i] = (d/2)/res[i]
            iteration += 1

        if not d <= self.tolerance:
            logger.debug('Search for %r stopped at %.4f km after %d iterations',
                         earth_loc, d, iteration)
            session.last = None
            return SearchResult(DataLocation.invalid(), SearchOutcome.NOT_FOUND, d)
        session.last = loc
        return SearchResult(loc, SearchOutcome.SUCCESS, d)

    def _median_resolution(self, loc):
        """Median row and column resolution over the 3x3 neighborhood."""
        dims = self.dims
        start = loc.translate(-1, -1).truncate(dims)
        end = loc.translate(1, 1).truncate(dims)
        row_res, col_res = [], []
        for row in range(int(start.row), int(end.row) + 1):
            for col in range(int(start.col), int(end.col) + 1):
                res = self.get_resolution(DataLocation(row, col))
                if math.isfinite(res[0]):
                    row_res.append(res[0])
                if math.isfinite(res[1]):
                    col_res.append(res[1])
        return median(row_res), median(col_res)

    def _span_resolution(self, a, b, index):
        span = (b.row - a.row) if index == 0 else (b.col - a.col)
        if span == 0:
            return math.nan
        return self.distance(a, b)/span

    def _window_resolution(self, loc, dist, res, index):
        """Resolution between the pixels ``dist/res`` either side of a location."""
        if not (res > 0 and math.isfinite(dist)):
            return math.nan
        radius = dist/res
        offset = (radius, 0) if index == 0 else (0, radius)
        a = loc.translate(-offset[0], -offset[1]).truncate(self.dims).round()
        b = loc.translate(offset[0], offset[1]).truncate(self.dims).round()
        return self._span_resolution(a, b, index)

    def closest_windowed(self, earth_loc):
        """Nearest grid location by probing a shrinking search window.

        Each pass probes random and gridded locations in the window,
        estimates the local resolution from the median over a 3x3
        neighborhood and over the distance to the target, and shrinks the
        window to ``window_factor`` times the best distance in pixels. A
        window that stops shrinking, or a resolution that cannot be
        computed, fails the search. Otherwise a final exhaustive scan
        around the best location settles the result, which is accepted
        only within the smaller of the row and column resolutions.

        Parameters
        ----------
        earth_loc : pygctp.coords.EarthLocation

        Returns
        -------
        result : SearchResult
        """
        cfg = self.config
        dims = self.dims
        rows, cols = dims
        rng = np.random.default_rng(cfg.seed)
        search_size_max = self.search_size_max

        min_row, max_row = 0, rows - 1
        min_col, max_col = 0, cols - 1
        window = (min_row, max_row, min_col, max_col)
        history = [window]
        failed = False
        target_loc = DataLocation((rows - 1)//2, (cols - 1)//2)
        target_res = None
        iteration = 0

        while (max(max_row - min_row + 1, max_col - min_col + 1) > search_size_max
               and iteration < cfg.window_max_iterations and not failed):
            row_span = max_row - min_row
            col_span = max_col - min_col
            probes = [DataLocation(min_row + _round(rng.random()*row_span),
                                   min_col + _round(rng.random()*col_span))
                      for _ in range(cfg.random_probes)]
            n = cfg.grid_probes
            for i in range(n):
                for j in range(n):
                    if i == n//2 and j == n//2:
                        continue
                    probes.append(DataLocation(min_row + _round((i + 1)*(1.0/(n + 1))*row_span),
                                               min_col + _round((j + 1)*(1.0/(n + 1))*col_span)))
            min_distance = math.inf
            for probe in probes:
                dist = earth_loc.distance(self.to_earth(probe))
                if dist < min_distance:
                    min_distance = dist
                    target_loc = probe

            if not math.isfinite(min_distance):
                failed = True
                continue
            median_row_res, median_col_res = self._median_resolution(target_loc)

            # Resolution over the span the target may be in, to widen the
            # window where it differs from the local value.
            window_row_res = self._window_resolution(target_loc, min_distance, median_row_res, 0)
            window_col_res = self._window_resolution(target_loc, min_distance, median_col_res, 1)

            row_res = _min_defined(median_row_res, window_row_res)
            col_res = _min_defined(median_col_res, window_col_res)
            if not (_usable_resolution(row_res) and _usable_resolution(col_res)):
                failed = True
                continue

            new_row_span = (min_distance/row_res)*cfg.window_factor
            new_col_span = (min_distance/col_res)*cfg.window_factor
            start = target_loc.translate(-new_row_span/2, -new_col_span/2).truncate(dims).round()
            end = target_loc.translate(new_row_span/2, new_col_span/2).truncate(dims).round()
            min_row = max(min_row, int(start.row))
            max_row = min(max_row, int(end.row))
            min_col = max(min_col, int(start.col))
            max_col = min(max_col, int(end.col))

            window = (min_row, max_row, min_col, max_col)
            history.append(window)
            if len(history) == 3:
                if history[-1] == history[0]:
                    failed = True
                else:
                    history.pop(0)
            iteration += 1
            logger.debug('Window pass %d: best %r at %.4f km, window %r',
                         iteration, target_loc, min_distance, window)
            target_res = (median_row_res, median_col_res)

        if failed:
            logger.debug('Window search failed for %r', earth_loc)
            return SearchResult(DataLocation.invalid(), SearchOutcome.NOT_FOUND, math.nan)

        half = search_size_max//2
        start = target_loc.translate(-half, -half).truncate(dims).round()
        end = target_loc.translate(half, half).truncate(dims).round()
        min_distance = math.inf
        for row in range(int(start.row), int(end.row) + 1):
            for col in range(int(start.col), int(end.col) + 1):
                loc = DataLocation(row, col)
                dist = earth_loc.distance(self.to_earth(loc))
                if dist < min_distance:
                    min_distance = dist
                    target_loc = loc

        if target_res is None:
            # The grid fit the final scan without any window passes.
            target_res = self._median_resolution(target_loc)
        if not all(_usable_resolution(res) for res in target_res):
            logger.debug('No resolution at %r for the search of %r', target_loc, earth_loc)
            return SearchResult(DataLocation.invalid(), SearchOutcome.NOT_FOUND, min_distance)
        if not min_distance <= max(target_res):
            logger.debug('Search for %r failed the max radius test', earth_loc)
            return SearchResult(DataLocation.invalid(), SearchOutcome.UNDETERMINED, min_distance)
        if not min_distance <= min(target_res):
            logger.debug('Search for %r is undetermined', earth_loc)
            return SearchResult(DataLocation.invalid(), SearchOutcome.UNDETERMINED, min_distance)
        return SearchResult(target_loc, SearchOutcome.SUCCESS, min_distance)

    def _kdtree(self):
        with self._tree_lock:
            if self._tree is None:
                vectors = self._vectors.reshape(-1, 3)
                index = np.flatnonzero(~np.isnan(vectors).any(axis=1))
                self._tree_index = index
                self._tree = KDTree(vectors[index]) if len(index) else None
            return self._tree, self._tree_index

    def closest_exhaustive(self, earth_loc):
        """Nearest pixel center over the whole grid.

        Returns
        -------
        result : SearchResult
            ``SUCCESS`` unless the swath has no geolocation at all.
        """
        tree, index = self._kdtree()
        if tree is None or not earth_loc.is_valid():
            return SearchResult(DataLocation.invalid(), SearchOutcome.NOT_FOUND, math.nan)
        target = to_unit_vector(earth_loc.lat, earth_loc.lon).reshape(1, 3)
        _, nearest = tree.query(target, k=1)
        flat = index[nearest[0][0]]
        row, col = np.unravel_index(flat, self.dims)
        dist = float(distance(earth_loc.lat, earth_loc.lon, self.lat[row, col], self.lon[row, col]))
        return SearchResult(DataLocation(row, col), SearchOutcome.SUCCESS, dist)

    def __repr__(self):
        return 'SwathProjection(dims=%r, tolerance=%.4g km)' % (self.dims, self.tolerance)

