"""Base class for transforms between data grid and earth locations.

An earth transform maps a ``(row, col)`` location in a 2D data grid to
a geodetic location and back. Locations that cannot be transformed come
back marked invalid (NaN coordinates) rather than raising.
"""
import numpy as np

from pygctp.coords import DataLocation, EarthLocation
from pygctp.datum import WGS84, create_datum
from pygctp.logging_config import get_logger

logger = get_logger(__name__)


class EarthTransform(object):
    """Data grid to earth location transform.

    Parameters
    ----------
    dims : sequence of int
        Grid dimensions ``(rows, cols)``.
    datum : pygctp.datum.Datum, optional
        Datum of the earth locations, WGS 84 by default.

    Attributes
    ----------
    boundary_handler : pygctp.trans.boundary.BoundaryHandler or None
        Edge handling for transforms with an edge inside the grid.
    """

    def __init__(self, dims, datum=None):
        self.dims = tuple(int(d) for d in dims)
        self.datum = datum if datum is not None else create_datum(WGS84)
        self.boundary_handler = None

    def describe(self):
        """Short description of the transform type."""
        raise NotImplementedError

    def _to_earth(self, data_loc):
        raise NotImplementedError

    def _to_data(self, earth_loc):
        raise NotImplementedError

    def to_earth(self, data_loc):
        """Earth location of a data location.

        Parameters
        ----------
        data_loc : pygctp.coords.DataLocation

        Returns
        -------
        earth_loc : pygctp.coords.EarthLocation
            Invalid if no conversion is possible.
        """
        if not data_loc.is_valid():
            return EarthLocation(np.nan, np.nan, self.datum)
        lat, lon = self._to_earth(data_loc)
        return EarthLocation(lat, lon, self.datum)

    def to_data(self, earth_loc):
        """Data location of an earth location.

        Locations on another datum are shifted to this transform's datum
        first.

        Parameters
        ----------
        earth_loc : pygctp.coords.EarthLocation

        Returns
        -------
        data_loc : pygctp.coords.DataLocation
            Invalid if no conversion is possible.
        """
        if not earth_loc.is_valid():
            return DataLocation.invalid()
        if earth_loc.datum is not None and earth_loc.datum != self.datum:
            earth_loc = earth_loc.to_datum(self.datum)
        row, col = self._to_data(earth_loc)
        return DataLocation(row, col)

    def to_earth_arrays(self, rows, cols):
        """Latitude and longitude arrays for arrays of data coordinates."""
        rows, cols = np.broadcast_arrays(np.asarray(rows, dtype=float),
                                         np.asarray(cols, dtype=float))
        lats = np.empty(rows.shape)
        lons = np.empty(rows.shape)
        for idx in np.ndindex(rows.shape):
            loc = self.to_earth(DataLocation(rows[idx], cols[idx]))
            lats[idx], lons[idx] = loc.lat, loc.lon
        return lats, lons

    def to_data_arrays(self, lats, lons):
        """Row and column arrays for arrays of latitude and longitude."""
        lats, lons = np.broadcast_arrays(np.asarray(lats, dtype=float),
                                         np.asarray(lons, dtype=float))
        rows = np.empty(lats.shape)
        cols = np.empty(lats.shape)
        for idx in np.ndindex(lats.shape):
            loc = self.to_data(EarthLocation(lats[idx], lons[idx], self.datum))
            rows[idx], cols[idx] = loc.row, loc.col
        return rows, cols

    def closest(self, earth_loc):
        """Nearest whole grid location to an earth location.

        Returns an invalid location when the nearest point is outside the
        grid.
        """
        data_loc = self.to_data(earth_loc)
        if not data_loc.is_valid():
            return DataLocation.invalid()
        data_loc = data_loc.round()
        if not data_loc.is_contained(self.dims):
            return DataLocation.invalid()
        return data_loc

    def distance(self, loc1, loc2):
        """Great circle distance in km between two data locations."""
        return self.to_earth(loc1).distance(self.to_earth(loc2))

    def get_resolution(self, data_loc):
        """Resolution in km per pixel along the rows and the columns.

        Uses centered differences half a pixel either side of the
        location.
        """
        row, col = data_loc.row, data_loc.col
        return (self.distance(DataLocation(row - 0.5, col), DataLocation(row + 0.5, col)),
                self.distance(DataLocation(row, col - 0.5), DataLocation(row, col + 0.5)))

    def subset(self, origin, dims):
        """Transform for a subset of the grid starting at ``origin``."""
        raise NotImplementedError('Transform subset not implemented for %s'
                                  % type(self).__name__)

    def has_boundary_check(self):
        return self.boundary_handler is not None

    def is_boundary_cut(self, a, b):
        """True if the segment between two earth locations crosses an edge.

        Always False without a boundary handler.
        """
        if self.boundary_handler is None:
            return False
        return self.boundary_handler.is_boundary_cut(a, b)

    def boundary_splitter(self):
        """Polygon for splitting geometries along the edge, or None."""
        if self.boundary_handler is None:
            return None
        return self.boundary_handler.splitter
