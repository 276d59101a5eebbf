"""Edges across which map lines must be cut.

A projection with an edge inside the data grid (the limb of a disk, the
seam of a geographic grid) supplies a :class:`BoundaryHandler`. Line and
polygon renderers ask it whether a segment between two locations crosses
the edge, and use its splitter geometry to cut polygons there.
"""
import threading

import shapely.geometry
import shapely.ops

from pygctp.logging_config import get_logger

logger = get_logger(__name__)

# Tolerance in degrees for geometry operations in (lon, lat) space.
GEOMETRY_EPSILON = 1.0e-8


def line_geometry(locations):
    """Line geometry in (lon, lat) for a list of EarthLocations.

    The line is broken wherever consecutive points cross the
    antimeridian, so no piece wraps around the map.

    Returns
    -------
    geom : shapely geometry or None
        None if no piece has two or more points.
    """
    pieces = [[]]
    prev = None
    for loc in locations:
        if prev is not None and prev.crosses_antimeridian(loc):
            pieces.append([])
        pieces[-1].append((loc.lon, loc.lat))
        prev = loc
    lines = [shapely.geometry.LineString(coords) for coords in pieces if len(coords) > 1]
    if not lines:
        return None
    return shapely.ops.unary_union(lines)


class BoundaryHandler(object):
    """Cut test and splitter geometry for a projection edge.

    Parameters
    ----------
    cut_test : callable
        ``cut_test(a, b)`` takes two EarthLocations and returns True if
        the segment between them crosses the edge.
    lines : list of list of EarthLocation, optional
        Polylines along the edge, used to build the splitter.
    splitter : shapely geometry, optional
        Splitting polygon supplied directly, in place of one buffered from
        ``lines``.
    """

    def __init__(self, cut_test, lines=None, splitter=None):
        self.cut_test = cut_test
        self.cut_lines = None
        self._splitter = splitter
        self._lock = threading.Lock()
        for line in lines or []:
            self.add_cut_line(line)

    def add_cut_line(self, locations):
        geom = line_geometry(locations)
        if geom is None:
            return
        if self.cut_lines is None:
            self.cut_lines = geom
        else:
            self.cut_lines = self.cut_lines.union(geom)
        logger.debug('Added cut line of size %d with %d geometries',
                     len(locations), len(getattr(geom, 'geoms', [geom])))

    def is_boundary_cut(self, a, b):
        """True if the segment from ``a`` to ``b`` crosses the edge."""
        return self.cut_test(a, b)

    @property
    def splitter(self):
        """Polygon covering the edge, for splitting geometries along it.

        A thin buffer around the cut lines, built on first use.
        """
        with self._lock:
            if self._splitter is None and self.cut_lines is not None:
                self._splitter = self.cut_lines.buffer(
                    GEOMETRY_EPSILON*2, quad_segs=1,
                    cap_style='square',
                    join_style='bevel')
            return self._splitter

    def split_line(self, locations):
        """Split a polyline wherever one of its segments is cut.

        Parameters
        ----------
        locations : list of EarthLocation

        Returns
        -------
        pieces : list of list of EarthLocation
        """
        pieces = []
        current = []
        for loc in locations:
            if current and self.is_boundary_cut(current[-1], loc):
                pieces.append(current)
                current = []
            current.append(loc)
        if current:
            pieces.append(current)
        return pieces
