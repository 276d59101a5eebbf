from pygctp.coords import EarthLocation
from pygctp.trans.boundary import BoundaryHandler, line_geometry
import shapely.geometry
import numpy as np


def antimeridian_cut(a, b):
    return a.crosses_antimeridian(b)


def test_line_geometry_single():
    locs = [EarthLocation(0, 10), EarthLocation(5, 20), EarthLocation(10, 30)]
    geom = line_geometry(locs)
    assert geom.geom_type == 'LineString'
    assert np.allclose(geom.coords[0], (10, 0))

def test_line_geometry_antimeridian():
    locs = [EarthLocation(0, 170), EarthLocation(0, 179), EarthLocation(0, -179), EarthLocation(0, -170)]
    geom = line_geometry(locs)
    assert geom.geom_type == 'MultiLineString'
    assert len(geom.geoms) == 2
    # No piece spans the map
    assert all(piece.length < 20 for piece in geom.geoms)

def test_line_geometry_empty():
    assert line_geometry([]) is None
    assert line_geometry([EarthLocation(0, 0)]) is None
    # Lone points either side of the break
    assert line_geometry([EarthLocation(0, 179), EarthLocation(0, -179)]) is None

def test_handler_cut_test():
    handler = BoundaryHandler(antimeridian_cut)
    assert handler.is_boundary_cut(EarthLocation(0, 179), EarthLocation(0, -179))
    assert not handler.is_boundary_cut(EarthLocation(0, 10), EarthLocation(0, 20))
    assert handler.splitter is None

def test_handler_splitter():
    meridian = [EarthLocation(lat, 180.0) for lat in np.linspace(-80, 80, 9)]
    handler = BoundaryHandler(antimeridian_cut, [meridian])
    splitter = handler.splitter
    assert splitter is handler.splitter
    assert splitter.contains(shapely.geometry.Point(-180.0, 0.0))
    assert not splitter.contains(shapely.geometry.Point(-179.0, 0.0))

def test_handler_supplied_splitter():
    box = shapely.geometry.box(-1, -90, 1, 90)
    handler = BoundaryHandler(antimeridian_cut, splitter=box)
    assert handler.splitter is box

def test_add_cut_lines():
    handler = BoundaryHandler(antimeridian_cut)
    handler.add_cut_line([EarthLocation(0, 0), EarthLocation(10, 0)])
    handler.add_cut_line([EarthLocation(20, 0), EarthLocation(30, 0)])
    handler.add_cut_line([EarthLocation(40, 0)])
    assert len(handler.cut_lines.geoms) == 2

def test_split_line():
    handler = BoundaryHandler(antimeridian_cut)
    locs = [EarthLocation(0, 170), EarthLocation(0, 179), EarthLocation(0, -179),
            EarthLocation(0, -170), EarthLocation(0, -160)]
    pieces = handler.split_line(locs)
    assert [len(piece) for piece in pieces] == [2, 3]
    assert pieces[1][0] == EarthLocation(0, -179)
    assert handler.split_line([]) == []
