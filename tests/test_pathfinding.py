"""Tests for grid A* pathfinding."""

import pytest

from animgraph import GridKey, PathfindingConfig, Rect, find_route
from animgraph.geometry import path_intersects_rects
from animgraph.pathfinding import SearchGrid, manhattan_route, smooth_path

WALL = Rect(80, -50, 120, 50)


class TestSearchGrid:
    """Tests for search grid construction."""

    def test_grid_key_is_a_tuple(self):
        assert GridKey(1, 2) == (1, 2)
        assert GridKey(1, 2) in {(1, 2)}
        assert GridKey(3, 4).col == 3

    def test_start_is_origin_cell(self):
        grid = SearchGrid.generate((10, 10), (110, 10), [], PathfindingConfig())
        assert GridKey(0, 0) in grid.graph
        assert grid.position(GridKey(0, 0)) == (10, 10)
        assert grid.position(GridKey(2, -1)) == (50, -10)

    def test_cells_inside_obstacles_are_left_out(self):
        grid = SearchGrid.generate((0, 0), (200, 0), [WALL], PathfindingConfig())
        assert GridKey(5, 0) not in grid.graph
        assert GridKey(5, -3) in grid.graph

    def test_budget_exceeded(self):
        config = PathfindingConfig(max_grid_cells=10)
        assert SearchGrid.generate((0, 0), (200, 0), [], config) is None


class TestFindRoute:
    """Tests for find_route."""

    def test_straight_line_without_obstacles(self):
        assert find_route((0, 0), (100, 0), []) == [(0, 0), (100, 0)]

    def test_routes_around_obstacle(self):
        points = find_route((0, 0), (200, 0), [WALL])
        assert points[0] == (0, 0)
        assert points[-1] == (200, 0)
        assert len(points) > 2
        assert not path_intersects_rects(points, [WALL])

    def test_off_grid_goal_is_reached_exactly(self):
        points = find_route((0, 0), (105, 33), [])
        assert points == [(0, 0), (105, 33)]

    def test_unsmoothed_path_stays_on_grid(self):
        config = PathfindingConfig(smoothing=False)
        points = find_route((0, 0), (100, 0), [], config)
        assert points == [(0, 0), (20, 0), (40, 0), (60, 0), (80, 0), (100, 0)]

    def test_enclosed_goal_has_no_route(self):
        walls = [
            Rect(-50, -50, 50, -40),
            Rect(-50, 40, 50, 50),
            Rect(-50, -50, -40, 50),
            Rect(40, -50, 50, 50),
        ]
        assert find_route((-300, 0), (0, 0), walls) is None

    def test_goal_inside_obstacle_has_no_route(self):
        assert find_route((0, 0), (100, 0), [WALL]) is None

    def test_budget_exceeded_gives_none(self):
        config = PathfindingConfig(max_grid_cells=10)
        assert find_route((0, 0), (200, 0), [], config) is None


class TestSmoothPath:
    """Tests for line-of-sight smoothing."""

    def test_collinear_points_merge(self):
        assert smooth_path([(0, 0), (20, 0), (40, 0), (60, 0)], []) == [(0, 0), (60, 0)]

    def test_keeps_bend_around_obstacle(self):
        points = [(0, 0), (0, 100), (100, 100)]
        assert smooth_path(points, [Rect(20, 20, 80, 80)]) == points

    def test_short_paths_untouched(self):
        assert smooth_path([(0, 0), (5, 5)], []) == [(0, 0), (5, 5)]


class TestManhattanRoute:
    """Tests for the obstacle-blind fallback route."""

    def test_horizontal_first(self):
        assert manhattan_route((0, 0), (100, 50)) == [(0, 0), (100, 0), (100, 50)]

    def test_vertical_first(self):
        assert manhattan_route((0, 0), (100, 50), horizontal_first=False) == [
            (0, 0), (0, 50), (100, 50),
        ]

    def test_aligned_endpoints(self):
        assert manhattan_route((0, 0), (100, 0)) == [(0, 0), (100, 0)]

    def test_coincident_endpoints_are_rejected(self):
        with pytest.raises(ValueError):
            manhattan_route((5, 5), (5, 5))
