"""Unit tests for the in-memory point store."""

import pytest

from inspection.exceptions import RQInputNotFoundError, RQValidationError
from modules.region_query.models import Box, InspectionPoint
from modules.region_query.point_store import InMemoryPointStore, PointStore


def make_point(point_id, x, y, group_id, category=1):
    return InspectionPoint(id=point_id, group_id=group_id, x=x, y=y, category=category)


class TestInMemoryPointStore:
    """Test range scans and containment on the in-memory store."""

    @pytest.fixture
    def points(self):
        return [
            make_point(1, 1, 1, group_id=1, category=1),
            make_point(2, 2, 2, group_id=1, category=2),
            make_point(3, 3, 3, group_id=2, category=1),
            make_point(4, 12, 3, group_id=2, category=1),
            make_point(5, 10, 10, group_id=3, category=2),
            make_point(6, 0, 10, group_id=3, category=2),
        ]

    @pytest.fixture
    def store(self, points):
        return InMemoryPointStore(points)

    def test_is_point_store(self, store):
        assert isinstance(store, PointStore)

    def test_counts(self, store):
        assert store.point_count() == 6
        assert store.group_ids() == {1, 2, 3}

    def test_range_scan_inclusive_bounds(self, store):
        box = Box(min_x=0, min_y=0, max_x=10, max_y=10)

        ids = {p.id for p in store.range_scan(box)}

        assert ids == {1, 2, 3, 5, 6}

    def test_range_scan_points_lie_in_box(self, store):
        box = Box(min_x=1.5, min_y=0, max_x=12, max_y=3)

        for point in store.range_scan(box):
            assert box.min_x <= point.x <= box.max_x
            assert box.min_y <= point.y <= box.max_y

    def test_range_scan_category(self, store):
        box = Box(min_x=0, min_y=0, max_x=10, max_y=10)

        assert {p.id for p in store.range_scan(box, category=2)} == {2, 5, 6}

    def test_range_scan_negative_category_is_ordinary_label(self):
        store = InMemoryPointStore([
            make_point(1, 1, 1, group_id=1, category=2),
            make_point(2, 2, 2, group_id=1, category=-1),
        ])
        box = Box(min_x=0, min_y=0, max_x=10, max_y=10)

        assert [p.id for p in store.range_scan(box, category=-1)] == [2]
        assert [p.id for p in store.range_scan(box)] == [1, 2]

    def test_range_scan_returns_ascending_ids(self):
        store = InMemoryPointStore([
            make_point(7, 1, 1, group_id=1),
            make_point(3, 1, 1, group_id=2),
            make_point(5, 1, 1, group_id=1),
        ])

        points = store.range_scan(Box(min_x=0, min_y=0, max_x=2, max_y=2))

        assert [p.id for p in points] == [3, 5, 7]

    def test_range_scan_groups(self, store):
        box = Box(min_x=0, min_y=0, max_x=20, max_y=20)

        assert {p.id for p in store.range_scan(box, group_ids={2, 3})} == {3, 4, 5, 6}

    def test_range_scan_empty_groups_unrestricted(self, store):
        box = Box(min_x=0, min_y=0, max_x=20, max_y=20)

        assert len(store.range_scan(box, group_ids=set())) == 6

    def test_range_scan_no_match(self, store):
        assert store.range_scan(Box(min_x=100, min_y=100, max_x=200, max_y=200)) == []

    def test_range_scan_returns_store_records(self, store, points):
        box = Box(min_x=1, min_y=1, max_x=1, max_y=1)

        assert store.range_scan(box) == [points[0]]

    def test_points_by_group(self, store):
        assert {p.id for p in store.points_by_group(2)} == {3, 4}
        assert store.points_by_group(99) == []

    def test_fully_contained_groups(self, store):
        box = Box(min_x=0, min_y=0, max_x=10, max_y=10)

        assert store.fully_contained_groups(box) == {1, 3}

    def test_fully_contained_groups_candidates(self, store):
        box = Box(min_x=0, min_y=0, max_x=10, max_y=10)

        assert store.fully_contained_groups(box, {2, 3}) == {3}
        assert store.fully_contained_groups(box, set()) == set()

    def test_fully_contained_matches_default_implementation(self, store):
        """The vectorized check agrees with the member-by-member default."""
        for box in (
            Box(min_x=0, min_y=0, max_x=10, max_y=10),
            Box(min_x=1, min_y=1, max_x=3, max_y=3),
            Box(min_x=0, min_y=0, max_x=12, max_y=10),
        ):
            assert store.fully_contained_groups(box) == PointStore.fully_contained_groups(store, box)

    def test_duplicate_ids_rejected(self, points):
        points.append(make_point(3, 50, 50, group_id=9))

        with pytest.raises(RQValidationError) as exc_info:
            InMemoryPointStore(points)

        assert "Duplicate point id: 3" in str(exc_info.value)

    def test_empty_store(self):
        store = InMemoryPointStore([])
        box = Box(min_x=0, min_y=0, max_x=1, max_y=1)

        assert store.point_count() == 0
        assert store.range_scan(box) == []
        assert store.fully_contained_groups(box) == set()
        assert store.group_ids() == set()

    def test_snapshot_yields_store(self, store):
        with store.snapshot() as snapshot:
            assert snapshot is store

    def test_from_data_directory(self, tmp_path):
        (tmp_path / "points.txt").write_text("6 6\n1 1\n")
        (tmp_path / "categories.txt").write_text("2\n2\n")
        (tmp_path / "groups.txt").write_text("1\n2\n")

        store = InMemoryPointStore.from_data_directory(tmp_path)

        assert store.point_count() == 2
        assert store.points_by_group(2)[0].id == 2

    def test_from_missing_directory(self, tmp_path):
        with pytest.raises(RQInputNotFoundError):
            InMemoryPointStore.from_data_directory(tmp_path / "missing")
