from craps_engine.tracker import SeriesTrackers


def test_fire_points_never_double_count():
    t = SeriesTrackers()
    t.on_point_made(6)
    t.on_point_made(6)
    t.on_point_made(8)
    assert t.fire_count() == 2
    assert t.points_made[6] == 2
    assert t.line_wins == 3


def test_small_tall_all_sets():
    t = SeriesTrackers()
    for n in (2, 3, 4, 5, 6):
        t.on_roll(1, n - 1, n)
    assert t.small_complete()
    assert not t.tall_complete()
    for n in (8, 9, 10, 11, 12):
        t.on_roll(6, n - 6, n)
    assert t.all_complete()
    # 7 is in neither set
    t.on_roll(3, 4, 7)
    assert 7 not in t.small_set | t.tall_set


def test_repeater_counts_and_doubles():
    t = SeriesTrackers()
    t.on_roll(2, 2, 4)
    t.on_roll(1, 3, 4)
    t.on_roll(5, 5, 10)
    assert t.hits(4) == 2
    assert t.hits(10) == 1
    assert t.hits(11) == 0
    assert t.doubles == {2, 5}
    assert t.point_numbers == {4, 10}


def test_copy_is_independent_and_snapshot_is_plain():
    t = SeriesTrackers()
    t.on_roll(3, 3, 6)
    t.on_point_made(6)
    c = t.copy()
    c.on_point_made(8)
    assert t.fire_count() == 1
    assert c.fire_count() == 2

    snap = t.snapshot()
    assert snap["fire_points"] == [6]
    assert snap["repeater_counts"] == {"6": 1}
    assert snap["doubles"] == [3]
