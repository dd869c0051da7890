import pandas as pd

from main import (
    BenchmarkParams,
    brute_force_max,
    brute_force_min,
    build_kd_index,
    expected_mapping,
    generate_points,
    run_benchmark,
)


def small_frame():
    return pd.DataFrame(
        {
            "x": [3, 1, 1, 4, 1],
            "y": [2, 9, 2, 0, 9],
            "label": ["a", "b", "c", "d", "e"],
        }
    )


def test_build_kd_index_from_dataframe():
    df = small_frame()
    tree, build_time = build_kd_index(df, ["x", "y"], "label")
    assert build_time >= 0.0
    assert len(tree) == 4
    assert tree[(1, 9)] == "e", "Later rows must win for duplicate keys"
    assert tree.check_invariant()


def test_build_kd_index_uses_row_index_by_default():
    df = small_frame()
    tree, _ = build_kd_index(df, ["x", "y"])
    assert tree[(3, 2)] == 0
    assert tree[(1, 9)] == 4


def test_expected_mapping_keeps_last():
    mapping = expected_mapping(small_frame(), ["x", "y"], "label")
    assert mapping == {(3, 2): "a", (1, 9): "e", (1, 2): "c", (4, 0): "d"}


def test_brute_force_extremes_use_full_key_tie_break():
    df = small_frame()
    assert brute_force_min(df, ["x", "y"], 0) == (1, 2)
    assert brute_force_max(df, ["x", "y"], 0) == (4, 0)
    assert brute_force_min(df, ["x", "y"], 1) == (4, 0)
    assert brute_force_max(df, ["x", "y"], 1) == (1, 9)
    assert brute_force_min(df.iloc[0:0], ["x", "y"], 0) is None


def test_tree_extremes_agree_with_brute_force():
    params = BenchmarkParams(n_points=500, dimensions=3, coord_max=5, seed=3)
    df = generate_points(params)
    cols = ["c0", "c1", "c2"]
    tree, _ = build_kd_index(df, cols, "label")
    for dim in range(3):
        assert tree.find_min(dim).key == brute_force_min(df, cols, dim)
        assert tree.find_max(dim).key == brute_force_max(df, cols, dim)


def test_generate_points_shape():
    df = generate_points(BenchmarkParams(n_points=50, dimensions=4, seed=1))
    assert list(df.columns) == ["c0", "c1", "c2", "c3", "label"]
    assert len(df) == 50


def test_run_benchmark_small():
    params = BenchmarkParams(n_points=300, dimensions=3, coord_max=6, n_lookups=50, n_erase=100, seed=7)
    summary = run_benchmark(params)
    failed = [name for name, ok in summary["checks"].items() if not ok]
    assert summary["all_ok"], f"Failed checks: {failed}"
    assert summary["size"] <= 300
