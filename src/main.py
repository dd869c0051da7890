from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from kd_tree import KDTree


@dataclass
class BenchmarkParams:

    "Παράμετροι του benchmark (μέγεθος, διαστάσεις, εύρος συντεταγμένων)."
    n_points: int = 20000
    dimensions: int = 3
    coord_min: int = 0
    coord_max: int = 200     #mikro evros gia na exoume polla isa sto kathe dim
    n_lookups: int = 2000
    n_erase: int = 2000
    seed: int = 42


def key_columns(k: int) -> List[str]:
    return [f"c{i}" for i in range(k)]


def generate_points(params: BenchmarkParams) -> pd.DataFrame:
    "Τυχαία ακέραια σημεία σε DataFrame, με στήλη label για value."
    rng = np.random.default_rng(params.seed)
    coords = rng.integers(
        params.coord_min,
        params.coord_max + 1,
        size=(params.n_points, params.dimensions),
    )
    df = pd.DataFrame(coords, columns=key_columns(params.dimensions))
    df["label"] = [f"p{i}" for i in range(len(df))]
    print(f"[DATA] Generated rows: {len(df)}")
    return df


def rows_to_keys(df: pd.DataFrame, key_cols: List[str]) -> List[Tuple[Any, ...]]:
    #to tolist() dinei python scalars anti gia numpy
    return [tuple(row) for row in df[key_cols].to_numpy().tolist()]


def build_kd_index(
    df: pd.DataFrame,
    key_cols: List[str],
    value_col: Optional[str] = None,
) -> Tuple[KDTree, float]:
    "Χτίζει balanced KDTree από τις στήλες key_cols (value: value_col ή το index)."
    keys = rows_to_keys(df, key_cols)
    values = df[value_col].tolist() if value_col is not None else df.index.tolist()

    t0 = time.perf_counter()
    kd_tree = KDTree(len(key_cols), zip(keys, values))
    t1 = time.perf_counter()
    build_time = t1 - t0
    return kd_tree, build_time


def expected_mapping(df: pd.DataFrame, key_cols: List[str], value_col: str) -> Dict[Tuple[Any, ...], Any]:
    "Για κάθε key η τιμή της τελευταίας εμφάνισης (όπως το bulk build)."
    last = df.drop_duplicates(subset=key_cols, keep="last")
    return dict(zip(rows_to_keys(last, key_cols), last[value_col].tolist()))


def _lexsort_order(df: pd.DataFrame, key_cols: List[str], dim: int) -> np.ndarray:
    X = df[key_cols].to_numpy()
    #to lexsort taksinomei me to teleutaio key protero: dim, meta c0, c1, ...
    sort_keys = [X[:, c] for c in reversed(range(len(key_cols)))] + [X[:, dim]]
    return np.lexsort(sort_keys)


def brute_force_min(df: pd.DataFrame, key_cols: List[str], dim: int) -> Optional[Tuple[Any, ...]]:
    "Brute-force ελάχιστο στη διάσταση dim με tie-break όλο το key."
    if df.empty:
        return None
    order = _lexsort_order(df, key_cols, dim)
    return rows_to_keys(df.iloc[[order[0]]], key_cols)[0]


def brute_force_max(df: pd.DataFrame, key_cols: List[str], dim: int) -> Optional[Tuple[Any, ...]]:
    "Brute-force μέγιστο στη διάσταση dim με tie-break όλο το key."
    if df.empty:
        return None
    order = _lexsort_order(df, key_cols, dim)
    return rows_to_keys(df.iloc[[order[-1]]], key_cols)[0]


def _key_or_none(it) -> Optional[Tuple[Any, ...]]:
    return None if it.is_end() else it.key


def _check(summary: Dict[str, Any], name: str, ok: bool) -> None:
    summary["checks"][name] = ok
    print(f"[CHECK] {name:<24} {'OK' if ok else 'FAILED'}")


def run_benchmark(params: BenchmarkParams) -> Dict[str, Any]:
    "Χτίζει το δέντρο, μετράει χρόνους και ελέγχει κάθε πράξη με brute force."
    df = generate_points(params)
    key_cols = key_columns(params.dimensions)
    rng = np.random.default_rng(params.seed + 1)

    summary: Dict[str, Any] = {"checks": {}}

    #build
    kd_tree, build_time = build_kd_index(df, key_cols, "label")
    expected = expected_mapping(df, key_cols, "label")
    summary["build"] = build_time
    summary["size"] = len(kd_tree)
    summary["depth"] = kd_tree.depth()
    print(f"[BUILD] size={len(kd_tree)} depth={kd_tree.depth()} time={build_time:.4f}s")
    _check(summary, "size after build", len(kd_tree) == len(expected))
    _check(summary, "invariant after build", kd_tree.check_invariant())

    #find
    all_keys = list(expected.keys())
    picks = rng.choice(len(all_keys), size=min(params.n_lookups, len(all_keys)), replace=False)
    t0 = time.perf_counter()
    found_ok = all(kd_tree.find(all_keys[i]).value == expected[all_keys[i]] for i in picks)
    t1 = time.perf_counter()
    summary["find"] = t1 - t0
    print(f"[QUERY] {len(picks)} finds in {t1 - t0:.4f}s")
    _check(summary, "find last value", found_ok)

    #min / max se kathe diastasi
    t0 = time.perf_counter()
    extremes_ok = True
    for dim in range(params.dimensions):
        if _key_or_none(kd_tree.find_min(dim)) != brute_force_min(df, key_cols, dim):
            extremes_ok = False
        if _key_or_none(kd_tree.find_max(dim)) != brute_force_max(df, key_cols, dim):
            extremes_ok = False
    t1 = time.perf_counter()
    summary["min_max"] = t1 - t0
    print(f"[QUERY] min/max on {params.dimensions} dims in {t1 - t0:.4f}s")
    _check(summary, "find_min / find_max", extremes_ok)

    #erase
    to_erase = [all_keys[i] for i in rng.choice(len(all_keys), size=min(params.n_erase, len(all_keys)), replace=False)]
    size_before = len(kd_tree)
    t0 = time.perf_counter()
    erased = sum(kd_tree.erase(key) for key in to_erase)
    t1 = time.perf_counter()
    summary["erase"] = t1 - t0
    print(f"[QUERY] {erased} erases in {t1 - t0:.4f}s")
    _check(summary, "size after erase", len(kd_tree) == size_before - len(to_erase))
    _check(summary, "erased keys gone", all(kd_tree.find(key).is_end() for key in to_erase))
    _check(summary, "invariant after erase", kd_tree.check_invariant())

    erased_set = set(to_erase)
    remaining = df[[key not in erased_set for key in rows_to_keys(df, key_cols)]]
    extremes_ok = all(
        _key_or_none(kd_tree.find_min(dim)) == brute_force_min(remaining, key_cols, dim)
        and _key_or_none(kd_tree.find_max(dim)) == brute_force_max(remaining, key_cols, dim)
        for dim in range(params.dimensions)
    )
    _check(summary, "min / max after erase", extremes_ok)

    #iterator walk
    t0 = time.perf_counter()
    walked = sum(1 for _ in kd_tree)
    t1 = time.perf_counter()
    summary["walk"] = t1 - t0
    _check(summary, "iterator walk", walked == len(kd_tree))

    summary["all_ok"] = all(summary["checks"].values())
    return summary


def print_summary(summary: Dict[str, Any]) -> None:
    print("\n")
    print("KD-TREE PERFORMANCE (seconds)")
    print(f"{'Build':>8} {'Find':>8} {'MinMax':>8} {'Erase':>8} {'Walk':>8} {'Size':>8} {'Depth':>6}")
    print(
        f"{summary['build']:8.4f} "
        f"{summary['find']:8.4f} "
        f"{summary['min_max']:8.4f} "
        f"{summary['erase']:8.4f} "
        f"{summary['walk']:8.4f} "
        f"{summary['size']:8d} "
        f"{summary['depth']:6d}"
    )
    print(f"\n[CHECK] all checks: {'OK' if summary['all_ok'] else 'FAILED'}")


#i main
def main():
    params = BenchmarkParams()
    summary = run_benchmark(params)
    print_summary(summary)
    if not summary["all_ok"]:
        raise RuntimeError("KD-Tree checks failed, see [CHECK] lines above.")


if __name__ == "__main__":
    main()
