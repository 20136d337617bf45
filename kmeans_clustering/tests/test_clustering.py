import numpy as np
import pytest

from clustering import (
    InvalidClusterCountError,
    KMeans,
    RunState,
    assign_clusters,
    has_converged,
    init_centroids,
    kmeans,
    kmeans_std,
    squared_distance,
    update_centroids,
)
from data import PointDataset
from utils import make_rng


def four_points():
    return PointDataset([[0, 0], [0, 1], [10, 0], [10, 1]])


def blobs(seed=0, per_cluster=30):
    rng = np.random.default_rng(seed)
    centers = np.array([[0.0, 0.0, 0.0], [20.0, 0.0, 0.0], [0.0, 20.0, 5.0]])
    points = np.concatenate([rng.normal(c, 0.5, size=(per_cluster, 3)) for c in centers])
    return PointDataset(points)


def test_squared_distance():
    assert squared_distance([0, 0], [3, 4]) == 25.0
    assert squared_distance([1.5], [1.5]) == 0.0


def test_four_point_scenario():
    dataset = four_points()
    model = KMeans(dataset, 2, centroids=[[0, 0], [10, 0]])

    assert model.step() is False
    assert dataset.labels.tolist() == [0, 0, 1, 1]
    np.testing.assert_allclose(model.centroids, [[0, 0.5], [10, 0.5]])

    assert model.step() is True
    assert dataset.labels.tolist() == [0, 0, 1, 1]
    np.testing.assert_allclose(model.centroids, [[0, 0.5], [10, 0.5]])


def test_run_reaches_converged_state():
    dataset = four_points()
    model = KMeans(dataset, 2, centroids=[[0, 0], [10, 0]])
    assert model.state is RunState.INITIALIZED

    assert model.run() is RunState.CONVERGED
    assert model.converged
    assert model.iterations == 2
    assert model.inertia == pytest.approx(1.0)
    assert kmeans_std(dataset.points, dataset.labels, model.centroids) == pytest.approx(0.0)


def test_run_stops_at_iteration_cap():
    dataset = four_points()
    model = KMeans(dataset, 2, centroids=[[0, 0], [10, 0]], max_iters=1)

    assert model.run() is RunState.MAX_ITERATIONS_REACHED
    assert not model.converged
    assert model.iterations == 1
    assert dataset.labels.tolist() == [0, 0, 1, 1]

    # terminal state is sticky
    assert model.run() is RunState.MAX_ITERATIONS_REACHED
    assert model.iterations == 1


def test_labels_in_range_after_assignment():
    dataset = blobs()
    model = KMeans(dataset, 4, rng=make_rng(3))
    model.run()

    assert dataset.labels.min() >= 0
    assert dataset.labels.max() < 4


def test_centroids_are_member_means():
    dataset = blobs(seed=1)
    model = KMeans(dataset, 3, rng=make_rng(5))
    model.run()

    for idx in range(3):
        mask = dataset.labels == idx
        if np.any(mask):
            np.testing.assert_allclose(model.centroids[idx], dataset.points[mask].mean(axis=0))


def test_extra_step_after_convergence_is_stable():
    dataset = blobs(seed=2)
    model = KMeans(dataset, 3, centroids=[[0, 0, 0], [20, 0, 0], [0, 20, 5]])
    assert model.run() is RunState.CONVERGED

    labels = dataset.labels.copy()
    centroids = model.centroids.copy()
    assert model.step() is True
    np.testing.assert_array_equal(dataset.labels, labels)
    assert has_converged(model.centroids, centroids, model.tol)


def test_assignment_is_deterministic():
    points = blobs(seed=4).points
    centroids = np.array([[1.0, 1.0, 1.0], [15.0, 2.0, 0.0], [3.0, 18.0, 4.0]])

    first = PointDataset(points)
    second = PointDataset(points)
    assign_clusters(first, centroids)
    assign_clusters(second, centroids)

    np.testing.assert_array_equal(first.labels, second.labels)


def test_ties_go_to_lowest_index():
    dataset = PointDataset([[5, 0]])
    assign_clusters(dataset, np.array([[0.0, 0.0], [10.0, 0.0]]))
    assert dataset.labels.tolist() == [0]


def test_empty_cluster_keeps_previous_centroid():
    dataset = PointDataset([[0, 0], [1, 1]])
    centroids = np.array([[0.5, 0.5], [0.5, 0.5], [50.0, 50.0]])

    assign_clusters(dataset, centroids)
    assert dataset.labels.tolist() == [0, 0]

    empty = update_centroids(dataset, centroids)
    assert empty == [1, 2]
    np.testing.assert_array_equal(centroids[1], [0.5, 0.5])
    np.testing.assert_array_equal(centroids[2], [50.0, 50.0])


def test_k_equal_to_points_gives_singletons():
    points = [[0, 0], [5, 5], [10, 0]]
    dataset = PointDataset(points)
    model = KMeans(dataset, 3, centroids=points)

    assert model.step() is True
    assert dataset.labels.tolist() == [0, 1, 2]
    np.testing.assert_array_equal(model.centroids, dataset.points)


def test_convergence_tolerance_is_per_centroid():
    previous = np.zeros((2, 1))
    # each shift is 8.1e-5, the sum (1.62e-4) would exceed the tolerance
    assert has_converged(np.array([[0.009], [0.009]]), previous, 1e-4)
    assert not has_converged(np.array([[0.0], [0.011]]), previous, 1e-4)


def test_init_centroids_samples_rows_with_replacement():
    points = blobs(seed=5).points
    original = points.copy()

    centroids = init_centroids(points, 5, make_rng(7))
    expected = points[make_rng(7).integers(0, len(points), size=5)]

    np.testing.assert_array_equal(centroids, expected)
    np.testing.assert_array_equal(points, original)
    centroids[0] += 100.0
    np.testing.assert_array_equal(points, original)


def test_same_seed_same_result():
    first = KMeans(blobs(seed=6), 3, rng=make_rng(11))
    second = KMeans(blobs(seed=6), 3, rng=make_rng(11))
    np.testing.assert_array_equal(first.centroids, second.centroids)


@pytest.mark.parametrize("k", [0, -1, 5])
def test_invalid_k_is_rejected(k):
    with pytest.raises(InvalidClusterCountError):
        KMeans(four_points(), k)


def test_k_larger_than_distinct_records_fails():
    dataset = PointDataset([[1, 1], [1, 1]])
    with pytest.raises(InvalidClusterCountError, match="cannot select more centroids"):
        KMeans(dataset, 3)


def test_non_integer_k_is_rejected():
    with pytest.raises(InvalidClusterCountError):
        init_centroids(four_points().points, 1.5, make_rng(0))


def test_empty_dataset_is_rejected():
    with pytest.raises(InvalidClusterCountError):
        KMeans(PointDataset([]), 1)


def test_centroid_shape_is_checked():
    with pytest.raises(ValueError):
        KMeans(four_points(), 2, centroids=[[0, 0, 0], [1, 1, 1]])


def test_kmeans_wrapper():
    points = blobs(seed=8).points
    labels, centroids = kmeans(points, 3, seed=0, max_iters=100)

    assert labels.shape == (len(points),)
    assert centroids.shape == (3, 3)
    assert set(labels.tolist()) <= {0, 1, 2}


def test_progress_bar_is_closed_on_early_stop(monkeypatch):
    import clustering

    bars = []

    class RecordingBar(clustering.tqdm):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self.was_closed = False
            bars.append(self)

        def close(self):
            self.was_closed = True
            super().close()

    monkeypatch.setattr(clustering, "tqdm", RecordingBar)
    model = KMeans(four_points(), 2, centroids=[[0, 0], [10, 0]], progress=True)

    assert model.run() is RunState.CONVERGED
    assert model.iterations == 2
    assert len(bars) == 1
    assert bars[0].was_closed
    assert bars[0].n == 2
