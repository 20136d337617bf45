import enum
import logging

import numpy as np
from tqdm import tqdm

from config import DEFAULT_MAX_ITERS, DEFAULT_SEED, DEFAULT_TOL
from data import PointDataset
from utils import make_rng

logger = logging.getLogger(__name__)


class InvalidClusterCountError(ValueError):
    pass


class RunState(enum.Enum):
    INITIALIZED = "initialized"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"


def squared_distance(a, b):
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(diff, diff))


def pairwise_squared_distances(points, centroids):
    diff = points[:, None, :] - centroids[None, :, :]
    return np.einsum("nkd,nkd->nk", diff, diff)


def check_k(k, n_samples):
    if isinstance(k, (bool, np.bool_)) or not isinstance(k, (int, np.integer)):
        raise InvalidClusterCountError(f"k must be an integer, got {k!r}")
    if k <= 0:
        raise InvalidClusterCountError(f"k must be positive, got {k}")
    if k > n_samples:
        raise InvalidClusterCountError(
            f"cannot select more centroids than available points (k={k}, points={n_samples})"
        )


def init_centroids(points, k, rng):
    """Pick ``k`` rows of ``points`` uniformly at random, with replacement.

    Returns a fresh array; ``points`` is left untouched. Duplicate picks are
    allowed, so two centroids may start at the same position.
    """
    n_samples = points.shape[0]
    check_k(k, n_samples)
    indices = rng.integers(0, n_samples, size=k)
    return points[indices].copy()


def assign_clusters(dataset, centroids):
    # argmin keeps the first minimum, so ties go to the lowest centroid index
    distances = pairwise_squared_distances(dataset.points, centroids)
    labels = np.argmin(distances, axis=1)
    changed = int(np.count_nonzero(labels != dataset.labels))
    dataset.labels[:] = labels
    return changed


def update_centroids(dataset, centroids):
    empty = []
    for idx in range(centroids.shape[0]):
        mask = dataset.labels == idx
        if np.any(mask):
            centroids[idx] = dataset.points[mask].mean(axis=0)
        else:
            empty.append(idx)
    if empty:
        logger.debug("Empty clusters kept at previous position: %s", empty)
    return empty


def centroid_shifts(centroids, previous):
    diff = centroids - previous
    return np.einsum("kd,kd->k", diff, diff)


def has_converged(centroids, previous, tol):
    return bool(np.all(centroid_shifts(centroids, previous) <= tol))


def inertia(points, labels, centroids):
    diff = points - centroids[labels]
    return float(np.einsum("nd,nd->", diff, diff))


def kmeans_std(points, labels, centroids):
    distances = np.linalg.norm(points - centroids[labels], axis=1)
    return float(np.std(distances))


class KMeans:
    def __init__(
        self,
        dataset,
        k,
        rng=None,
        max_iters=DEFAULT_MAX_ITERS,
        tol=DEFAULT_TOL,
        centroids=None,
        progress=False,
    ):
        check_k(k, len(dataset))
        self.dataset = dataset
        self.k = int(k)
        self.max_iters = max_iters
        self.tol = tol
        self.progress = progress
        self.iterations = 0

        if rng is None:
            rng = make_rng(DEFAULT_SEED)

        if centroids is None:
            self.centroids = init_centroids(dataset.points, self.k, rng)
        else:
            centroids = np.array(centroids, dtype=np.float64)
            expected = (self.k, dataset.dimensions)
            if centroids.shape != expected:
                raise ValueError(f"centroids must have shape {expected}, got {centroids.shape}")
            self.centroids = centroids
        self.state = RunState.INITIALIZED

    @property
    def converged(self):
        return self.state is RunState.CONVERGED

    @property
    def inertia(self):
        return inertia(self.dataset.points, self.dataset.labels, self.centroids)

    def step(self):
        previous = self.centroids.copy()
        changed = assign_clusters(self.dataset, self.centroids)
        update_centroids(self.dataset, self.centroids)
        self.iterations += 1
        logger.debug("Iteration %d: %d labels changed", self.iterations, changed)
        return has_converged(self.centroids, previous, self.tol)

    def run(self):
        if self.state in (RunState.CONVERGED, RunState.MAX_ITERATIONS_REACHED):
            return self.state

        self.state = RunState.ITERATING
        with tqdm(
            total=self.max_iters,
            desc="K-means",
            leave=False,
            disable=not self.progress,
        ) as bar:
            for _ in range(self.max_iters):
                converged = self.step()
                bar.update(1)
                if converged:
                    self.state = RunState.CONVERGED
                    logger.debug("Converged after %d iterations", self.iterations)
                    break
            else:
                self.state = RunState.MAX_ITERATIONS_REACHED
                logger.debug("Reached max_iters (%d) without converging", self.max_iters)

        return self.state


def kmeans(
    points,
    k,
    seed,
    max_iters,
    tol=DEFAULT_TOL,
):
    dataset = PointDataset(np.asarray(points, dtype=np.float64))
    model = KMeans(dataset, k, rng=make_rng(seed), max_iters=max_iters, tol=tol)
    model.run()
    return dataset.labels.copy(), model.centroids
