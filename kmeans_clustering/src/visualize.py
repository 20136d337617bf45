import os
import numpy as np

os.environ.setdefault("MPLCONFIGDIR", "/tmp/matplotlib")

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from pca import pca_reduce


def save_clusters_3d(
    points,
    labels,
    centroids,
    out_path,
    title=None,
    axis_labels=("x", "y", "z"),
):
    fig = plt.figure(figsize=(8, 6))
    ax = fig.add_subplot(111, projection="3d")
    ax.scatter(points[:, 0], points[:, 1], points[:, 2], c=labels, s=6, cmap="tab20")
    ax.scatter(
        centroids[:, 0],
        centroids[:, 1],
        centroids[:, 2],
        c="black",
        marker="x",
        s=60,
    )
    ax.set_title(title or "K-means clusters")
    ax.set_xlabel(axis_labels[0])
    ax.set_ylabel(axis_labels[1])
    ax.set_zlabel(axis_labels[2])
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)


def save_clusters_2d(points, labels, centroids, out_path, title=None):
    if points.shape[1] == 1:
        points = np.hstack([points, np.zeros_like(points)])
        centroids = np.hstack([centroids, np.zeros_like(centroids)])

    fig, ax = plt.subplots(figsize=(6, 5))
    ax.scatter(points[:, 0], points[:, 1], c=labels, s=8, cmap="tab20")
    ax.scatter(centroids[:, 0], centroids[:, 1], c="black", marker="x", s=60)
    ax.set_title(title or "K-means clusters")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)


def save_clusters_plot(
    points,
    labels,
    centroids,
    out_path,
    title=None,
):
    dims = points.shape[1]
    if dims <= 2:
        save_clusters_2d(points, labels, centroids, out_path, title=title)
    elif dims == 3:
        save_clusters_3d(points, labels, centroids, out_path, title=title)
    else:
        points_3d, centroids_3d = pca_reduce(points, 3, extra=centroids)
        save_clusters_3d(
            points_3d,
            labels,
            centroids_3d,
            out_path,
            title=title,
            axis_labels=("PC1", "PC2", "PC3"),
        )
