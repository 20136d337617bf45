import numpy as np


def pca_fit(embeddings, n_components):
    mean = embeddings.mean(axis=0, keepdims=True)
    centered = embeddings - mean
    _, _, vt = np.linalg.svd(centered, full_matrices=False)
    components = vt[:n_components]
    # fewer samples than components: pad with zero axes
    if components.shape[0] < n_components:
        pad = np.zeros((n_components - components.shape[0], components.shape[1]))
        components = np.vstack([components, pad])
    return mean, components


def pca_reduce(embeddings, n_components, extra=None):
    """Project ``embeddings`` onto their first ``n_components`` principal axes.

    ``extra`` (e.g. centroids) is projected with the same basis and returned
    alongside when given.
    """
    mean, components = pca_fit(embeddings, n_components)
    reduced = (embeddings - mean) @ components.T
    if extra is None:
        return reduced
    return reduced, (extra - mean) @ components.T
