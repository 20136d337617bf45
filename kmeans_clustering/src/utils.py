import numpy as np

from config import DEFAULT_SEED


def make_rng(seed=DEFAULT_SEED):
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def format_value(value):
    return repr(float(value))


def format_coords(coords, sep=" "):
    return sep.join(format_value(v) for v in coords)
