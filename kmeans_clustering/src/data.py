import logging

import numpy as np

from config import DEFAULT_DELIMITER, DEFAULT_MAX_FIELDS, UNASSIGNED

logger = logging.getLogger(__name__)


class DataLoadError(OSError):
    pass


class PointDataset:
    """Ordered records of equal dimension, each with a cluster label.

    ``points`` is an ``(n, dimensions)`` float array and ``labels`` the
    matching int array, initialised to ``UNASSIGNED``.
    """

    def __init__(self, rows, skipped=0):
        rows = [list(row) for row in rows]
        if rows:
            dimensions = len(rows[0])
            if any(len(row) != dimensions for row in rows):
                raise ValueError("all records must have the same number of coordinates")
            self.points = np.array(rows, dtype=np.float64)
        else:
            self.points = np.empty((0, 0), dtype=np.float64)
        self.labels = np.full(len(rows), UNASSIGNED, dtype=np.int64)
        self.skipped = skipped

    @property
    def dimensions(self):
        return self.points.shape[1]

    def __len__(self):
        return self.points.shape[0]

    def __getitem__(self, idx):
        return self.points[idx], int(self.labels[idx])


def parse_line(line, delimiter=DEFAULT_DELIMITER, max_fields=DEFAULT_MAX_FIELDS):
    fields = line.strip().split(delimiter)
    if max_fields is not None:
        fields = fields[:max_fields]
    try:
        return [float(field.strip()) for field in fields]
    except ValueError:
        return None


def load_points(path, delimiter=DEFAULT_DELIMITER, max_fields=DEFAULT_MAX_FIELDS):
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
    except OSError as exc:
        raise DataLoadError(f"Cannot open input file: {path}") from exc

    rows = []
    dimensions = None
    skipped = 0
    header_seen = False

    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        if not header_seen:
            header_seen = True
            continue

        coords = parse_line(line, delimiter, max_fields)
        if coords is None:
            logger.debug("Skipping line %d: non-numeric field", lineno)
            skipped += 1
            continue
        if dimensions is None:
            dimensions = len(coords)
        if len(coords) != dimensions:
            logger.debug(
                "Skipping line %d: expected %d fields, got %d",
                lineno,
                dimensions,
                len(coords),
            )
            skipped += 1
            continue
        rows.append(coords)

    logger.debug("Loaded %d points from %s (%d skipped)", len(rows), path, skipped)
    return PointDataset(rows, skipped=skipped)
