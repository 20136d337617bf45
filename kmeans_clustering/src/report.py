import json
import logging
import re

import numpy as np

from config import REPORT_TITLE
from utils import format_coords

logger = logging.getLogger(__name__)

CENTROID_LINE = re.compile(r"^Centroid (\d+):(.*)$")


def write_report(f, dataset, centroids):
    f.write(f"{REPORT_TITLE}\nCentroids:\n")
    for idx, centroid in enumerate(centroids):
        f.write(f"Centroid {idx}: {format_coords(centroid)}\n")

    f.write("\nPoints and clusters:\n")
    for idx in range(len(dataset)):
        coords, label = dataset[idx]
        f.write(f"Point {idx}: ({format_coords(coords, sep=', ')}) -> cluster {label}\n")


def save_report(path, dataset, centroids):
    try:
        with open(path, "w", encoding="utf-8") as f:
            write_report(f, dataset, centroids)
    except OSError as exc:
        print(f"Cannot open output file: {path}")
        logger.warning("Failed to write report to %s: %s", path, exc)
        return False
    return True


def read_centroids(path):
    centroids = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\n")
            if line.startswith("Points and clusters"):
                break
            match = CENTROID_LINE.match(line)
            if match:
                centroids.append([float(v) for v in match.group(2).split()])
    return np.array(centroids, dtype=np.float64)


def save_json_report(path, summary):
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
    except OSError as exc:
        print(f"Cannot open JSON report file: {path}")
        logger.warning("Failed to write JSON report to %s: %s", path, exc)
        return False
    return True
