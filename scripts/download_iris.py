#!/usr/bin/env python3
from pathlib import Path

import kagglehub


def resolve_csv_path(data_path: str) -> str:
    candidates = [
        Path(data_path) / "Iris.csv",
        Path(data_path) / "iris" / "Iris.csv",
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    raise FileNotFoundError(f"Could not find Iris.csv in: {data_path}")


def main() -> None:
    data_path = kagglehub.dataset_download("uciml/iris")
    csv_path = resolve_csv_path(data_path)
    print(f"Iris dataset: {csv_path}")
    # Id plus the first three measurements; the Species column is text
    print(f"Run: kmeans-cluster -i {csv_path} -o out.txt -k 3 --max-fields 4")


if __name__ == "__main__":
    main()
