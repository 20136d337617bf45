DEFAULT_MAX_ITERS = 100
DEFAULT_TOL = 1e-4
DEFAULT_SEED = 42
DEFAULT_DELIMITER = ","
DEFAULT_MAX_FIELDS = None

UNASSIGNED = -1
REPORT_TITLE = "K-Means Clustering"
