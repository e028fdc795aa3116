import math

EMPTY_STATISTICS = {
    "average": 0,
    "std_deviation": 0,
    "min_marks": 0,
    "max_marks": 0,
    "median_marks": 0,
}


def compute_statistics(scores):
    """Average, population standard deviation, extrema and median of ``scores``.

    Average, deviation and median are rounded to 2 decimal places; min and
    max are returned as given. An empty input yields zeros everywhere.
    """
    values = [float(s) for s in scores]
    n = len(values)
    if n == 0:
        return dict(EMPTY_STATISTICS)

    average = sum(values) / n
    variance = sum((v - average) ** 2 for v in values) / n

    ordered = sorted(values)
    mid = n // 2
    if n % 2 == 0:
        median = (ordered[mid - 1] + ordered[mid]) / 2
    else:
        median = ordered[mid]

    return {
        "average": round(average, 2),
        "std_deviation": round(math.sqrt(variance), 2),
        "min_marks": ordered[0],
        "max_marks": ordered[-1],
        "median_marks": round(median, 2),
    }


def performance_remark(obtained, stats):
    """Place one score relative to its module's average, in standard deviations."""
    if not stats or stats.get("average") is None:
        return "no_data"

    diff = obtained - stats["average"]
    std_dev = max(stats.get("std_deviation") or 0.1, 0.1)

    if diff > std_dev:
        return "excellent"
    if diff > 0:
        return "good"
    if diff >= -std_dev:
        return "average"
    return "below_average"
