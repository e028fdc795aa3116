import math

OVERDUE = "overdue"
DUE_SOON = "due_soon"
UPCOMING = "upcoming"


def percentage_to_gpa(percentage):
    """Map a percentage in [0, 100] onto the 4.0 scale.

    90 and above is 4.0; the 80s, 70s and 60s each cover one grade point
    linearly; anything under 60 is 0.0.
    """
    if percentage < 0 or percentage > 100:
        raise ValueError(f"percentage must be between 0 and 100, got {percentage}")

    if percentage >= 90:
        return 4.0
    if percentage >= 80:
        return 3.0 + (percentage - 80) / 10
    if percentage >= 70:
        return 2.0 + (percentage - 70) / 10
    if percentage >= 60:
        return 1.0 + (percentage - 60) / 10
    return 0.0


def gpa_to_percentage(gpa):
    """Inverse of percentage_to_gpa, band by band.

    A 4.0 maps to 100. Every GPA below 1.0 maps to 0.0, since only
    percentages under 60 produce a GPA there and all of them give 0.0.
    """
    if gpa < 0 or gpa > 4:
        raise ValueError(f"gpa must be between 0 and 4, got {gpa}")

    if gpa >= 4.0:
        return 100.0
    if gpa >= 3.0:
        return 80 + (gpa - 3.0) * 10
    if gpa >= 2.0:
        return 70 + (gpa - 2.0) * 10
    if gpa >= 1.0:
        return 60 + (gpa - 1.0) * 10
    return 0.0


def weighted_percentage(pairs):
    """Sum of obtained over sum of possible, as a percentage.

    ``pairs`` is an iterable of (obtained, total). Larger modules weigh
    more: (45/50, 60/100) gives 70.0, not the 75.0 mean of the two ratios.
    """
    total_obtained = 0.0
    total_possible = 0.0
    for obtained, total in pairs:
        total_obtained += obtained
        total_possible += total
    if total_possible <= 0:
        return 0.0
    return min(total_obtained * 100 / total_possible, 100.0)


def deadline_status(deadline, now, due_soon_days=3):
    if deadline < now:
        return OVERDUE
    days_until = math.ceil((deadline - now).total_seconds() / 86400)
    if days_until <= due_soon_days:
        return DUE_SOON
    return UPCOMING
