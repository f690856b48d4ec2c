"""
ASCII charts for volume and strength progress.

Creates terminal-friendly bar charts and a dated e1RM plot.
"""

from datetime import date

from .insights import format_volume
from .models import CategoryShare, VolumePoint, WeeklyVolumePoint


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
    value_labels: list[str] | None = None,
) -> str:
    """
    Create a simple horizontal bar chart.

    Args:
        labels: Labels for each bar
        values: Values for each bar
        width: Maximum bar width
        title: Chart title
        value_labels: Text printed after each bar (default: value with 1 decimal)

    Returns:
        ASCII bar chart string
    """
    if not values:
        return "No data to display."

    max_val = max(values)
    max_label_len = max(len(l) for l in labels) if labels else 0
    if value_labels is None:
        value_labels = [f"{v:.1f}" for v in values]

    lines = []

    if title:
        lines.append(title)
        lines.append("─" * (max_label_len + width + 5))

    for label, value, text in zip(labels, values, value_labels):
        bar_len = int((value / max_val) * width) if max_val > 0 else 0
        bar = "█" * bar_len
        lines.append(f"{label:>{max_label_len}} │{bar} {text}")

    return "\n".join(lines)


def create_volume_trend_chart(points: list[VolumePoint], unit: str = "kg") -> str:
    """
    Daily volume chart, oldest day on top.

    Days without training are kept so gaps stay visible.
    """
    if not points or all(p.volume == 0 for p in points):
        return "No training volume in this period."

    return create_simple_bar_chart(
        [p.date.strftime("%a %m.%d") for p in points],
        [p.volume for p in points],
        title=f"Daily Volume ({unit})",
        value_labels=[format_volume(p.volume) if p.volume > 0 else "" for p in points],
    )


def create_weekly_volume_chart(points: list[WeeklyVolumePoint], unit: str = "kg") -> str:
    """
    Create a chart showing weekly training volume.

    Args:
        points: Weekly totals, oldest first, the last one being this week
        unit: Unit shown in the title

    Returns:
        ASCII chart string
    """
    if not points:
        return "No training history."

    labels = []
    n = len(points)
    for i, point in enumerate(points):
        weeks_ago = n - 1 - i
        if weeks_ago == 0:
            labels.append("This week")
        elif weeks_ago == 1:
            labels.append("Last week")
        else:
            labels.append(f"{point.week_start:%m.%d}")

    return create_simple_bar_chart(
        labels,
        [p.volume for p in points],
        title=f"Weekly Volume ({unit})",
        value_labels=[format_volume(p.volume) for p in points],
    )


def create_breakdown_chart(shares: list[CategoryShare]) -> str:
    """Muscle-group share of volume as bars scaled to 100 %."""
    if not shares:
        return "No training volume in this period."

    lines = ["Volume by Muscle Group", "─" * 60]
    label_len = max(len(s.category) for s in shares)
    for share in shares:
        bar = "█" * int(share.percentage / 100 * 40)
        lines.append(
            f"{share.category:>{label_len}} │{bar} {share.percentage:.0f}%"
            f"  ({format_volume(share.volume)})"
        )
    return "\n".join(lines)


def create_one_rep_max_plot(
    progression: list[tuple[date, float]],
    width: int = 60,
    height: int = 14,
    unit: str = "kg",
) -> str:
    """
    Plot estimated 1RM over time.

    Args:
        progression: (day, e1RM) pairs, any order
        width: Total chart width including the y-axis labels
        height: Total chart height including title and x-axis
        unit: Unit shown in the title

    Returns:
        ASCII plot string
    """
    if not progression:
        return "No 1RM data yet (needs completed sets of 1–10 reps)."

    points = sorted(progression)
    min_date = points[0][0]
    date_range = (points[-1][0] - min_date).days or 1

    y_min = min(v for _, v in points)
    y_max = max(v for _, v in points)
    pad = max((y_max - y_min) * 0.1, 1.0)
    y_min = max(0.0, y_min - pad)
    y_max += pad
    y_range = y_max - y_min

    plot_width = width - 8  # Room for y-axis labels
    plot_height = height - 3  # Room for title and x-axis

    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    cells: list[tuple[int, int]] = []
    for day, value in points:
        x = int(((day - min_date).days / date_range) * (plot_width - 1))
        y = plot_height - 1 - int(((value - y_min) / y_range) * (plot_height - 1))
        cells.append((x, y))

    # Connect neighbours with a horizontal run at the earlier point's level
    for (x1, y1), (x2, _) in zip(cells, cells[1:]):
        for x in range(x1 + 1, x2):
            if grid[y1][x] == " ":
                grid[y1][x] = "─"

    for x, y in cells:
        grid[y][x] = "●"

    lines = [f"Estimated 1RM ({unit})"]
    for row_idx, row in enumerate(grid):
        value = y_max - (row_idx / max(plot_height - 1, 1)) * y_range
        label = f"{value:6.1f}" if row_idx % 3 == 0 or row_idx == plot_height - 1 else " " * 6
        lines.append(f"{label} ┤{''.join(row)}")

    lines.append(" " * 7 + "└" + "─" * plot_width)
    first = f"{min_date:%m.%d}"
    last = f"{points[-1][0]:%m.%d}"
    gap = max(plot_width - len(first) - len(last), 1)
    lines.append(" " * 8 + first + " " * gap + last)

    return "\n".join(lines)
