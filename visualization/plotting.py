"""Chart export for loaded replication statistics."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from animation.models import StatisticsFile  # noqa: E402


def plot_statistic(stat_file: StatisticsFile, output_path: str | Path) -> Path:
    """Render a statistic's time series with its precomputed summary.

    The mean is drawn as a dashed line and the min/max range as a shaded band.
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    metadata = stat_file.metadata
    summary = stat_file.summary
    times = [point.time for point in stat_file.time_series]
    values = [point.value for point in stat_file.time_series]

    label = metadata.metric_name if metadata.component_id is None else f"{metadata.component_id}.{metadata.metric_name}"

    fig, ax = plt.subplots(figsize=(8, 4))
    try:
        ax.plot(times, values, marker=".", label=label)
        ax.axhline(summary.mean, linestyle="--", color="tab:orange", label=f"mean={summary.mean:g}")
        ax.axhspan(summary.min, summary.max, color="tab:gray", alpha=0.15, label="min/max")
        ax.set_title(f"{metadata.type} / replication {metadata.replication}")
        ax.set_xlabel(f"time ({metadata.time_unit})" if metadata.time_unit else "time")
        ax.set_ylabel(metadata.metric_name)
        ax.legend()

        fig.tight_layout()
        fig.savefig(output)
    finally:
        plt.close(fig)
    return output
