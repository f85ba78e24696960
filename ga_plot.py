import json
import statistics
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

LOG_PATH = Path(__file__).resolve().parent / "ga_log.jsonl"
OUT_PATH = Path(__file__).resolve().parent / "ga_progress.png"


def load_rows(path):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Log not found: {path}")
    rows = []
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line:
            continue
        rows.append(json.loads(line))
    return rows


def rolling_avg(values, window):
    if window <= 1:
        return list(values)
    out = []
    for i in range(len(values)):
        start = max(0, i - window + 1)
        chunk = values[start : i + 1]
        out.append(sum(chunk) / len(chunk))
    return out


def plot_rows(rows, out_path, window=5):
    gens = [r["generation"] for r in rows]
    best = [r["best"] for r in rows]
    avg = [r["average"] for r in rows]
    worst = [r["worst"] for r in rows]

    fig, ax1 = plt.subplots(figsize=(10, 5))
    ax1.set_title("GA Fitness Progress")
    ax1.set_xlabel("Generation")
    ax1.set_ylabel("Fitness")
    ax1.fill_between(gens, worst, best, color="tab:blue", alpha=0.15, label="Worst to best")
    ax1.plot(gens, best, color="tab:blue", label="Best")
    ax1.plot(gens, avg, color="tab:orange", alpha=0.4, label="Average")
    ax1.plot(gens, rolling_avg(avg, window), color="tab:orange", label=f"Average (avg {window})")

    if all("best_score" in r for r in rows):
        ax2 = ax1.twinx()
        ax2.set_ylabel("Best score", color="tab:green")
        ax2.plot(gens, [r["best_score"] for r in rows], color="tab:green", alpha=0.5, label="Best score")
        ax2.tick_params(axis="y", labelcolor="tab:green")
        lines, labels = ax1.get_legend_handles_labels()
        lines2, labels2 = ax2.get_legend_handles_labels()
        ax1.legend(lines + lines2, labels + labels2, loc="upper left")
    else:
        ax1.legend(loc="upper left")

    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return out_path


def main():
    rows = load_rows(LOG_PATH)
    if not rows:
        print("No data yet in ga_log.jsonl")
        return

    plot_rows(rows, OUT_PATH)
    print(f"Saved plot to {OUT_PATH}")

    best = [r["best"] for r in rows]
    print(
        f"Generations: {len(rows)} | best max: {max(best):.1f} | best avg: {statistics.mean(best):.1f} "
        f"| last avg: {rows[-1]['average']:.1f}"
    )


if __name__ == "__main__":
    main()
