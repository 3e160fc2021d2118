"""Generate performance charts from Locust CSV output of the Koha workloads.

Reads results/<workload>/raw/<N>_users_stats.csv and produces PNG charts in
results/<workload>/graphs/.

Charts:
  1. Response Time vs Load      (request-weighted avg + worst-step p95)
  2. Throughput vs Load
  3. Check Pass Rate vs Load    (CHECK entries fired by koha_checks)
  4. Per-Step Latency           (horizontal bar, highest load level)

Usage:
    python plot_results.py [workload] [user counts...]
    python plot_results.py circulation 1 5 10 20
"""

import os
import sys

import matplotlib
import numpy as np
import pandas as pd

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

RESULTS_DIR = "results"
DEFAULT_WORKLOAD = "circulation"
USER_COUNTS = [1, 5, 10, 20]
CHECK_TYPE = "CHECK"

# ── Style ───────────────────────────────────────────────────────────────────
plt.rcParams.update({
    "figure.figsize": (10, 6),
    "figure.dpi": 150,
    "font.family": "sans-serif",
    "font.size": 12,
    "axes.grid": True,
    "grid.alpha": 0.25,
    "grid.linestyle": "--",
    "axes.spines.top": False,
    "axes.spines.right": False,
    "axes.titlesize": 14,
    "axes.titleweight": "bold",
})

BLUE = "#2563EB"
GREEN = "#059669"
RED = "#DC2626"
PURPLE = "#7C3AED"
AMBER = "#F59E0B"


# ── I/O helpers ─────────────────────────────────────────────────────────────

def load_stats(raw_dir, user_count):
    path = os.path.join(raw_dir, f"{user_count}_users_stats.csv")
    if not os.path.exists(path):
        return None
    return pd.read_csv(path)


def step_rows(df):
    """Real requests and browser steps: everything except checks and the total row."""
    return df[(df["Name"] != "Aggregated") & (df["Type"] != CHECK_TYPE)]


def check_rows(df):
    return df[df["Type"] == CHECK_TYPE]


def check_summary(df):
    """Pass rate per named check."""
    checks = check_rows(df)
    out = pd.DataFrame({
        "Check": checks["Name"],
        "Runs": checks["Request Count"].astype(int),
        "Failures": checks["Failure Count"].astype(int),
    })
    out["Pass %"] = np.where(
        out["Runs"] > 0,
        (out["Runs"] - out["Failures"]) * 100 / out["Runs"].clip(lower=1),
        100.0,
    )
    return out.reset_index(drop=True)


def step_latency(df):
    """Average latency per request/step, slowest first."""
    steps = step_rows(df)
    out = steps[["Type", "Name", "Request Count", "Average Response Time", "95%"]].copy()
    return out.sort_values("Average Response Time", ascending=False).reset_index(drop=True)


def summarize_level(df, users):
    steps = step_rows(df)
    checks = check_rows(df)
    total = int(steps["Request Count"].sum())
    failures = int(steps["Failure Count"].sum())
    if total:
        avg = float((steps["Average Response Time"] * steps["Request Count"]).sum() / total)
    else:
        avg = 0.0
    check_runs = int(checks["Request Count"].sum())
    check_failures = int(checks["Failure Count"].sum())
    return {
        "Users": users,
        "Avg (ms)": avg,
        "Worst p95 (ms)": float(steps["95%"].max()) if not steps.empty else 0.0,
        "Req/s": float(steps["Requests/s"].sum()),
        "Failures": failures,
        "Total": total,
        "Error %": failures * 100 / total if total else 0.0,
        "Checks": check_runs,
        "Check Pass %": (check_runs - check_failures) * 100 / check_runs if check_runs else 100.0,
    }


def collect_metrics(raw_dir, user_counts=USER_COUNTS):
    rows = []
    for n in user_counts:
        df = load_stats(raw_dir, n)
        if df is None:
            continue
        rows.append(summarize_level(df, n))
    return pd.DataFrame(rows)


def save(fig, graphs_dir, name):
    path = os.path.join(graphs_dir, name)
    fig.tight_layout()
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    print(f"  saved {path}")
    return path


# ── Charts ──────────────────────────────────────────────────────────────────

def chart_response_time(m, graphs_dir, title):
    fig, ax = plt.subplots()
    ax.plot(m["Users"], m["Avg (ms)"], "o-", color=BLUE, lw=2, label="Mean")
    ax.plot(m["Users"], m["Worst p95 (ms)"], "^--", color=PURPLE, lw=2, label="Slowest step p95")
    for _, row in m.iterrows():
        ax.annotate(f'{row["Avg (ms)"]:.0f}',
                    xy=(row["Users"], row["Avg (ms)"]),
                    textcoords="offset points", xytext=(0, 12),
                    ha="center", fontsize=9, color=BLUE, fontweight="bold")
    ax.set_xlabel("Virtual Users")
    ax.set_ylabel("Response Time (ms)")
    ax.set_title(f"{title} — Response Time vs Load")
    ax.set_xticks(m["Users"])
    ax.legend(loc="upper left")
    return save(fig, graphs_dir, "response_time_vs_load.png")


def chart_throughput(m, graphs_dir, title):
    fig, ax = plt.subplots()
    ax.plot(m["Users"], m["Req/s"], "s-", color=GREEN, lw=2.5, markersize=8)
    ax.fill_between(m["Users"], m["Req/s"], alpha=0.10, color=GREEN)
    ax.set_xlabel("Virtual Users")
    ax.set_ylabel("Throughput (req/s)")
    ax.set_title(f"{title} — Throughput vs Load")
    ax.set_xticks(m["Users"])
    ax.set_ylim(bottom=0)
    return save(fig, graphs_dir, "throughput_vs_load.png")


def chart_check_pass_rate(m, graphs_dir, title):
    fig, ax = plt.subplots()
    x = np.arange(len(m))
    colors = [GREEN if v >= 100 else AMBER if v >= 95 else RED for v in m["Check Pass %"]]
    bars = ax.bar(x, m["Check Pass %"], color=colors, alpha=0.85, edgecolor="white", lw=1.5)
    for b, v, runs in zip(bars, m["Check Pass %"], m["Checks"]):
        ax.text(b.get_x() + b.get_width() / 2, b.get_height() + 0.5,
                f"{v:.1f}%\n({runs} checks)", ha="center", va="bottom", fontsize=9)
    ax.axhline(y=100, color=GREEN, linestyle="--", lw=1.2, alpha=0.6)
    ax.set_xticks(x)
    ax.set_xticklabels([str(u) for u in m["Users"]])
    ax.set_xlabel("Virtual Users")
    ax.set_ylabel("Checks Passed (%)")
    ax.set_title(f"{title} — Check Pass Rate vs Load")
    ax.set_ylim(0, 110)
    return save(fig, graphs_dir, "check_pass_rate.png")


def chart_step_latency(df, users, graphs_dir, title):
    steps = step_latency(df)
    if steps.empty:
        return None
    fig, ax = plt.subplots(figsize=(11, max(4, 0.45 * len(steps))))
    bars = ax.barh(steps["Name"], steps["Average Response Time"],
                   color=BLUE, edgecolor="white", height=0.5)
    for b, v in zip(bars, steps["Average Response Time"]):
        ax.text(b.get_width(), b.get_y() + b.get_height() / 2,
                f" {v:,.0f} ms", ha="left", va="center", fontsize=9)
    ax.invert_yaxis()
    ax.set_xlabel("Average Response Time (ms)")
    ax.set_title(f"{title} — Per-Step Latency ({users} Virtual Users)")
    return save(fig, graphs_dir, "per_step_latency.png")


# ── Main ────────────────────────────────────────────────────────────────────

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    workload = argv[0] if argv else DEFAULT_WORKLOAD
    user_counts = [int(u) for u in argv[1:]] or USER_COUNTS
    raw_dir = os.path.join(RESULTS_DIR, workload, "raw")
    graphs_dir = os.path.join(RESULTS_DIR, workload, "graphs")
    title = f"Koha {workload.replace('_', ' ').title()}"

    m = collect_metrics(raw_dir, user_counts)
    if m.empty:
        print(f"No data in {raw_dir}/. Run tests first: ./run_circulation_tests.sh {workload}")
        return 1

    os.makedirs(graphs_dir, exist_ok=True)
    m.to_csv(os.path.join(graphs_dir, "summary.csv"), index=False)
    print(f"Summary ({len(m)} load levels):\n{m.to_string(index=False)}\n")

    chart_response_time(m, graphs_dir, title)
    chart_throughput(m, graphs_dir, title)
    chart_check_pass_rate(m, graphs_dir, title)

    max_users = int(m["Users"].max())
    top = load_stats(raw_dir, max_users)
    chart_step_latency(top, max_users, graphs_dir, title)
    checks = check_summary(top)
    if not checks.empty:
        print(f"Checks at {max_users} users:\n{checks.to_string(index=False)}")
    print(f"\nDone. Charts in {graphs_dir}/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
