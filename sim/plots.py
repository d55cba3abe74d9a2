# sim/plots.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple
import numpy as np
import matplotlib.pyplot as plt

from dknn.classifier import DilutedKNNClassifier
from dknn.points import DataPoint
from .evaluate import TrainHistory


def confidence_map(
    clf: DilutedKNNClassifier,
    xlim: Tuple[float, float],
    ylim: Tuple[float, float],
    resolution: int = 64,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Evaluate the classifier on a resolution x resolution grid.
    Returns (xs, ys, winner[ny, nx], confidence[ny, nx]).
    """
    xs = np.linspace(xlim[0], xlim[1], resolution)
    ys = np.linspace(ylim[0], ylim[1], resolution)
    winner = np.zeros((resolution, resolution), dtype=np.int64)
    conf = np.zeros((resolution, resolution), dtype=np.float64)
    for j, yv in enumerate(ys):
        for i, xv in enumerate(xs):
            winner[j, i], conf[j, i] = clf.predict_with_confidence(DataPoint(float(xv), float(yv)))
    return xs, ys, winner, conf


def plot_confidence_map(
    clf: DilutedKNNClassifier,
    points: Sequence[DataPoint],
    class_names: Optional[List[str]] = None,
    resolution: int = 64,
    margin: float = 10.0,
) -> plt.Figure:
    X = np.array([[p.x, p.y] for p in points], dtype=float).reshape(-1, 2)
    centers = clf.centers()
    all_xy = np.concatenate([X, centers], axis=0)
    xlim = (float(all_xy[:, 0].min() - margin), float(all_xy[:, 0].max() + margin))
    ylim = (float(all_xy[:, 1].min() - margin), float(all_xy[:, 1].max() + margin))

    xs, ys, winner, conf = confidence_map(clf, xlim, ylim, resolution=resolution)
    names = class_names or [f"class {c}" for c in range(clf.class_count)]

    fig, ax = plt.subplots(figsize=(7, 6))
    # winning class as hue, confidence as opacity
    cmap = plt.get_cmap("tab10")
    rgba = cmap(winner % 10)
    rgba[..., 3] = 0.15 + 0.6 * conf
    ax.imshow(rgba, origin="lower", extent=(xlim[0], xlim[1], ylim[0], ylim[1]), aspect="auto")

    labels = np.array([p.label if p.label is not None else -1 for p in points])
    for c in range(clf.class_count):
        sel = labels == c
        ax.scatter(X[sel, 0], X[sel, 1], s=6, color=cmap(c % 10), label=names[c], alpha=0.8)

    params = clf.parameters()
    for c, (cx, cy) in enumerate(centers):
        ax.plot(cx, cy, marker="x", color="black")
        circle = plt.Circle((cx, cy), params[c, 1], fill=False, linestyle="--", color=cmap(c % 10))
        ax.add_patch(circle)

    ax.set_xlim(*xlim)
    ax.set_ylim(*ylim)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_title(f"Dilution map ({resolution}x{resolution}), dashed = overconfidence radius")
    ax.legend(loc="upper left", fontsize=8)
    fig.tight_layout()
    return fig


def plot_parameter_history(hist: TrainHistory, class_names: Optional[List[str]] = None) -> Dict[str, plt.Figure]:
    spread = np.array(hist.spread, dtype=float)
    overconf = np.array(hist.overconfidence, dtype=float)
    n_classes = spread.shape[1] if spread.ndim == 2 else 0
    names = class_names or [f"class {c}" for c in range(n_classes)]

    figs: Dict[str, plt.Figure] = {}
    for key, values, ylabel in (
        ("spread_history", spread, "spread"),
        ("overconfidence_history", overconf, "overconfidence radius"),
    ):
        fig, ax = plt.subplots(figsize=(9, 4))
        for c in range(n_classes):
            ax.plot(values[:, c], label=names[c])
        ax.set_xlabel("batch")
        ax.set_ylabel(ylabel)
        ax.set_title(f"Dilution parameter: {ylabel}")
        if n_classes:
            ax.legend()
        fig.tight_layout()
        figs[key] = fig
    return figs


def plot_compare_accuracy(method_results: Dict[str, Dict[str, Any]], class_names: Optional[List[str]] = None) -> Dict[str, plt.Figure]:
    """
    Creates:
      - overall accuracy per method
      - per-class recall per method (grouped bars)
    """
    methods = list(method_results.keys())

    fig_acc = plt.figure()
    acc = [method_results[m]["metrics"]["accuracy"] for m in methods]
    plt.bar(np.arange(len(methods)), acc)
    plt.xticks(np.arange(len(methods)), methods)
    plt.ylim(0.0, 1.0)
    plt.ylabel("accuracy")
    plt.title("Overall accuracy comparison")

    n_classes = len(method_results[methods[0]]["metrics"]["recall"]) if methods else 0
    names = class_names or [f"class {c}" for c in range(n_classes)]
    fig_rec = plt.figure()
    x = np.arange(n_classes)
    w = 0.8 / max(1, len(methods))
    for i, m in enumerate(methods):
        plt.bar(x + i * w, method_results[m]["metrics"]["recall"], width=w, label=m)
    plt.xticks(x + w * (len(methods) - 1) / 2, names)
    plt.ylim(0.0, 1.0)
    plt.ylabel("recall")
    plt.title("Per-class recall (comparison)")
    plt.legend()

    return {
        "compare_accuracy": fig_acc,
        "compare_recall_per_class": fig_rec,
    }
