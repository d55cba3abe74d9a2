# sim/main.py
from __future__ import annotations
import os
import argparse
from datetime import datetime
import numpy as np

from dknn.classifier import DilutedKNNClassifier
from dknn.trace import console_observer

from .config import SimConfig
from .data import generate_labeled_points, make_training_batches, points_to_arrays, save_points_csv
from .baseline import NearestMeanClassifier
from .evaluate import train_dknn, run_method_dknn, run_method_nearest_mean, run_method_random
from .plots import plot_confidence_map, plot_parameter_history, plot_compare_accuracy
from .io_utils import ensure_dir, save_json, save_rows_csv, save_state_json, save_training_history_csv


def run_experiment(cfg: SimConfig, verbose: bool = False) -> dict:
    """Generate data, train on batches, evaluate all methods. No file output."""
    class_count = cfg.class_count
    gen_kwargs = cfg.data.to_kwargs()

    # 1) Training stream, cut into fixed-size batches with acquisition gaps
    rng = np.random.RandomState(cfg.train.seed)
    train_points = generate_labeled_points(
        cfg.train.n_batches * cfg.train.batch_size, rng=rng, **gen_kwargs
    )
    batches = make_training_batches(
        train_points, cfg.train.batch_size, missing_rate=cfg.train.missing_rate, rng=rng
    )

    # 2) Deterministic test set
    test_points = generate_labeled_points(
        cfg.test.n_points, rng=np.random.RandomState(cfg.test.seed), **gen_kwargs
    )

    # 3) Train diluted kNN
    clf = DilutedKNNClassifier(
        class_count=class_count,
        batch_size=cfg.train.batch_size,
        dilution=cfg.train.dilution,
        tune=cfg.train.tune,
        notify=print if verbose else None,
    )
    hist = train_dknn(clf, batches)

    # 4) Baseline on the points of accepted batches only, in the same raw units as dknn
    kept = [p for batch, ok in zip(batches, hist.accepted) if ok for p in batch]
    X_kept, y_kept = points_to_arrays(kept)
    baseline = NearestMeanClassifier(class_count=class_count).fit(X_kept, y_kept)

    if verbose:
        clf.observer = console_observer
        clf.predict_one(test_points[0])
        clf.observer = None

    results = {
        "dknn": run_method_dknn(clf, test_points),
        "nearest_mean": run_method_nearest_mean(baseline, test_points),
        "random": run_method_random(test_points, class_count, seed=cfg.seed),
    }
    return {
        "classifier": clf,
        "history": hist,
        "train_points": train_points,
        "test_points": test_points,
        "results": results,
    }


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--outdir", type=str, default=None, help="Optional output directory")
    parser.add_argument("--batches", type=int, default=None, help="Number of training batches")
    parser.add_argument("--batch_size", type=int, default=None, help="Points per batch")
    parser.add_argument("--missing_rate", type=float, default=None, help="Probability an entry is lost")
    parser.add_argument("--no_tune", action="store_true", help="Keep default dilution parameters")
    parser.add_argument("--verbose", action="store_true", help="Print batch notices and a sample trace")
    args = parser.parse_args()

    cfg = SimConfig()
    if args.batches is not None:
        cfg.train.n_batches = args.batches
    if args.batch_size is not None:
        cfg.train.batch_size = args.batch_size
    if args.missing_rate is not None:
        cfg.train.missing_rate = args.missing_rate
    if args.no_tune:
        cfg.train.tune = False

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    outdir = args.outdir or os.path.join("results", stamp)
    ensure_dir(outdir)

    run = run_experiment(cfg, verbose=args.verbose)
    clf = run["classifier"]
    hist = run["history"]
    results = run["results"]
    names = cfg.data.class_names()

    # Charts
    figs = {
        "confidence_map": plot_confidence_map(
            clf, run["test_points"], class_names=names,
            resolution=cfg.map.resolution, margin=cfg.map.margin,
        ),
    }
    figs.update(plot_parameter_history(hist, class_names=names))
    figs.update(plot_compare_accuracy(results, class_names=names))

    # Save outputs
    ensure_dir(os.path.join(outdir, "plots"))
    for name, fig in figs.items():
        fig.savefig(os.path.join(outdir, "plots", f"{name}.png"), dpi=200, bbox_inches="tight")

    summary = {
        "batches": {
            "total": len(hist.accepted),
            "rejected": hist.n_rejected,
        },
        "classifier": clf.state.snapshot(),
        "methods": {m: results[m]["metrics"] for m in results},
        "config_used": cfg.to_dict(),
    }
    save_json(summary, os.path.join(outdir, "results.json"))
    save_state_json(clf.state, os.path.join(outdir, "dknn_state.json"))
    save_points_csv(run["test_points"], os.path.join(outdir, "test_points.csv"))
    save_training_history_csv(hist, os.path.join(outdir, "training_history.csv"))
    for m, res in results.items():
        save_rows_csv(res["rows"], os.path.join(outdir, f"predictions_{m}.csv"))

    print(f"\nSaved all outputs to: {outdir}")
    print("Key files:")
    print("  results.json, dknn_state.json")
    print("  test_points.csv, training_history.csv")
    print("  predictions_*.csv")
    print("  plots/*.png (confidence map, parameter history, comparisons)")
    for m in results:
        print(f"  {m:13s} accuracy={results[m]['metrics']['accuracy']:.3f}")


if __name__ == "__main__":
    main()
