"""
Benchmark: Huffman image codec on synthetic grayscale images

Runs the codec over several image distributions and sizes, with repeated runs,
and compares the closed-loop container against the standalone one

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_side 256 --exp2_max_side 1024
  python experiments.py --outdir results --exp1_generators flat,gradient,noise256
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff
from bitstream import iter_bits, pack_codes
from container import pack_container, pack_standalone, unpack_container, unpack_standalone


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[int, int]) -> float:
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values())


# Synthetic image generators, each returns width*height samples in row order

def gen_flat(width: int, height: int, seed: int = 0, value: int = 128) -> bytes:
    return bytes([value]) * (width * height)

def gen_gradient(width: int, height: int, seed: int = 0) -> bytes:
    out = bytearray()
    for y in range(height):
        for x in range(width):
            out.append(((x + y) * 255 // max(1, width + height - 2)) & 0xFF)
    return bytes(out)

def gen_noise(width: int, height: int, levels: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    step = 256 // levels
    return bytes(rng.randrange(0, levels) * step for _ in range(width * height))

def gen_checker(width: int, height: int, seed: int = 0, cell: int = 8) -> bytes:
    out = bytearray()
    for y in range(height):
        for x in range(width):
            out.append(255 if ((x // cell) + (y // cell)) % 2 else 0)
    return bytes(out)

def gen_zipf_like(width: int, height: int, alphabet: int = 64, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    # spread the ranks over the byte range so the image is not just dark pixels
    levels = [i * 256 // alphabet for i in range(alphabet)]
    return bytes(rng.choices(levels, weights=weights, k=width * height))

GENERATOR_REGISTRY: Dict[str, Callable[[int, int, int], bytes]] = {
    "flat": lambda w, h, seed: gen_flat(w, h, seed=seed),
    "gradient": lambda w, h, seed: gen_gradient(w, h, seed=seed),
    "noise256": lambda w, h, seed: gen_noise(w, h, levels=256, seed=seed),
    "noise16": lambda w, h, seed: gen_noise(w, h, levels=16, seed=seed),
    "zipf64": lambda w, h, seed: gen_zipf_like(w, h, alphabet=64, seed=seed),
    "checker": lambda w, h, seed: gen_checker(w, h, seed=seed),
}

def generate_image(name: str, width: int, height: int, seed: int) -> Tuple[str, bytes]:
    """
    Helper: unknown generator names fall back to noise256 so a typo in the list
    does not throw away the rest of the run
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_noise256", gen_noise(width, height, levels=256, seed=seed)
    return name, fn(width, height, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    width: int
    height: int
    run_id: int
    container: str  # "closed" or "standalone"
    unique_symbols: int
    entropy_bits: float

    build_tree_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    bit_count: int
    compressed_bytes: int
    bits_per_sample: float
    compression_ratio: float
    correctness_ok: int  # 1 or 0


CONTAINERS = ("closed", "standalone")


def run_one(data: bytes, width: int, height: int, container: str) -> MetricRow:
    if container not in CONTAINERS:
        raise ValueError("container must be 'closed' or 'standalone'")

    ft = huff.freq_table(data)

    # Frequency table, tree and code table
    t0 = now_ns()
    tree = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(tree)
    t1 = now_ns()
    build_tree_ms = ns_to_ms(t1 - t0)

    # encode
    t2 = now_ns()
    payload, bit_count = pack_codes(data, code_map)
    if container == "closed":
        blob = pack_container(bit_count, width, height, payload)
    else:
        blob = pack_standalone(ft, bit_count, width, height, payload)
    t3 = now_ns()
    encode_ms = ns_to_ms(t3 - t2)

    # decode; the standalone path rebuilds its tree from the stored table
    t4 = now_ns()
    if container == "closed":
        parsed = unpack_container(blob)
        decode_tree = tree
    else:
        stored_ft, parsed = unpack_standalone(blob)
        decode_tree = huff.build_huffman_tree(stored_ft)
    decoded = huff.huffman_decode(iter_bits(parsed.payload, parsed.bit_count), decode_tree)
    t5 = now_ns()
    decode_ms = ns_to_ms(t5 - t4)

    samples = max(1, len(data))
    return MetricRow(
        exp_name="",
        dataset_name="",
        width=width,
        height=height,
        run_id=0,
        container=container,
        unique_symbols=len(ft),
        entropy_bits=shannon_entropy(ft),
        build_tree_ms=build_tree_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_tree_ms + encode_ms + decode_ms,
        bit_count=bit_count,
        compressed_bytes=len(blob),
        bits_per_sample=bit_count / samples,
        compression_ratio=len(blob) / samples,
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, image size, container and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.width, r.height, r.container)
        key_to.setdefault(key, []).append(r)

    measured = ["compression_ratio", "bits_per_sample", "build_tree_ms", "encode_ms", "decode_ms", "total_ms"]
    summary_fields = ["exp_name", "dataset_name", "width", "height", "container", "n_runs", "entropy_bits"]
    for m in measured:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, width, height, container = key
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "width": width,
                "height": height,
                "container": container,
                "n_runs": len(items),
                "entropy_bits": statistics.mean(x.entropy_bits for x in items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in measured:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, container: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset and r.container == container]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    for c in CONTAINERS:
        y = [mean_for(d, c, "compression_ratio") for d in datasets]
        plt.plot(x, y, marker="o", label=c)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()

    # Huffman is within one bit of the entropy, plot both to show the gap
    plt.figure()
    plt.plot(x, [mean_for(d, "closed", "bits_per_sample") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "closed", "entropy_bits") for d in datasets], marker="x", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Sample")
    plt.title("Experiment 1: Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_bits_per_sample.png", dpi=200)
    plt.close()

    plt.figure()
    for c in CONTAINERS:
        y = [mean_for(d, c, "total_ms") for d in datasets]
        plt.plot(x, y, marker="o", label=c)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Total Time (ms) (build + encode + decode)")
    plt.title("Experiment 1: Total Runtime by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_total_time.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    distributions = sorted(set(r.dataset_name for r in exp_rows))

    for dist in distributions:
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.width * r.height for r in dist_rows))

        def mean_size(size: int, container: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.width * r.height == size and r.container == container]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        for field, label in (("encode_ms", "encode"), ("decode_ms", "decode")):
            y = [mean_size(s, "closed", field) for s in sizes]
            plt.plot(sizes, y, marker="o", label=label)
        plt.xlabel("Image Size (samples)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Encode/Decode Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_time_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        for c in CONTAINERS:
            y = [mean_size(s, c, "compression_ratio") for s in sizes]
            plt.plot(sizes, y, marker="o", label=c)
        plt.xlabel("Image Size (samples)")
        plt.ylabel("Compressed Bytes / Original Bytes")
        plt.title(f"Experiment 2: Compression Ratio vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_compression_ratio_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_side", type=int, default=256, help="Experiment 1 square image side in pixels")
    ap.add_argument("--exp1_generators", type=str, default="flat,gradient,noise256,noise16,zipf64,checker",
                    help="Comma-separated image generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_side", type=int, default=32, help="Experiment 2 min image side (doubling growth)")
    ap.add_argument("--exp2_max_side", type=int, default=512, help="Experiment 2 max image side (doubling growth)")
    ap.add_argument("--exp2_generators", type=str, default="gradient,noise256,zipf64",
                    help="Comma-separated image generator names for experiment 2")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        side = max(1, args.exp1_side)
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_image(gen_name, side, side, args.seed + run_id)
                for container in CONTAINERS:
                    row = run_one(data, side, side, container)
                    row.exp_name = "exp1_distribution"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    # Experiment 2: size scaling (square images, side doubles)
    if not args.no_exp2:
        sides: List[int] = []
        s = max(1, args.exp2_min_side)
        while s <= args.exp2_max_side:
            sides.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for side in sides:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_image(gen_name, side, side, args.seed + 10_000 + side + run_id)
                    for container in CONTAINERS:
                        row = run_one(data, side, side, container)
                        row.exp_name = "exp2_size_scaling"
                        row.dataset_name = dataset_name
                        row.run_id = run_id
                        rows.append(row)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
