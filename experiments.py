"""
Huffman packing: demo and benchmark harness

Encodes a single text and shows the code table, or runs repeated experiments
comparing the two tree-building strategies (two_queue vs heap).

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --text "mmmmaaarrrthhaa"
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 16 --exp2_max_kb 128
  python experiments.py --outdir results --exp1_generators uniform64,zipf64,repetitive90,english_like
"""

from __future__ import annotations

import argparse
import bisect
import csv
import random
import statistics
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt

import huffman as huff
from packing import HuffmanEncoding, decode_text, encode


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


# Synthetic dataset generators (character alphabets)

ALPHABET = string.ascii_letters + string.digits + string.punctuation + " \n"

def _sample(size: int, chars: Sequence[str], weights: Sequence[float], seed: int) -> str:
    rng = random.Random(seed)
    cdf = []
    acc = 0.0
    total = sum(weights)
    for w in weights:
        acc += w / total
        cdf.append(acc)
    last = len(chars) - 1
    return "".join(chars[min(bisect.bisect_left(cdf, rng.random()), last)] for _ in range(size))

def gen_uniform(size: int, alphabet: int = 64, seed: int = 0) -> str:
    chars = ALPHABET[:alphabet]
    return _sample(size, chars, [1.0] * len(chars), seed)

def gen_zipf_like(size: int, alphabet: int = 64, s: float = 1.2, seed: int = 0) -> str:
    chars = ALPHABET[:alphabet]
    return _sample(size, chars, [1.0 / ((i + 1) ** s) for i in range(len(chars))], seed)

def gen_repetitive(size: int, dominant: str = "A", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    others = [c for c in ALPHABET if c != dominant]
    return "".join(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_english_like(size: int, seed: int = 0) -> str:
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == " ":
            weights.append(13.0)
        elif ch == "\n":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(size, chars, weights, seed)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform64": lambda size, seed: gen_uniform(size, alphabet=64, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "zipf16": lambda size, seed: gen_zipf_like(size, alphabet=16, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int) -> Tuple[str, str]:
    """
    Unknown dataset names fall back to uniform64 so a long run keeps going;
    the returned name records the fallback
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        return f"{name}_fallback_uniform", gen_uniform(size, alphabet=64, seed=seed)
    return name, fn(size, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    input_symbols: int
    run_id: int
    strategy: str  # "two_queue" or "heap"
    unique_symbols: int

    build_tree_ms: float
    build_codes_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    packed_bits: int
    packed_words: int
    avg_code_length: float
    compression_ratio: float
    correctness_ok: int  # 1 or 0


def run_one(data: str, strategy: str) -> MetricRow:
    ft = huff.compute_frequencies(data)

    t0 = now_ns()
    tree = huff.build_tree_from_frequencies(ft, strategy)
    t1 = now_ns()
    code_table = huff.generate_huffman_codes(tree)
    t2 = now_ns()

    encoding = HuffmanEncoding(code_table).pack(data)
    t3 = now_ns()
    decoded = decode_text(encoding)
    t4 = now_ns()

    build_tree_ms = ns_to_ms(t1 - t0)
    build_codes_ms = ns_to_ms(t2 - t1)
    encode_ms = ns_to_ms(t3 - t2)
    decode_ms = ns_to_ms(t4 - t3)

    return MetricRow(
        exp_name="",
        dataset_name="",
        input_symbols=len(data),
        run_id=0,
        strategy=strategy,
        unique_symbols=len(ft),
        build_tree_ms=build_tree_ms,
        build_codes_ms=build_codes_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_tree_ms + build_codes_ms + encode_ms + decode_ms,
        packed_bits=encoding.number_of_bits,
        packed_words=len(encoding.data),
        avg_code_length=huff.average_code_length(code_table, ft),
        compression_ratio=encoding.compression_ratio(),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = ("compression_ratio", "avg_code_length", "build_tree_ms", "encode_ms", "decode_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, input_symbols, strategy and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.input_symbols, r.strategy)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "input_symbols", "strategy", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size, strategy = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "input_symbols": size,
                "strategy": strategy,
                "n_runs": len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            out["correctness_ok_rate"] = sum(x.correctness_ok for x in items) / len(items)
            w.writerow(out)


# Plotting

def _save(outdir: Path, name: str) -> None:
    plt.tight_layout()
    plt.savefig(outdir / name, dpi=200)
    plt.close()

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, strategy: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset and r.strategy == strategy]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))
    charts = [
        ("compression_ratio", "Packed Bits / Original Bits", "Compression Ratio by Distribution", "exp1_compression_ratio.png"),
        ("encode_ms", "Encode Time (ms)", "Encode Time by Distribution", "exp1_encode_time.png"),
        ("total_ms", "Total Time (ms) (build + encode + decode)", "Total Runtime by Distribution", "exp1_total_time.png"),
    ]
    for field, ylabel, title, fname in charts:
        plt.figure()
        for s in huff.TREE_STRATEGIES:
            plt.plot(x, [mean_for(d, s, field) for d in datasets], marker="o", label=s)
        plt.xticks(x, datasets, rotation=20, ha="right")
        plt.ylabel(ylabel)
        plt.title(f"Experiment 1: {title}")
        plt.legend()
        _save(outdir, fname)


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.input_symbols for r in dist_rows))

        def mean_size(size: int, strategy: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.input_symbols == size and r.strategy == strategy]
            return statistics.mean(vals) if vals else float("nan")

        for field, ylabel, fname in (("encode_ms", "Encode Time (ms)", "encode_time"),
                                     ("decode_ms", "Decode Time (ms)", "decode_time")):
            plt.figure()
            for s in huff.TREE_STRATEGIES:
                plt.plot(sizes, [mean_size(n, s, field) for n in sizes], marker="o", label=s)
            plt.xlabel("Input Size (symbols)")
            plt.ylabel(ylabel)
            plt.title(f"Experiment 2: {ylabel} vs Size ({dist})")
            plt.legend()
            _save(outdir, f"exp2_{fname}_{dist}.png")


# Demo

def print_demo(text: str) -> int:
    encoding = encode(text)
    ft = huff.compute_frequencies(text)

    print(f"Input: {text!r} ({len(text)} symbols, {len(ft)} distinct)")
    print("Frequencies:")
    for sym, n in sorted(ft.items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"  {sym!r}: {n}")
    print("Code table:")
    for sym, code in sorted(encoding.code_table.items(), key=lambda kv: (kv[1].length, kv[0])):
        print(f"  {sym!r}: {huff.code_to_string(code)}")
    print(f"Packed words: {[f'{w:#018x}' for w in encoding.data]}")
    print(f"Packed bits: {encoding.number_of_bits} (ratio {encoding.compression_ratio():.3f})")

    ok = decode_text(encoding) == text
    print(f"Round trip: {'ok' if ok else 'FAILED'}")
    return 0 if ok else 2


# Main

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman bit-packing demo and benchmarks")
    ap.add_argument("--text", type=str, default=None, help="Encode this text, print the code table and exit")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=3, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=32, help="Experiment 1 fixed input size in K symbols")
    ap.add_argument("--exp1_generators", type=str, default="uniform64,zipf64,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in K symbols (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=64, help="Experiment 2 max size in K symbols (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform64,zipf64",
                    help="Comma-separated dataset generator names for experiment 2")

    args = ap.parse_args(argv)

    if args.text is not None:
        return print_demo(args.text)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                for strategy in huff.TREE_STRATEGIES:
                    row = run_one(data, strategy)
                    row.exp_name = "exp1_distribution"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max(1, args.exp2_max_kb) * 1024:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size, args.seed + 10_000 + size + run_id)
                    for strategy in huff.TREE_STRATEGIES:
                        row = run_one(data, strategy)
                        row.exp_name = "exp2_size_scaling"
                        row.dataset_name = dataset_name
                        row.run_id = run_id
                        rows.append(row)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0 if all(r.correctness_ok for r in rows) else 2


if __name__ == "__main__":
    raise SystemExit(main())
