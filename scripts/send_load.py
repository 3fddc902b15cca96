#!/usr/bin/env python
"""Paced load generator for the prediction gateway."""

from __future__ import annotations

import argparse
import json
import time
from collections import Counter
from pathlib import Path
from statistics import median
from typing import Dict, List

import requests


def load_payloads(path: Path) -> List[Dict[str, object]]:
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def p95(values: List[float]) -> float:
    if not values:
        return 0.0
    idx = max(int(0.95 * len(values)) - 1, 0)
    return sorted(values)[idx]


def error_code(resp: requests.Response) -> str:
    if resp.status_code == 200:
        return "ok"
    try:
        return str(resp.json().get("code", "unknown"))
    except ValueError:
        return "non-json"


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--gateway", default="http://localhost:8888")
    parser.add_argument("--duration", type=int, default=30)
    parser.add_argument("--rps", type=float, default=2)
    parser.add_argument("--timeout", type=float, default=60)
    parser.add_argument("--requests-file", default="examples/sample_requests.jsonl")
    args = parser.parse_args()

    payloads = load_payloads(Path(args.requests_file))
    outcomes: Counter = Counter()
    latencies: List[float] = []
    start = time.time()
    sent = 0
    while time.time() - start < args.duration:
        payload = payloads[sent % len(payloads)]
        sent += 1
        t0 = time.perf_counter()
        try:
            resp = requests.post(f"{args.gateway}/predict", json=payload, timeout=args.timeout)
        except requests.RequestException as exc:
            outcomes[type(exc).__name__] += 1
        else:
            outcomes[f"{resp.status_code} {error_code(resp)}"] += 1
            if resp.status_code == 200:
                latencies.append(time.perf_counter() - t0)
        time.sleep(max(0.0, (1 / args.rps) - (time.perf_counter() - t0)))

    print(f"Sent {sent} requests")
    for outcome, count in outcomes.most_common():
        print(f"  {outcome}: {count}")
    if latencies:
        print(f"Latency p50: {median(latencies)*1000:.0f} ms, p95: {p95(latencies)*1000:.0f} ms")


if __name__ == "__main__":
    main()
