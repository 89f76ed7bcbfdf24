from __future__ import annotations

import argparse
import gzip
import json
import os
import random
import statistics
import tempfile
import time
import tracemalloc
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable

from embedfs import NodeInfo, VirtualFileSystem

@dataclass
class CaseResult:
    backend: str
    case: str
    seconds_mean: float
    seconds_min: float
    seconds_max: float
    peak_kib_mean: float

def _run_with_memory(fn: Callable[[], None]) -> tuple[float, float]:
    tracemalloc.start()
    start = time.perf_counter()
    fn()
    elapsed = time.perf_counter() - start
    _, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()
    return elapsed, peak / 1024.0

# ---------------------------------------------------------------------------
#  Fixtures
# ---------------------------------------------------------------------------

@dataclass
class Fixture:
    root: Path
    file_count: int
    file_size: int
    disk: VirtualFileSystem
    tree: VirtualFileSystem
    gzip: VirtualFileSystem

def _payload(file_size: int) -> bytes:
    line = b"lorem ipsum dolor sit amet, consectetur adipiscing elit\n"
    return (line * (file_size // len(line) + 1))[:file_size]

def build_fixture(root: Path, file_count: int, file_size: int) -> Fixture:
    payload = _payload(file_size)
    packed = gzip.compress(payload)
    bench = root / "bench"
    bench.mkdir(parents=True)
    for i in range(file_count):
        (bench / f"f{i:05d}.txt").write_bytes(payload)

    disk = VirtualFileSystem()
    disk.add_mount("/bench", bench)

    tree = VirtualFileSystem()
    m = tree.add_mount("/bench", bench)
    for i in range(file_count):
        m.add_file(NodeInfo(f"/bench/f{i:05d}.txt", size=file_size), payload, gzip=False)

    gz = VirtualFileSystem()
    m = gz.add_mount("/bench", bench)
    for i in range(file_count):
        m.add_file(NodeInfo(f"/bench/f{i:05d}.txt", size=file_size), packed, gzip=True)

    return Fixture(bench, file_count, file_size, disk, tree, gz)

# ---------------------------------------------------------------------------
#  Cases
# ---------------------------------------------------------------------------

def bench_read_all(fs: VirtualFileSystem, fx: Fixture) -> None:
    total = 0
    for i in range(fx.file_count):
        total += len(fs.read_file(f"/bench/f{i:05d}.txt"))
    if total != fx.file_count * fx.file_size:
        raise RuntimeError("read_all benchmark validation failed")

def bench_os_read_all(fx: Fixture) -> None:
    total = 0
    for i in range(fx.file_count):
        with open(os.path.join(fx.root, f"f{i:05d}.txt"), "rb") as f:
            total += len(f.read())
    if total != fx.file_count * fx.file_size:
        raise RuntimeError("os read_all benchmark validation failed")

def bench_random_access(fs: VirtualFileSystem, fx: Fixture, reads: int, chunk: int) -> None:
    rng = random.Random(1234)
    with fs.open("/bench/f00000.txt") as f:
        for _ in range(reads):
            f.seek(rng.randrange(0, max(1, fx.file_size - chunk)))
            f.read(chunk)

def bench_stat_all(fs: VirtualFileSystem, fx: Fixture) -> None:
    for i in range(fx.file_count):
        fs.stat(f"/bench/f{i:05d}.txt")

def bench_listing(fs: VirtualFileSystem, fx: Fixture) -> None:
    if len(fs.read_dir("/bench")) != fx.file_count:
        raise RuntimeError("listing benchmark validation failed")

def bench_find_mount(mount_count: int, lookups: int) -> None:
    fs = VirtualFileSystem(embedded_mode=True)
    for i in range(mount_count):
        fs.add_mount(f"/m{i}/sub", f"/embedded/m{i}")
    for i in range(lookups):
        fs.find_mount(f"/m{i % mount_count}/sub/x/y.txt")

# ---------------------------------------------------------------------------
#  Reporting
# ---------------------------------------------------------------------------

def _fmt_ms(seconds: float) -> str:
    return f"{seconds * 1000.0:.2f}"

def _fmt_kib(peak_kib: float) -> str:
    return f"{peak_kib:.1f}"

def run_case(
    backend: str,
    case: str,
    fn: Callable[[], None],
    repeat: int,
    warmup: int,
) -> CaseResult:
    for _ in range(warmup):
        fn()

    elapsed_list: list[float] = []
    peak_list: list[float] = []
    for _ in range(repeat):
        elapsed, peak_kib = _run_with_memory(fn)
        elapsed_list.append(elapsed)
        peak_list.append(peak_kib)

    return CaseResult(
        backend=backend,
        case=case,
        seconds_mean=statistics.mean(elapsed_list),
        seconds_min=min(elapsed_list),
        seconds_max=max(elapsed_list),
        peak_kib_mean=statistics.mean(peak_list),
    )

def print_table(results: list[CaseResult]) -> None:
    print("| Case | Backend | mean(ms) | min(ms) | max(ms) | peak KiB (mean) |")
    print("|---|---:|---:|---:|---:|---:|")
    for r in results:
        print(
            f"| {r.case} | {r.backend} | {_fmt_ms(r.seconds_mean)} |"
            f" {_fmt_ms(r.seconds_min)} | {_fmt_ms(r.seconds_max)} | {_fmt_kib(r.peak_kib_mean)} |"
        )

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Benchmark embedfs tree vs gzip tree vs disk fallback reads"
    )
    parser.add_argument("--repeat", type=int, default=5)
    parser.add_argument("--warmup", type=int, default=1)
    parser.add_argument("--files", type=int, default=500)
    parser.add_argument("--file-size", type=int, default=16 * 1024)
    parser.add_argument("--random-reads", type=int, default=2000)
    parser.add_argument("--chunk", type=int, default=512)
    parser.add_argument("--mounts", type=int, default=64)
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args()

    results: list[CaseResult] = []
    with tempfile.TemporaryDirectory() as tmp:
        fx = build_fixture(Path(tmp), args.files, args.file_size)
        backends = [("tree", fx.tree), ("tree(gzip)", fx.gzip), ("disk", fx.disk)]

        for name, fs in backends:
            results.append(
                run_case(name, "read_all", lambda fs=fs: bench_read_all(fs, fx),
                         args.repeat, args.warmup)
            )
        results.append(
            run_case("open()", "read_all", lambda: bench_os_read_all(fx),
                     args.repeat, args.warmup)
        )

        for name, fs in backends:
            results.append(
                run_case(
                    name,
                    "random_access",
                    lambda fs=fs: bench_random_access(fs, fx, args.random_reads, args.chunk),
                    args.repeat,
                    args.warmup,
                )
            )

        for name, fs in backends:
            results.append(
                run_case(name, "stat_all", lambda fs=fs: bench_stat_all(fs, fx),
                         args.repeat, args.warmup)
            )
            results.append(
                run_case(name, "read_dir", lambda fs=fs: bench_listing(fs, fx),
                         args.repeat, args.warmup)
            )

        results.append(
            run_case(
                "registry",
                "find_mount",
                lambda: bench_find_mount(args.mounts, args.files * 10),
                args.repeat,
                args.warmup,
            )
        )

    if args.json:
        print(json.dumps([asdict(r) for r in results], indent=2))
        return

    print_table(results)


if __name__ == "__main__":
    main()
