import argparse
import concurrent.futures
import logging
import os
import sys
import time

# Try to import psutil for memory tracking
try:
    import psutil
    HAS_PSUTIL = True
except ImportError:
    HAS_PSUTIL = False

from .normalization import DecodeError, KhmerNormalizer


def get_memory_mb():
    if HAS_PSUTIL:
        process = psutil.Process(os.getpid())
        return process.memory_info().rss / 1024 / 1024
    return 0.0


def run_concurrently(normalize_func, lines, workers):
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        # Map returns an iterator, converting to list forces execution
        return list(executor.map(normalize_func, lines))


def format_codes(text):
    return " ".join(f"{ord(c):04X}" for c in text)


def read_lines(paths, limit=-1):
    """Reads non-empty lines from the given files, stopping after `limit` lines."""
    lines = []
    for filepath in paths:
        if limit == 0:
            break
        with open(filepath, "rb") as f:
            for raw in f:
                if limit == 0:
                    break
                line = raw.rstrip(b"\r\n")
                if not line.strip():
                    continue
                lines.append(line)
                if limit > 0:
                    limit -= 1
    return lines


def benchmark(norm, lines, threads):
    count = len(lines)
    total_mb = sum(len(line) for line in lines) / (1024 * 1024)
    print(f"\n--- Input Benchmark ({count} lines, {total_mb:.2f} MB) ---")
    print(f"Initial Memory: {get_memory_mb():.2f} MB")

    # 1. Sequential
    print("[1 Thread] Processing...", end="", flush=True)
    start_time = time.time()
    start_mem = get_memory_mb()

    sequential = [norm.normalize(line) for line in lines]

    dur_seq = max(time.time() - start_time, 0.001)
    print(f" Done in {dur_seq:.3f}s")
    print(f"Throughput: {count / dur_seq:.2f} lines/sec ({total_mb / dur_seq:.2f} MB/s)")
    print(f"Mem Delta: {get_memory_mb() - start_mem:.2f} MB")

    # 2. Concurrent
    if threads > 1:
        print(f"\n[{threads} Threads] Processing...", end="", flush=True)
        start_time = time.time()
        start_mem = get_memory_mb()

        concurrent_results = run_concurrently(norm.normalize, lines, threads)

        dur_conc = max(time.time() - start_time, 0.001)
        print(f" Done in {dur_conc:.3f}s")
        print(f"Throughput: {count / dur_conc:.2f} lines/sec ({total_mb / dur_conc:.2f} MB/s)")
        print(f"Mem Delta: {get_memory_mb() - start_mem:.2f} MB")
        print(f"Speedup: {dur_seq / dur_conc:.2f}x")

        if concurrent_results != sequential:
            print("Warning: threaded results differ from sequential results")
            return False
    return True


def build_parser():
    parser = argparse.ArgumentParser(description="Khmer Normalizer CLI")
    parser.add_argument("text", nargs="*", help="Raw text to normalize")
    parser.add_argument("--input", nargs="+", help="Input file(s)")
    parser.add_argument("--output", help="Write normalized lines to this file instead of stdout")
    parser.add_argument("--limit", type=int, default=-1, help="Limit number of lines")
    parser.add_argument("--show-codes", action="store_true", help="Print codepoints before and after")
    parser.add_argument("--benchmark", action="store_true", help="Run benchmark mode")
    parser.add_argument("--threads", type=int, default=4, help="Number of threads for concurrent benchmark")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.input and args.text:
        parser.error("give either text or --input, not both")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    norm = KhmerNormalizer()

    if args.input:
        try:
            lines = read_lines(args.input, args.limit)
        except OSError as e:
            print(f"Error: could not read input: {e}")
            return 1
    elif args.text:
        lines = [" ".join(args.text).encode("utf-8")]
    else:
        print("Usage: python -m khmer_normalizer [--input <file> ...] [--benchmark] [text ...]")
        return 1

    if args.benchmark:
        return 0 if benchmark(norm, lines, args.threads) else 1

    try:
        results = [norm.normalize(line).decode("utf-8") for line in lines]
    except DecodeError as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            for res in results:
                f.write(res + "\n")
        print(f"Normalized {len(results)} lines to {args.output}")
        return 0

    for line, res in zip(lines, results):
        if args.show_codes:
            original = line.decode("utf-8")
            print(f"Original:   {original}")
            print(f"            {format_codes(original)}")
            print(f"Normalized: {res}")
            print(f"            {format_codes(res)}")
            print("-" * 40)
        else:
            print(res)
    return 0


if __name__ == "__main__":
    sys.exit(main())
