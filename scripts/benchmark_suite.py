import sys
import os
import time
import timeit
import concurrent.futures

# Force UTF-8 for output
sys.stdout.reconfigure(encoding='utf-8')

# Add parent directory to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from khmer_normalizer import KhmerNormalizer

try:
    import psutil
    HAS_PSUTIL = True
except ImportError:
    HAS_PSUTIL = False

ITERATIONS_SEQ = 1000
ITERATIONS_CONC = 5000
WORKERS = 4


def run_concurrently(normalize_func, text, iterations, workers):
    start_time = time.time()
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(normalize_func, text) for _ in range(iterations)]
        concurrent.futures.wait(futures)
    end_time = time.time()
    return end_time - start_time


def get_memory_mb():
    if HAS_PSUTIL:
        process = psutil.Process(os.getpid())
        return process.memory_info().rss / 1024 / 1024
    else:
        return 0.0


def benchmark_suite():
    print(f"Initial Memory: {get_memory_mb():.2f} MB")

    print("Loading KhmerNormalizer...")
    start_load = time.time()
    mem_before = get_memory_mb()
    norm = KhmerNormalizer()
    print(f"KhmerNormalizer Load Time: {time.time() - start_load:.4f}s")
    print(f"KhmerNormalizer Memory Added: {get_memory_mb() - mem_before:.2f} MB")

    # Mixed script sample with split vowels, subscript DA and misordered coeng RO
    text = (
        "ក្រុមហ៊ុនទទួលបានប្រាក់ចំណូល ១ ០០០ ០០០ ដុល្លារក្នុងឆ្នាំនេះ ខណៈដែលតម្លៃភាគហ៊ុនកើនឡើង ៥% ស្មើនឹង 50.00$។ "
        "កេីត ខ្ដា ស្រ្តី "
        "Hello World កា្ត"
    )

    print(f"\n--- Text to Normalize (Length: {len(text)}) ---")
    print(text)
    print("-" * 60)
    print(norm.normalize(text))
    print("-" * 60)

    # Sequential latency
    start_mem = get_memory_mb()
    t_seq = timeit.timeit(lambda: norm.normalize(text), number=ITERATIONS_SEQ)
    end_mem = get_memory_mb()
    print(f"\nKhmerNormalizer: {t_seq / ITERATIONS_SEQ * 1000:.3f}ms per call (Mem Delta: {end_mem - start_mem:.2f} MB)")

    # Threaded throughput
    start_mem = get_memory_mb()
    dur = run_concurrently(norm.normalize, text, ITERATIONS_CONC, WORKERS)
    end_mem = get_memory_mb()
    print(f"KhmerNormalizer [{WORKERS} threads]: {ITERATIONS_CONC / dur:.2f} calls/sec (Mem Delta during run: {end_mem - start_mem:.2f} MB)")


if __name__ == "__main__":
    benchmark_suite()
