import sys
import os
import argparse
from tqdm import tqdm

# Add parent directory to path to import khmer_normalizer package
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from khmer_normalizer import DecodeError, KhmerNormalizer


def normalize_corpus(corpus_paths, output_path, limit=None):
    """
    Normalizes every line of the corpus files into a single output file.
    Lines that are not valid UTF-8 are reported and left out of the output.
    Returns (processed_lines, changed_lines, skipped_lines).
    """
    norm = KhmerNormalizer()

    total_lines = 0
    # Pre-count lines for progress bar
    for path in corpus_paths:
        if os.path.exists(path):
            with open(path, "rb") as f:
                total_lines += sum(1 for _ in f)

    if limit:
        total_lines = min(total_lines, limit)

    processed_lines = 0
    changed_lines = 0
    skipped_lines = 0
    with open(output_path, "wb") as f_out, \
            tqdm(total=total_lines, desc="Normalizing Corpus") as pbar:
        for corpus_path in corpus_paths:
            if not os.path.exists(corpus_path):
                print(f"Warning: Corpus file not found: {corpus_path}")
                continue

            with open(corpus_path, "rb") as f:
                for line_no, line in enumerate(f, 1):
                    if limit and processed_lines >= limit:
                        break

                    line = line.rstrip(b"\n")
                    try:
                        normalized = norm.normalize(line)
                    except DecodeError as e:
                        print(f"Warning: skipping {corpus_path}:{line_no}: {e}")
                        skipped_lines += 1
                    else:
                        if normalized != line:
                            changed_lines += 1
                        f_out.write(normalized + b"\n")

                    processed_lines += 1
                    pbar.update(1)

            if limit and processed_lines >= limit:
                break

    return processed_lines, changed_lines, skipped_lines


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Normalize a Khmer corpus line by line.")

    # default paths
    script_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(script_dir)
    default_data_dir = os.path.join(project_root, 'data')

    parser.add_argument("--corpus", nargs="+", default=[
        os.path.join(default_data_dir, "khmer_wiki_corpus.txt"),
    ], help="Path(s) to corpus text file(s)")
    parser.add_argument("--output", default=os.path.join(default_data_dir, "khmer_corpus_normalized.txt"), help="Output text path")
    parser.add_argument("--limit", type=int, default=None, help="Limit number of lines to process (for testing)")

    args = parser.parse_args()

    processed, changed, skipped = normalize_corpus(args.corpus, args.output, args.limit)
    print(f"Processed {processed} lines, {changed} changed by normalization.")
    if skipped:
        print(f"Skipped {skipped} lines that are not valid UTF-8.")
    print(f"Saved to {args.output}")
