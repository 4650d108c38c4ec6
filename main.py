import argparse
import logging
import os
import sys
import threading
import time

import numpy as np
import psutil

from graphview import DATA_FILE, StoredDirection, load_graph
from hits import HITS, HITSParams
from linkanalysis import DEFAULT_TOL, LinkAnalysisError
from pagerank import DanglingPolicy, PageRank, PageRankParams

RESULT_FILE = "Res.txt"


def save_topk(scores, topk=100, filename=RESULT_FILE):
    """Write the `topk` highest scores as `<id> <score>` lines, best first."""
    scores = np.asarray(scores)
    topk = min(topk, len(scores))
    if topk <= 0:
        open(filename, "w").close()
        return
    top_indices = np.argpartition(-scores, topk - 1)[:topk]
    top_indices = top_indices[np.argsort(-scores[top_indices], kind="stable")]
    with open(filename, "w") as f:
        f.writelines(f"{idx} {scores[idx]:.10f}\n" for idx in top_indices)


class MemoryMonitor(threading.Thread):
    def __init__(self, interval=0.01):
        super().__init__(daemon=True)
        self.interval = interval
        self.peak = 0
        self.running = True

    def run(self):
        proc = psutil.Process(os.getpid())
        while self.running:
            try:
                self.peak = max(self.peak, proc.memory_info().rss)
            except psutil.Error:
                break
            time.sleep(self.interval)

    def stop(self):
        self.running = False


def build_parser():
    parser = argparse.ArgumentParser(description="Link analysis (PageRank / HITS) over an edge list")
    parser.add_argument("--input", default=DATA_FILE, help="Input file path")
    parser.add_argument("--output", default=RESULT_FILE, help="Output file path")
    parser.add_argument("--algorithm", choices=["pagerank", "hits"], default="pagerank")
    parser.add_argument("--damping", type=float, default=0.85, help="Damping factor")
    parser.add_argument("--tol", type=float, default=DEFAULT_TOL, help="Convergence threshold")
    parser.add_argument("--max_iter", type=int, default=10, help="Maximum iterations, 0 for no limit")
    parser.add_argument("--dangling", choices=[p.value for p in DanglingPolicy], default=DanglingPolicy.DROP.value)
    parser.add_argument("--stored", choices=[d.value for d in StoredDirection], default=StoredDirection.OUT.value,
                        help="Edge direction kept in memory (out: push updates, in: pull updates)")
    parser.add_argument("--topk", type=int, default=100)
    parser.add_argument("--verbose", action="store_true")
    return parser


def build_algorithm(graph, args):
    max_iter = args.max_iter or None
    if args.algorithm == "hits":
        return HITS(graph, HITSParams(max_iterations=max_iter, tolerance=args.tol))
    params = PageRankParams(
        max_iterations=max_iter, tolerance=args.tol, damping_factor=args.damping, dangling=args.dangling
    )
    return PageRank(graph, params)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    monitor = MemoryMonitor()
    monitor.start()
    t_start = time.time()
    try:
        graph = load_graph(args.input, stored=args.stored)
        print(f"Loaded {graph!r}")
        algorithm = build_algorithm(graph, args)

        t_calc = time.time()
        state = algorithm.run()
        reason = algorithm.stop_reason(state)
        print(f"{algorithm.name}: {reason.value} after {state.iteration} iterations, "
              f"error={state.error:.2e}, {time.time() - t_calc:.2f}s")

        scores = state.authorities if args.algorithm == "hits" else state.scores
        save_topk(scores, topk=args.topk, filename=args.output)
    except (LinkAnalysisError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        monitor.stop()
        monitor.join()

    print(f"Peak memory: {monitor.peak / (1024 * 1024):.2f} MB")
    print(f"Total elapsed time: {time.time() - t_start:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
