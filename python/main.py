#!/usr/bin/env python3
import os
import sys

from cards import DEFAULT_STRATEGY, STRATEGIES, THEORETICAL_PROBABILITY, normalize_strategy
from monte_carlo import BACKENDS, DEFAULT_BACKEND, WorkerStartError, normalize_backend, run_simulation


def print_usage(program):
    print(f"Usage: {program} <total_rounds> <num_threads> [strategy] [backend]")
    print(f"Example: {program} 1000000 4")
    print(f"Strategies: {', '.join(STRATEGIES)} (default: {DEFAULT_STRATEGY})")
    print(f"Backends: {', '.join(BACKENDS)} (default: {DEFAULT_BACKEND})")


def parse_positive(value):
    number = int(value)
    if number <= 0:
        raise ValueError(f"expected a positive integer, got {value}")
    return number


def print_report(result):
    print("\n=== RESULTS ===")
    print(f"Successful rounds: {result.successes} of {result.total_rounds}")
    print(f"Empirical probability: {result.probability:.6f} ({result.probability * 100:.4f}%)")
    print(f"Theoretical probability: {result.theoretical:.6f} ({result.theoretical * 100:.4f}%)")
    print(f"Difference: {result.difference:.6f}")
    print(f"Execution time: {result.elapsed_s:.3f}s")
    print(f"Throughput: {result.rounds_per_second:.0f} rounds/s")

    print("\n=== THEORETICAL CALCULATION ===")
    print("Once the first card is drawn:")
    print("- 51 cards remain in the deck")
    print("- 3 of them share the first card's rank")
    print(f"- Probability = 3/51 = {THEORETICAL_PROBABILITY:.6f}")

    if result.backend != "threads":
        return

    pid = os.getpid()
    print("\n=== THREAD INSPECTION ===")
    print(f"Process PID: {pid}")
    print("To watch the workers, run in another terminal:")
    print(f"ps -eLf | grep {pid}")
    print(f"or: top -H -p {pid}")


def main(argv=None):
    if argv is None:
        argv = sys.argv
    program = argv[0] if argv else "main.py"

    if len(argv) not in (3, 4, 5):
        print_usage(program)
        sys.exit(1)

    try:
        total_rounds = parse_positive(argv[1])
        num_threads = parse_positive(argv[2])
    except ValueError:
        print("Error: total_rounds and num_threads must both be positive integers")
        print_usage(program)
        sys.exit(1)

    try:
        strategy = normalize_strategy(argv[3] if len(argv) > 3 else DEFAULT_STRATEGY)
        backend = normalize_backend(argv[4] if len(argv) > 4 else DEFAULT_BACKEND)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    extra_rounds = total_rounds % num_threads

    print("=== Monte Carlo: do the top two cards share a rank? ===")
    print(f"Total rounds: {total_rounds}")
    print(f"Workers: {num_threads} ({backend})")
    print(f"Strategy: {strategy}")
    print("Work distribution:")
    print(f"- Base rounds per worker: {total_rounds // num_threads}")
    if extra_rounds > 0:
        print(f"- Extra rounds: {extra_rounds} (workers 0..{extra_rounds - 1})")
    print()

    try:
        result = run_simulation(total_rounds, num_threads, strategy=strategy, backend=backend)
    except WorkerStartError as exc:
        print(f"Error creating workers: {exc}")
        sys.exit(1)

    for worker in result.workers:
        print(f"Worker {worker.index}: {worker.successes} successes out of {worker.rounds} rounds")

    print(f"Simulation took {result.elapsed_s * 1000:.2f}ms")
    print_report(result)


if __name__ == "__main__":
    main()
