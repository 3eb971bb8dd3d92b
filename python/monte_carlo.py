import time
from dataclasses import dataclass, field
from multiprocessing import Pool
from threading import Event, Thread

import numpy as np

from cards import DEFAULT_STRATEGY, THEORETICAL_PROBABILITY, get_strategy, normalize_strategy

BACKENDS = ('threads', 'processes')
DEFAULT_BACKEND = 'threads'


class WorkerStartError(RuntimeError):
    pass


@dataclass(frozen=True)
class WorkerResult:
    index: int
    rounds: int
    successes: int


@dataclass
class SimulationResult:
    total_rounds: int
    num_workers: int
    strategy: str
    backend: str
    workers: list = field(default_factory=list)
    elapsed_s: float = 0.0

    @property
    def successes(self):
        return sum(w.successes for w in self.workers)

    @property
    def probability(self):
        return self.successes / self.total_rounds

    @property
    def theoretical(self):
        return THEORETICAL_PROBABILITY

    @property
    def difference(self):
        return self.probability - self.theoretical

    @property
    def rounds_per_second(self):
        if self.elapsed_s <= 0:
            return 0.0
        return self.total_rounds / self.elapsed_s


def normalize_backend(name):
    key = name.strip().lower()
    if key not in BACKENDS:
        raise ValueError(f"Unknown backend: {name} (available: {', '.join(BACKENDS)})")
    return key


def distribute_rounds(total_rounds, num_workers):
    if total_rounds <= 0:
        raise ValueError("total_rounds must be > 0")
    if num_workers <= 0:
        raise ValueError("num_workers must be > 0")

    rounds_per_worker = total_rounds // num_workers
    remainder = total_rounds % num_workers

    # The first `remainder` workers take one extra round each
    return [rounds_per_worker + (1 if i < remainder else 0) for i in range(num_workers)]


def worker_seeds(num_workers, base_seed=None):
    """
    One seed per worker: a run-wide entropy value (wall clock unless given)
    combined with the worker index, so workers never share a stream.
    """
    if base_seed is None:
        base_seed = time.time_ns()
    return [np.random.SeedSequence(base_seed, spawn_key=(i,)) for i in range(num_workers)]


def run_worker(args, stop=None):
    index, rounds, seed, strategy = args
    rng = np.random.default_rng(seed)
    trial = get_strategy(strategy)
    local_success = 0

    for _ in range(rounds):
        if stop is not None and stop.is_set():
            break
        if trial(rng):
            local_success += 1

    return WorkerResult(index=index, rounds=rounds, successes=local_success)


def _thread_body(task, stop, results, errors):
    index = task[0]
    try:
        results[index] = run_worker(task, stop)
    except Exception as exc:
        errors[index] = exc
        stop.set()


def _run_with_threads(tasks, num_workers):
    stop = Event()
    results = [None] * num_workers
    errors = [None] * num_workers
    threads = []

    # One dedicated thread per worker, never reused
    for task in tasks:
        thread = Thread(target=_thread_body, args=(task, stop, results, errors), name=f"worker-{task[0]}")
        try:
            thread.start()
        except RuntimeError as exc:
            # Started workers see the flag on their next trial and exit
            stop.set()
            raise WorkerStartError(f"Failed to start worker {task[0]}: {exc}") from exc
        threads.append(thread)

    for thread in threads:
        thread.join()

    for exc in errors:
        if exc is not None:
            raise exc

    return results


def _run_with_processes(tasks, num_workers):
    # maxtasksperchild=1 with chunksize=1 keeps every worker in its own process
    try:
        pool = Pool(processes=num_workers, maxtasksperchild=1)
    except OSError as exc:
        raise WorkerStartError(f"Failed to start {num_workers} worker processes: {exc}") from exc

    with pool:
        return pool.map(run_worker, tasks, chunksize=1)


def run_simulation(total_rounds, num_workers, strategy=DEFAULT_STRATEGY, backend=DEFAULT_BACKEND, seed=None):
    # Validate everything before a single worker exists
    rounds = distribute_rounds(total_rounds, num_workers)
    strategy = normalize_strategy(strategy)
    backend = normalize_backend(backend)

    seeds = worker_seeds(num_workers, seed)
    tasks = [(i, rounds[i], seeds[i], strategy) for i in range(num_workers)]

    start_time = time.time()
    if backend == 'threads':
        workers = _run_with_threads(tasks, num_workers)
    else:
        workers = _run_with_processes(tasks, num_workers)
    elapsed = time.time() - start_time

    return SimulationResult(
        total_rounds=total_rounds,
        num_workers=num_workers,
        strategy=strategy,
        backend=backend,
        workers=workers,
        elapsed_s=elapsed,
    )
