import sys
import gc
import time
import pprint
import numpy as np
from fcrcov import CrossCovDataGenerator, get_cross_cov_yz


def benchmark_cross_cov(y, t, z, mu, bandwidth=None, n_jobs=None):
    """Benchmark the get_cross_cov_yz function."""
    gc.collect()  # Clear garbage collector to avoid interference
    start_time = time.time_ns()
    result = get_cross_cov_yz(z, y, t, mu=mu, bandwidth=bandwidth, n_jobs=n_jobs)
    elapsed_time = time.time_ns() - start_time
    del result  # Free memory
    return elapsed_time


if __name__ == "__main__":
    n = 1000
    grid = np.linspace(0.0, 1.0, 51, dtype=np.float64)
    cdg = CrossCovDataGenerator(grid, lambda x: np.sin(0.4 * x))
    y, t, z = cdg.generate(n, 42)
    y, t = CrossCovDataGenerator.make_sparse(y, t, 45, 43)
    mu = np.sin(0.4 * grid)
    settings = {"fixed bandwidth": dict(bandwidth=0.05), "GCV": dict(), "GCV (n_jobs=-1)": dict(n_jobs=-1)}

    print("Python Information:\n", sys.version)
    np.show_config()

    num_replications = 10
    run_times = dict()
    for name, kwargs in settings.items():
        run_times[name] = []
        for i in range(num_replications):
            run_times[name].append(benchmark_cross_cov(y, t, z, mu, **kwargs))

    for name in settings:
        # remove fastest and slowest
        run_times_remove = np.sort(run_times[name])[1:-1]

        print(
            f"Average time (remove fastest and slowest) for {num_replications} replications with sample size {n} on " +
            f"get_cross_cov_yz with {name} runs: {np.mean(run_times_remove) / 1e9:.6f} seconds"
        )
        print(f"Standard deviation of run times: {np.std(run_times_remove) / 1e9:.6f} seconds")

    for name, run_time in run_times.items():
        print(f"setting - {name}, run_time:")
        pprint.pprint(np.array(run_time) / 1e9)
