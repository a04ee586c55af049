import numpy as np
import pytest

from fcrcov import CrossCovDataGenerator


def _mean_func(x):
    return x


@pytest.fixture
def toy_func_data(request):
    dtype = getattr(request, "param", np.float64)
    y = [np.array([1.0, 2.0, 2.0], dtype=dtype), np.array([3.0, 4.0], dtype=dtype), np.array([4.0, 5.0], dtype=dtype)]
    t = [np.array([0.1, 0.2, 0.3], dtype=dtype), np.array([0.2, 0.3], dtype=dtype), np.array([0.1, 0.3], dtype=dtype)]
    z = np.array([1.0, 2.0, 6.0])
    return y, t, z


@pytest.fixture
def zero_cross_cov_data():
    y = [np.array([0.2, 0.9, 0.4, 0.7, 0.1]), np.arange(1.0, 4.0), np.arange(2.0, 5.0), np.array([4.0])]
    t = [np.arange(1.0, 6.0), np.arange(1.0, 4.0), np.arange(1.0, 4.0), np.array([4.0])]
    z = np.full(4, 4.0)
    mu = np.full(5, 4.0)
    return y, t, z, mu


@pytest.fixture
def generator():
    return CrossCovDataGenerator(np.linspace(0.0, 1.0, 21), _mean_func)


@pytest.fixture
def sparse_func_data(generator):
    y, t, z = generator.generate(300, 100)
    y, t = CrossCovDataGenerator.make_sparse(y, t, 15, 101)
    return y, t, z


@pytest.fixture
def dense_func_data(generator):
    y, _, z = generator.generate(40, 200)
    return np.vstack(y), z
