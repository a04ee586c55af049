import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from fcrcov.crosscov import get_raw_cross_cov, get_raw_cross_cov_dense
from fcrcov.exceptions import InputCardinalityError, MissingRequiredInputError
from fcrcov.interp import GridFunction
from fcrcov.utils import flatten_and_sort_data_matrices

MU = GridFunction(np.array([0.1, 0.2, 0.3]), np.array([1.0, 2.0, 3.0]))


def test_get_raw_cross_cov_happy_path(toy_func_data):
    y, t, z = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    raw = get_raw_cross_cov(ffd, MU, z)

    # z_mean is 3, so the centered z is [-2, -1, 3]
    assert raw.design == "sparse"
    assert raw.cov.dtype == np.float64
    assert_allclose(raw.t, [0.1, 0.2, 0.3, 0.2, 0.3, 0.1, 0.3])
    assert_allclose(raw.cov, [0.0, 0.0, 2.0, -1.0, -1.0, 9.0, 6.0], atol=1e-12)
    assert_array_equal(raw.sid, [0, 0, 0, 1, 1, 2, 2])


def test_get_raw_cross_cov_user_z_mean(toy_func_data):
    y, t, z = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    raw = get_raw_cross_cov(ffd, MU, z, z_mean=0.0)
    assert_allclose(raw.cov, [0.0, 0.0, -1.0, 2.0, 2.0, 18.0, 12.0], atol=1e-12)

    with pytest.raises(ValueError, match="z_mean should not be NaN."):
        get_raw_cross_cov(ffd, MU, z, z_mean=np.nan)


def test_get_raw_cross_cov_keeps_duplicated_locations(toy_func_data):
    y, t, z = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    raw = get_raw_cross_cov(ffd, MU, z)
    # one value per observation, nothing is averaged
    assert raw.cov.size == ffd.y.size
    assert np.sum(np.isclose(raw.t, 0.3)) == 3


def test_get_raw_cross_cov_cardinality(toy_func_data):
    y, t, z = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    with pytest.raises(InputCardinalityError, match="y and z are not compatible"):
        get_raw_cross_cov(ffd, MU, z[:2])
    with pytest.raises(ValueError, match="z must be a 1D array."):
        get_raw_cross_cov(ffd, MU, z.reshape(1, -1))


def test_get_raw_cross_cov_missing_mu(toy_func_data):
    y, t, z = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    with pytest.raises(MissingRequiredInputError, match="The mean function mu is missing without default."):
        get_raw_cross_cov(ffd, None, z)


def test_get_raw_cross_cov_missing_z(toy_func_data):
    y, t, _ = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    z = np.array([1.0, np.nan, 6.0])
    with pytest.warns(UserWarning, match="1 subjects with missing z"):
        raw = get_raw_cross_cov(ffd, MU, z)
    # z_mean is 3.5
    assert_array_equal(raw.sid, [0, 0, 0, 2, 2])
    assert_allclose(raw.cov, [0.0, 0.0, 2.5, 7.5, 5.0], atol=1e-12)

    with pytest.raises(ValueError, match="All values in z are NaN."):
        get_raw_cross_cov(ffd, MU, np.full(3, np.nan))


def test_get_raw_cross_cov_mu_does_not_cover(toy_func_data):
    y, t, z = toy_func_data
    ffd = flatten_and_sort_data_matrices(y, t)
    mu = GridFunction(np.array([0.1, 0.2]), np.array([1.0, 2.0]))
    with pytest.raises(ValueError, match="The mean function mu must cover all observed time points."):
        get_raw_cross_cov(ffd, mu, z)


def test_get_raw_cross_cov_dense(dense_func_data):
    y, z = dense_func_data
    raw = get_raw_cross_cov_dense(y, z)
    expected = np.cov(np.column_stack([y, z]), rowvar=False)[-1, :-1]
    assert raw.design == "dense"
    assert raw.t is None
    assert raw.sid is None
    assert raw.cov.shape == (y.shape[1],)
    assert_allclose(raw.cov, expected, rtol=1e-10, atol=1e-12)


def test_get_raw_cross_cov_dense_invalid(dense_func_data):
    y, z = dense_func_data
    with pytest.raises(InputCardinalityError, match="y and z are not compatible"):
        get_raw_cross_cov_dense(y, z[:-1])
    with pytest.raises(ValueError, match="At least two subjects are needed"):
        get_raw_cross_cov_dense(y[:1], z[:1])


def test_get_raw_cross_cov_dense_missing_z(dense_func_data):
    y, z = dense_func_data
    z = z.copy()
    z[0] = np.nan
    with pytest.warns(UserWarning, match="1 subjects with missing z"):
        raw = get_raw_cross_cov_dense(y, z)
    expected = np.cov(np.column_stack([y[1:], z[1:]]), rowvar=False)[-1, :-1]
    assert np.all(np.isfinite(raw.cov))
    assert_allclose(raw.cov, expected, rtol=1e-10, atol=1e-12)

    with pytest.raises(ValueError, match="All values in z are NaN."):
        get_raw_cross_cov_dense(y, np.full(z.shape, np.nan))


def test_get_raw_cross_cov_dense_missing_y(dense_func_data):
    y, z = dense_func_data
    y_missing = y.copy()
    y_missing[3, 1] = np.nan
    raw = get_raw_cross_cov_dense(y_missing, z)
    expected = np.cov(np.column_stack([y, z]), rowvar=False)[-1, :-1]
    kept = np.arange(y.shape[0]) != 3
    expected[1] = np.cov(y[kept, 1], z[kept])[0, 1]
    assert np.all(np.isfinite(raw.cov))
    assert_allclose(raw.cov, expected, rtol=1e-10, atol=1e-12)

    # a column observed for a single subject has no sample covariance
    y_missing[1:, 2] = np.nan
    with pytest.raises(ValueError, match="At least two subjects are needed"):
        get_raw_cross_cov_dense(y_missing, z)
