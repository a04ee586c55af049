import numpy as np
import pytest
from numpy.testing import assert_allclose

from fcrcov.exceptions import LocalFitFailure
from fcrcov.smooth import KernelType, polyfit1d, smooth_scattered


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
def test_polyfit1d_happy_case(dtype):
    bw = 0.25
    x = np.linspace(0.0, 1.0, 11, dtype=dtype)
    y = 2.0 * x**2 + 3 * x
    w = np.ones_like(x)
    x_new = np.linspace(0.0, 1.0, 11, dtype=dtype)

    # fmt: off
    expected_results = {
        KernelType.GAUSSIAN: np.array([
            -0.059162939216, 0.325036778510, 0.731014910930, 1.161759855632,
            1.619430366873, 2.105204388503, 2.619430366873, 3.161759855632,
            3.731014910930, 4.325036778510, 4.940837060784
        ], dtype=dtype),
        KernelType.LOGISTIC: np.array([
            -0.161150328985, 0.277047311686, 0.724601740286, 1.184564011983,
            1.659446412861, 2.150885243892, 2.659446412861, 3.184564011983,
            3.724601740286, 4.277047311686, 4.838849671015
        ], dtype=dtype),
        KernelType.RECTANGULAR: np.array([
            -0.006666666667, 0.340000000000, 0.720000000000, 1.120000000000,
            1.560000000000, 2.040000000000, 2.560000000000, 3.120000000000,
            3.720000000000, 4.340000000000, 4.993333333333
        ], dtype=dtype),
        KernelType.EPANECHNIKOV: np.array([
            -0.004684014870, 0.337087794433, 0.706823529412, 1.106823529412,
            1.546823529412, 2.026823529412, 2.546823529412, 3.106823529412,
            3.706823529412, 4.337087794433, 4.995315985130
        ], dtype=dtype),
        KernelType.BIWEIGHT: np.array([
            -0.002780677479, 0.334288436982, 0.698334331935, 1.098334331935,
            1.538334331935, 2.018334331935, 2.538334331935, 3.098334331935,
            3.698334331935, 4.334288436982, 4.997219322521
        ], dtype=dtype),
    }
    # fmt: on

    for kernel_type, expected in expected_results.items():
        y_pred = polyfit1d(x, y, w, x_new, bw, kernel_type)
        assert y_pred.dtype == dtype
        assert_allclose(y_pred, expected, rtol=1e-5, atol=1e-6, err_msg=f"Failed for kernel {kernel_type} with dtype {dtype}")


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
def test_polyfit1d_big(dtype):
    bw = 5.445
    x = np.array([1.0, 2.0, 4.0, 3.0, 5.0, 7.0, 6.0, 10.0, 8.0, 9.0], dtype=dtype)
    y = np.linspace(0.1, 1.0, 10, dtype=dtype)
    w = np.ones_like(x, dtype=dtype)

    x_new = np.linspace(1.0, 10.0, 21, dtype=dtype)

    # fmt: off
    expected_results = {
        KernelType.GAUSSIAN: np.array([
            0.114586353967, 0.159087772528, 0.203476488507, 0.247741547666,
            0.291870963774, 0.335851693572, 0.379669608445, 0.423309462831,
            0.466754859524, 0.509988212162, 0.552990705324, 0.595742252773,
            0.638221454523, 0.680405553527, 0.722270392867, 0.763790374458,
            0.804938420320, 0.845685937585, 0.886002788393, 0.925857265912,
            0.965216077679
        ], dtype=dtype),
        KernelType.RECTANGULAR: np.array([
            0.095238095238, 0.144095238095, 0.205000000000, 0.246785714286,
            0.286428571429, 0.333035714286, 0.381388888889, 0.430138888889,
            0.465454545455, 0.507727272727, 0.550000000000, 0.592272727273,
            0.634545454545, 0.677916666667, 0.719166666667, 0.760119047619,
            0.799761904762, 0.844821428571, 0.888214285714, 0.908142857143,
            0.942857142857
        ], dtype=dtype),
        KernelType.EPANECHNIKOV: np.array([
            0.111069479239, 0.152700799416, 0.199552902871, 0.244701570772,
            0.288410270577, 0.332966817520, 0.378635913259, 0.425844450664,
            0.473212365964, 0.516403786619, 0.559346656993, 0.602050771672,
            0.644521566603, 0.686133188092, 0.727155392828, 0.767187169989,
            0.806377826185, 0.843945256986, 0.876817386601, 0.901555255376,
            0.925257248143
        ], dtype=dtype),
    }
    # fmt: on

    for kernel_type, expected in expected_results.items():
        # unsorted input goes through the sorting wrapper
        y_pred = smooth_scattered(x, y, x_new, bw, kernel_type, w=w)
        assert_allclose(y_pred, expected, rtol=1e-5, atol=1e-6, err_msg=f"Failed for kernel {kernel_type} with dtype {dtype}")


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
def test_polyfit1d_weights(dtype):
    bw = 1.35789
    x = np.array([1.0, 2.0, 3.0, 4.5, 5.0, 7.0], dtype=dtype)
    y = np.linspace(0.0, 1.0, 6, dtype=dtype)
    x_new = np.array([3.0, 4.0, 5.0, 5.5, 6.0, 6.5], dtype=dtype)

    unit_w = np.ones_like(x, dtype=dtype)
    expected_unit = np.array([0.381629932858, 0.561082911319, 0.730103450143, 0.805520165855, 0.875183582904, 0.941180911169], dtype=dtype)
    assert_allclose(polyfit1d(x, y, unit_w, x_new, bw), expected_unit, rtol=1e-5, atol=1e-6)

    w = np.array([1.0, 1.0, 3.0, 4.0, 1.5, 2.5], dtype=dtype)
    expected_weighted = np.array([0.380560427220, 0.548544553298, 0.710492023351, 0.787257842890, 0.861230453851, 0.933244651929], dtype=dtype)
    assert_allclose(polyfit1d(x, y, w, x_new, bw), expected_weighted, rtol=1e-5, atol=1e-6)


def test_polyfit1d_reproduces_linear_data():
    x = np.array([0.0, 0.1, 0.1, 0.35, 0.6, 0.8, 1.0])
    y = 2.0 - 3.0 * x
    x_new = np.linspace(0.0, 1.0, 9)
    for kernel_type in [KernelType.GAUSSIAN, KernelType.EPANECHNIKOV, KernelType.TRICUBE]:
        assert_allclose(polyfit1d(x, y, np.ones_like(x), x_new, 0.5, kernel_type), 2.0 - 3.0 * x_new, rtol=1e-10, atol=1e-10)


def test_polyfit1d_zero_response():
    x = np.array([1.0, 1.0, 2.0, 3.0, 3.0, 4.0, 5.0])
    y = np.zeros_like(x)
    assert_allclose(polyfit1d(x, y, np.ones_like(x), np.array([1.0, 2.5, 5.0]), 0.7), 0.0, atol=1e-15)


def test_polyfit1d_local_fit_failure():
    x = np.array([0.0, 0.1, 0.2, 0.9, 1.0])
    y = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    w = np.ones_like(x)
    x_new = np.array([0.1, 0.5, 0.7])
    with pytest.raises(LocalFitFailure, match="Local linear fit failed at 2 of 3 locations") as exc_info:
        polyfit1d(x, y, w, x_new, 0.15, KernelType.EPANECHNIKOV)
    assert_allclose(exc_info.value.locations, [0.5, 0.7])
    assert exc_info.value.bandwidth == 0.15
    assert isinstance(exc_info.value, ArithmeticError)


def test_polyfit1d_single_distinct_location_fails():
    x = np.array([0.5, 0.5, 0.5])
    y = np.array([1.0, 2.0, 3.0])
    with pytest.raises(LocalFitFailure):
        polyfit1d(x, y, np.ones_like(x), np.array([0.5]), 1.0)


def test_polyfit1d_zero_weights_fail():
    x = np.array([0.0, 0.5, 1.0])
    y = np.array([1.0, 2.0, 3.0])
    w = np.array([1.0, 0.0, 0.0])
    with pytest.raises(LocalFitFailure):
        polyfit1d(x, y, w, np.array([0.5]), 1.0)


def make_test_inputs():
    x = np.array([0.1, 0.2, 0.3, 0.4, 0.5])
    y = np.array([0.1, 0.2, 0.3, 0.4, 0.5])
    w = np.array([1.0, 1.0, 1.0, 1.0, 1.0])
    x_new = np.array([0.1, 0.2, 0.3, 0.4, 0.5])
    return x, y, w, x_new


def test_polyfit1d_input_validation():
    x, y, w, x_new = make_test_inputs()
    with pytest.raises(ValueError, match="x must be a 1D array."):
        polyfit1d(x.reshape(-1, 1), y, w, x_new, 0.1)
    with pytest.raises(ValueError, match="y must be a 1D array."):
        polyfit1d(x, y.reshape(-1, 1), w, x_new, 0.1)
    with pytest.raises(ValueError, match="w must be a 1D array."):
        polyfit1d(x, y, w.reshape(-1, 1), x_new, 0.1)
    with pytest.raises(ValueError, match="y must have the same size as x."):
        polyfit1d(x, y[:-1], w, x_new, 0.1)
    with pytest.raises(ValueError, match="w must have the same size as x."):
        polyfit1d(x, y, w[:-1], x_new, 0.1)
    with pytest.raises(ValueError, match="x_new must be a 1D array."):
        polyfit1d(x, y, w, x_new.reshape(-1, 1), 0.1)
    with pytest.raises(ValueError, match="x_new must not be empty."):
        polyfit1d(x, y, w, np.array([]), 0.1)
    with pytest.raises(ValueError, match="Bandwidth, bandwidth, should be positive."):
        polyfit1d(x, y, w, x_new, 0.0)
    with pytest.raises(ValueError, match="Bandwidth, bandwidth, should not be NaN."):
        polyfit1d(x, y, w, x_new, np.nan)
    with pytest.raises(ValueError, match="kernel must be one of"):
        polyfit1d(x, y, w, x_new, 0.1, "gauss")
    with pytest.raises(ValueError, match="All weights in w must be non-negative."):
        polyfit1d(x, y, -w, x_new, 0.1)
    with pytest.raises(ValueError, match="x must be sorted in ascending order."):
        polyfit1d(x[::-1], y, w, x_new, 0.1)
    with pytest.raises(ValueError, match="x_new must be strictly increasing."):
        polyfit1d(x, y, w, x_new[::-1], 0.1)


@pytest.mark.parametrize("bad_type", [None, "0.1", [0.1], True])
def test_polyfit1d_bandwidth_non_numeric_type(bad_type):
    x, y, w, x_new = make_test_inputs()
    with pytest.raises(TypeError, match="Bandwidth, bandwidth, should be a float or an integer."):
        polyfit1d(x, y, w, x_new, bad_type)


@pytest.mark.parametrize("name", ["x", "y", "w", "x_new"])
def test_polyfit1d_nan_inputs(name):
    inputs = dict(zip(["x", "y", "w", "x_new"], make_test_inputs()))
    inputs[name] = inputs[name].copy()
    inputs[name][2] = np.nan
    with pytest.raises(ValueError, match=f"Input array {name} contains NaN values."):
        polyfit1d(inputs["x"], inputs["y"], inputs["w"], inputs["x_new"], 0.1)


def test_smooth_scattered_is_order_invariant():
    rng = np.random.default_rng(7)
    x = rng.uniform(0.0, 1.0, 40)
    x = np.concatenate([x, x[:10]])
    y = np.sin(2 * np.pi * x) + rng.normal(0, 0.1, x.size)
    x_new = np.linspace(0.0, 1.0, 15)
    perm = rng.permutation(x.size)
    assert_allclose(smooth_scattered(x, y, x_new, 0.1), smooth_scattered(x[perm], y[perm], x_new, 0.1), rtol=1e-12, atol=1e-12)


def test_smooth_scattered_shape_mismatch():
    with pytest.raises(ValueError, match="x and y must have the same shape."):
        smooth_scattered(np.array([0.0, 1.0]), np.array([1.0]), np.array([0.5]), 0.5)
    with pytest.raises(ValueError, match="w must have the same shape as x."):
        smooth_scattered(np.array([0.0, 1.0]), np.array([1.0, 2.0]), np.array([0.5]), 0.5, w=np.array([1.0]))
