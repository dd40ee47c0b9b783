import numpy as np
import pytest

from skipgram.errors import ConfigurationError
from skipgram.model import SkipGramModel, _sigmoid
from skipgram.optim import SGD, Adagrad, Adam, get_optimizer

# Unit tests: scores, loss and gradients, optimizer steps, export.


def test_sigmoid_stability():
    y = _sigmoid(np.array([-1000.0, 0.0, 1000.0]))
    assert np.all(np.isfinite(y))
    assert np.isclose(y[1], 0.5)


def test_score_strictly_between_zero_and_one():
    model = SkipGramModel(4, 3, seed=0)
    model.W_pivot[1] = 1000.0
    model.W_context[2] = 1000.0
    model.W_context[3] = -1000.0
    high = model.score(1, 2)
    low = model.score(1, 3)
    assert isinstance(high, float)
    assert 0.0 < low < 0.5 < high < 1.0


def test_score_vectorized():
    model = SkipGramModel(6, 4, seed=0)
    probs = model.score(np.array([1, 2, 3]), np.array([4, 5, 1]))
    assert probs.shape == (3,)
    assert np.all((probs > 0) & (probs < 1))


def test_forward_backward_shapes_and_initial_loss():
    V, D = 30, 16
    model = SkipGramModel(V, D, seed=1)
    rng = np.random.default_rng(0)
    pivots = rng.integers(1, V, size=32)
    contexts = rng.integers(1, V, size=32)
    labels = rng.integers(0, 2, size=32)
    loss, dW_pivot, dW_context = model.forward_backward(pivots, contexts, labels)
    assert dW_pivot.shape == (V, D)
    assert dW_context.shape == (V, D)
    # Near-zero logits give probabilities near 0.5
    assert abs(loss - np.log(2.0)) < 0.05


def test_loss_finite_when_saturated():
    model = SkipGramModel(3, 2, seed=0)
    model.W_pivot[1] = 1000.0
    model.W_context[2] = 1000.0
    loss, _, _ = model.forward_backward(np.array([1]), np.array([2]), np.array([0]))
    assert np.isfinite(loss)


@pytest.mark.parametrize("table", ["W_pivot", "W_context"])
def test_gradient_matches_finite_difference(table):
    model = SkipGramModel(8, 5, seed=3)
    pivots = np.array([1, 2, 1, 4])
    contexts = np.array([2, 3, 5, 1])
    labels = np.array([1, 1, 0, 0])
    _, dW_pivot, dW_context = model.forward_backward(pivots, contexts, labels)
    grad = dW_pivot if table == "W_pivot" else dW_context
    W = getattr(model, table)
    eps = 1e-6
    for i, j in [(1, 0), (2, 3), (5, 4) if table == "W_context" else (4, 4)]:
        W[i, j] += eps
        loss_plus, _, _ = model.forward_backward(pivots, contexts, labels)
        W[i, j] -= 2 * eps
        loss_minus, _, _ = model.forward_backward(pivots, contexts, labels)
        W[i, j] += eps
        fd = (loss_plus - loss_minus) / (2 * eps)
        assert np.isclose(grad[i, j], fd, rtol=1e-4, atol=1e-8), f"grad {grad[i, j]} vs fd {fd}"


def test_row_zero_untouched_by_encoded_data():
    model = SkipGramModel(5, 3, seed=0)
    _, dW_pivot, dW_context = model.forward_backward(
        np.array([1, 2]), np.array([3, 4]), np.array([1, 0])
    )
    assert not dW_pivot[0].any() and not dW_context[0].any()


@pytest.mark.parametrize("optimizer", [SGD(0.5), Adagrad(0.1), Adam(0.05)])
def test_train_batch_decreases_loss(optimizer):
    model = SkipGramModel(10, 8, optimizer=optimizer, seed=42)
    pivots = np.array([1, 1, 2, 2, 3, 3])
    contexts = np.array([2, 7, 1, 8, 4, 9])
    labels = np.array([1, 0, 1, 0, 1, 0])
    loss0, _, _ = model.forward_backward(pivots, contexts, labels)
    for _ in range(100):
        model.train_batch(pivots, contexts, labels)
    loss1, _, _ = model.forward_backward(pivots, contexts, labels)
    assert loss1 < loss0, f"Loss should decrease: {loss0} -> {loss1}"


def test_invalid_sizes():
    with pytest.raises(ConfigurationError):
        SkipGramModel(5, 0)
    with pytest.raises(ConfigurationError):
        SkipGramModel(0, 5)


def test_get_optimizer():
    assert isinstance(get_optimizer("adagrad", 0.1), Adagrad)
    with pytest.raises(ConfigurationError):
        get_optimizer("rmsprop", 0.1)
    with pytest.raises(ConfigurationError):
        get_optimizer("sgd", 0.0)


def test_export_vectors_is_read_only_copy():
    model = SkipGramModel(4, 2, seed=0)
    vectors = model.export_vectors({1: "a", 2: "b", 3: "c"})
    np.testing.assert_array_equal(vectors.vectors, model.W_pivot)
    assert not vectors.vectors.flags.writeable
    model.W_pivot += 1.0
    assert not np.allclose(vectors.vectors, model.W_pivot)


@pytest.mark.parametrize("pivot, context", [(-1, 2), (1, -3), (4, 1), (1, 4)])
def test_out_of_range_indices_rejected(pivot, context):
    model = SkipGramModel(4, 2, seed=0)
    with pytest.raises(IndexError):
        model.score(pivot, context)
    with pytest.raises(IndexError):
        model.forward_backward(np.array([1, pivot]), np.array([2, context]), np.array([1, 0]))
