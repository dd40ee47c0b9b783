from typing import List

import numpy as np

from skipgram.errors import ConfigurationError

# Dense optimizers over the two embedding tables. Each keeps per-parameter state in the
# order params are passed to step(), so callers must pass them in a fixed order.


class SGD:
    """Plain gradient descent: W -= lr * grad."""

    def __init__(self, lr: float = 0.025):
        self.lr = lr

    def step(self, params: List[np.ndarray], grads: List[np.ndarray]) -> None:
        for param, grad in zip(params, grads):
            param -= self.lr * grad


class Adagrad:
    """Adagrad: per-parameter step lr / sqrt(sum of squared gradients).

    Attributes:
        lr (float): Base learning rate.
        eps (float): Added to the denominator to avoid division by zero.
    """

    def __init__(self, lr: float = 0.025, eps: float = 1e-10):
        self.lr = lr
        self.eps = eps
        self._accum: List[np.ndarray] = []

    def step(self, params: List[np.ndarray], grads: List[np.ndarray]) -> None:
        if not self._accum:
            self._accum = [np.zeros_like(p) for p in params]
        for param, grad, G in zip(params, grads, self._accum):
            G += grad**2
            param -= self.lr * grad / (np.sqrt(G) + self.eps)


class Adam:
    """Adam (Kingma & Ba) with bias-corrected first and second moments.

    Attributes:
        lr (float): Step size.
        beta1 (float): Decay for the first moment.
        beta2 (float): Decay for the second moment.
        eps (float): Denominator epsilon.
        t (int): Number of steps taken.
    """

    def __init__(
        self, lr: float = 0.001, beta1: float = 0.9, beta2: float = 0.999, eps: float = 1e-8
    ):
        self.lr = lr
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps
        self.t = 0
        self._m: List[np.ndarray] = []
        self._v: List[np.ndarray] = []

    def step(self, params: List[np.ndarray], grads: List[np.ndarray]) -> None:
        if not self._m:
            self._m = [np.zeros_like(p) for p in params]
            self._v = [np.zeros_like(p) for p in params]
        self.t += 1
        bc1 = 1.0 - self.beta1**self.t
        bc2 = 1.0 - self.beta2**self.t
        for param, grad, m, v in zip(params, grads, self._m, self._v):
            m *= self.beta1
            m += (1.0 - self.beta1) * grad
            v *= self.beta2
            v += (1.0 - self.beta2) * grad**2
            param -= self.lr * (m / bc1) / (np.sqrt(v / bc2) + self.eps)


def get_optimizer(name: str, lr: float):
    """Build an optimizer by name ("sgd", "adagrad" or "adam").

    Raises:
        ConfigurationError: If name is unknown or lr is not positive.
    """
    if lr <= 0:
        raise ConfigurationError("learning_rate", lr, "must be > 0")
    if name == "sgd":
        return SGD(lr)
    if name == "adagrad":
        return Adagrad(lr)
    if name == "adam":
        return Adam(lr)
    raise ConfigurationError("optimizer", name, "must be one of sgd, adagrad, adam")
