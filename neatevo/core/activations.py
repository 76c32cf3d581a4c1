"""
Activation functions available to hidden nodes.

Each function is stateless and works on scalars as well as numpy arrays.
Families group the functions by the shape of their response:
- Squashing: S-shaped curves with bounded outputs
- Periodic: Repeating waves, useful for pattern-producing networks
- Sawtooth: Piecewise linear ridges repeating on every integer
- Linear: Sign flips without any nonlinearity
"""

import numpy as np
from typing import Callable, Dict, List

# np.exp overflows well before this; below it the curves are flat anyway.
SIGMOID_INPUT_THRESHOLD = -100.0


def sigmoid(x):
    """Sigmoid - smooth S-curve from 0.0 to 1.0."""
    x = np.asarray(x, dtype=float)
    safe = np.maximum(x, SIGMOID_INPUT_THRESHOLD)
    out = np.where(x < SIGMOID_INPUT_THRESHOLD, 0.0, 1.0 / (1.0 + np.exp(-safe)))
    return _unwrap(out)


def bipolar_sigmoid(x):
    """Bipolar sigmoid - smooth S-curve from -1.0 to 1.0."""
    x = np.asarray(x, dtype=float)
    safe = np.maximum(x, SIGMOID_INPUT_THRESHOLD)
    e = np.exp(-safe)
    out = np.where(x < SIGMOID_INPUT_THRESHOLD, -1.0, (1.0 - e) / (1.0 + e))
    return _unwrap(out)


def gaussian(x):
    """Gaussian bell curve, 1.0 at zero falling to 0.0 either side."""
    x = np.asarray(x, dtype=float)
    return _unwrap(np.exp(-(x * x)))


def inverse(x):
    """Flips the sign of the input."""
    return _unwrap(-np.asarray(x, dtype=float))


def sine(x):
    return _unwrap(np.sin(np.asarray(x, dtype=float)))


def cosine(x):
    return _unwrap(np.cos(np.asarray(x, dtype=float)))


def tangent(x):
    return _unwrap(np.tan(np.asarray(x, dtype=float)))


def hyperbolic_tangent(x):
    return _unwrap(np.tanh(np.asarray(x, dtype=float)))


def ramp(x):
    """Slanting lines from 1.0 down to -1.0 across each integer interval."""
    x = np.asarray(x, dtype=float)
    return _unwrap(1.0 - 2.0 * (x - np.floor(x)))


def step(x):
    """Square ridge: 1.0 on even integer intervals, -1.0 on odd ones."""
    x = np.asarray(x, dtype=float)
    return _unwrap(np.where(np.mod(np.floor(x), 2.0) == 0.0, 1.0, -1.0))


def spike(x):
    """Zigzag between -1.0 and 1.0, changing direction on every integer."""
    x = np.asarray(x, dtype=float)
    floor = np.floor(x)
    frac = x - floor
    even = np.mod(np.abs(floor), 2.0) == 0.0
    return _unwrap(np.where(even, 1.0 - 2.0 * frac, -1.0 + 2.0 * frac))


def _unwrap(value):
    """Return a plain float for scalar results, the array otherwise."""
    if np.ndim(value) == 0:
        return float(value)
    return value


class Activation:
    """Wrapper for an activation function with its metadata."""

    def __init__(
        self,
        name: str,
        func: Callable,
        family: str,
        properties: Dict
    ):
        self.name = name
        self.func = func
        self.family = family
        self.properties = properties

    def __call__(self, x):
        return self.func(x)

    def __repr__(self):
        return f"Activation({self.name}, family={self.family})"


# Registry of all activation functions
ACTIVATIONS: Dict[str, Activation] = {
    'sigmoid': Activation(
        name='sigmoid',
        func=sigmoid,
        family='squashing',
        properties={
            'bounded': True,
            'periodic': False,
            'range': (0, 1),
            'description': 'Sigmoid - smooth, bounded between 0 and 1'
        }
    ),
    'bipolar_sigmoid': Activation(
        name='bipolar_sigmoid',
        func=bipolar_sigmoid,
        family='squashing',
        properties={
            'bounded': True,
            'periodic': False,
            'range': (-1, 1),
            'description': 'Bipolar sigmoid - smooth, zero-centered'
        }
    ),
    'hyperbolic_tangent': Activation(
        name='hyperbolic_tangent',
        func=hyperbolic_tangent,
        family='squashing',
        properties={
            'bounded': True,
            'periodic': False,
            'range': (-1, 1),
            'description': 'Hyperbolic tangent - smooth, zero-centered'
        }
    ),
    'gaussian': Activation(
        name='gaussian',
        func=gaussian,
        family='squashing',
        properties={
            'bounded': True,
            'periodic': False,
            'range': (0, 1),
            'description': 'Gaussian - symmetric bell curve peaking at zero'
        }
    ),
    'sine': Activation(
        name='sine',
        func=sine,
        family='periodic',
        properties={
            'bounded': True,
            'periodic': True,
            'range': (-1, 1),
            'description': 'Sine wave'
        }
    ),
    'cosine': Activation(
        name='cosine',
        func=cosine,
        family='periodic',
        properties={
            'bounded': True,
            'periodic': True,
            'range': (-1, 1),
            'description': 'Cosine wave'
        }
    ),
    'tangent': Activation(
        name='tangent',
        func=tangent,
        family='periodic',
        properties={
            'bounded': False,
            'periodic': True,
            'range': (-np.inf, np.inf),
            'description': 'Tangent - periodic with asymptotes'
        }
    ),
    'ramp': Activation(
        name='ramp',
        func=ramp,
        family='sawtooth',
        properties={
            'bounded': True,
            'periodic': True,
            'range': (-1, 1),
            'description': 'Ramp - descending sawtooth on every integer'
        }
    ),
    'step': Activation(
        name='step',
        func=step,
        family='sawtooth',
        properties={
            'bounded': True,
            'periodic': True,
            'range': (-1, 1),
            'description': 'Step - alternating square ridges'
        }
    ),
    'spike': Activation(
        name='spike',
        func=spike,
        family='sawtooth',
        properties={
            'bounded': True,
            'periodic': True,
            'range': (-1, 1),
            'description': 'Spike - triangle wave zigzagging between -1 and 1'
        }
    ),
    'inverse': Activation(
        name='inverse',
        func=inverse,
        family='linear',
        properties={
            'bounded': False,
            'periodic': False,
            'range': (-np.inf, np.inf),
            'description': 'Inverse - flips the input sign'
        }
    ),
}


def _canonical(name: str) -> str:
    # 'bipolar-sigmoid' and 'bipolar_sigmoid' name the same function
    return name.replace('-', '_')


def get_activation(name: str) -> Activation:
    """Get an activation function by name."""
    key = _canonical(name)
    if key not in ACTIVATIONS:
        available = ', '.join(ACTIVATIONS.keys())
        raise ValueError(f"Unknown activation '{name}'. Available: {available}")
    return ACTIVATIONS[key]


def is_activation(name: str) -> bool:
    return _canonical(name) in ACTIVATIONS


def activate(name: str, x):
    """Run the named activation function on x."""
    return get_activation(name)(x)


def list_activations() -> Dict[str, Dict]:
    """List all available activations with their properties."""
    return {
        name: {
            'family': act.family,
            **act.properties
        }
        for name, act in ACTIVATIONS.items()
    }


ACTIVATION_FAMILIES = {
    'squashing': ['sigmoid', 'bipolar_sigmoid', 'hyperbolic_tangent', 'gaussian'],
    'periodic': ['sine', 'cosine', 'tangent'],
    'sawtooth': ['ramp', 'step', 'spike'],
    'linear': ['inverse'],
}


def get_family_activations(family: str) -> List[str]:
    """Get all activations in a family."""
    return ACTIVATION_FAMILIES.get(family, [])
