"""
Test-signal registry for the Golden Ratio Fractal Codec.

Every self-contained signal generator lives here and joins the registry
through the @source decorator.

Canonical generator signature:
    (rng: np.random.Generator, size: int) -> np.ndarray[float64]

Usage:
    from tools.sources import get_sources, get_source, seed_adapter

    for s in get_sources(repetitive=True):
        data = s.gen_fn(rng, 500)

    fn = seed_adapter(get_source("fractal").gen_fn)
    data = fn(42, 500)
"""

import sys
import os
import numpy as np
from dataclasses import dataclass
from typing import Callable, List

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..'))
from golden_fractal_codec import PHI_INV


# ================================================================
# Registry infrastructure
# ================================================================


@dataclass
class Source:
    name: str
    gen_fn: Callable  # (rng, size) -> float64[]
    domain: str
    description: str = ""
    repetitive: bool = False  # built from exact or near-exact repeats


_REGISTRY: List[Source] = []


def source(name, domain, description="", repetitive=False):
    """Decorator that registers a generator function."""

    def decorator(fn):
        _REGISTRY.append(
            Source(
                name=name,
                gen_fn=fn,
                domain=domain,
                description=description,
                repetitive=repetitive,
            )
        )
        return fn

    return decorator


def get_sources(domain=None, repetitive=None):
    """Filter registry.  None = no filter on that field."""
    result = _REGISTRY
    if domain is not None:
        result = [s for s in result if s.domain == domain]
    if repetitive is not None:
        result = [s for s in result if s.repetitive == repetitive]
    return result


def get_source(name) -> Source:
    for s in _REGISTRY:
        if s.name == name:
            return s
    raise KeyError(f"Unknown source '{name}'. Available: {[s.name for s in _REGISTRY]}")


def seed_adapter(gen_fn):
    """Wrap (rng, size) -> (seed, size)."""

    def adapted(seed, size):
        rng = np.random.default_rng(seed)
        return gen_fn(rng, size)

    return adapted


# ================================================================
# Domain colours (shared by runner figures and CLI)
# ================================================================

DOMAIN_COLORS = {
    "fractal": "#e74c3c",
    "waveform": "#2ecc71",
    "number_theory": "#3498db",
    "noise": "#95a5a6",
    "degenerate": "#9b59b6",
}


# ================================================================
# Generators
# ================================================================

FIBONACCI_PATTERN = np.array([1, 1, 2, 3, 5, 8, 13, 21], dtype=float)


@source(
    "fractal",
    domain="fractal",
    description="Three golden-ratio-weighted sine/cosine layers modulated by the "
    "Fibonacci pattern, plus 0.1 uniform noise",
)
def gen_fractal(rng, size):
    i = np.arange(size)
    p = FIBONACCI_PATTERN
    scale1 = np.sin(i * 0.1) * p[i % 8]
    scale2 = np.cos(i * 0.05) * p[(i * 2) % 8] * PHI_INV
    scale3 = np.sin(i * 0.02) * p[(i * 3) % 8] * PHI_INV ** 2
    return scale1 + scale2 + scale3 + rng.random(size) * 0.1


@source(
    "fibonacci_repeat",
    domain="number_theory",
    description="The 8-sample Fibonacci pattern 1,1,2,3,5,8,13,21 tiled end to end",
    repetitive=True,
)
def gen_fibonacci_repeat(rng, size):
    return np.resize(FIBONACCI_PATTERN, size).astype(float)


@source(
    "sine",
    domain="waveform",
    description="Sine wave with a 50-sample period, offset to stay positive",
    repetitive=True,
)
def gen_sine(rng, size):
    return 2.0 + np.sin(2 * np.pi * np.arange(size) / 50.0)


@source(
    "square_wave",
    domain="waveform",
    description="Square wave alternating 0 and 1 every 13 samples",
    repetitive=True,
)
def gen_square_wave(rng, size):
    return ((np.arange(size) // 13) % 2).astype(float)


@source(
    "white_noise",
    domain="noise",
    description="Uniform noise in [0, 1)",
)
def gen_white_noise(rng, size):
    return rng.random(size)


@source(
    "random_walk",
    domain="noise",
    description="Cumulative sum of standard normal steps",
)
def gen_random_walk(rng, size):
    return np.cumsum(rng.normal(0.0, 1.0, size))


@source(
    "constant",
    domain="degenerate",
    description="Every sample equal; all windows have zero variance",
)
def gen_constant(rng, size):
    return np.full(size, 1.0)
