"""Permuted congruential generator (PCG32).

A small, fast and fully reproducible pseudo-random generator: the state is
a 64-bit linear congruential sequence and each output is a permutation of
the previous state (xorshift followed by a random rotation).

Every stochastic choice in the renderer (sub-pixel jitter, BRDF sampling,
Russian roulette) draws from a PCG instance, so a render is determined
entirely by the seed pair.

Example:
    >>> pcg = PCG(init_state=42, init_seq=54)
    >>> pcg.random()
    2707161783
"""

import taichi as ti

_MASK64 = 0xFFFFFFFFFFFFFFFF
_MASK32 = 0xFFFFFFFF
_MULTIPLIER = 6364136223846793005


class PCG:
    """PCG32 random number generator.

    Attributes:
        state: The 64-bit internal state.
        inc: The 64-bit odd increment selecting the sequence.
    """

    __slots__ = ("state", "inc")

    def __init__(self, init_state: int = 42, init_seq: int = 54) -> None:
        """Seed the generator.

        Two warm-up draws are performed, one before and one after adding
        ``init_state`` into the state, so that nearby seeds diverge quickly.

        Args:
            init_state: Initial state seed.
            init_seq: Sequence identifier; different values give independent
                streams for the same ``init_state``.
        """
        self.state = 0
        self.inc = ((init_seq << 1) | 1) & _MASK64
        self.random()
        self.state = (self.state + init_state) & _MASK64
        self.random()

    def random(self) -> int:
        """Advance the generator and return a 32-bit unsigned integer."""
        old_state = self.state
        self.state = (old_state * _MULTIPLIER + self.inc) & _MASK64

        xorshifted = (((old_state >> 18) ^ old_state) >> 27) & _MASK32
        rot = old_state >> 59
        return ((xorshifted >> rot) | (xorshifted << ((-rot) & 31))) & _MASK32

    def random_float(self) -> float:
        """Return a float uniformly distributed in [0, 1)."""
        return self.random() / 4294967296.0

    def clone(self) -> "PCG":
        """Return an independent generator with the same state.

        Useful to hand each worker of a parallel render its own generator.
        """
        twin = PCG.__new__(PCG)
        twin.state = self.state
        twin.inc = self.inc
        return twin

    def __repr__(self) -> str:
        return f"PCG(state={self.state}, inc={self.inc})"


# =============================================================================
# Kernel-side generator
# =============================================================================

# Inside kernels a generator is a pair of u64 values (state, inc) held by
# the caller, one pair per pixel. The functions below advance the pair with
# the same arithmetic as PCG, so a pair seeded with (init_state, init_seq)
# yields the sequence of PCG(init_state, init_seq).


@ti.func
def _multiplier() -> ti.u64:
    # 6364136223846793005 does not fit a 32-bit literal
    return (ti.cast(1481765933, ti.u64) << ti.u64(32)) | ti.cast(1284865837, ti.u64)


@ti.func
def pcg_step(state: ti.u64, inc: ti.u64):
    """Advance a generator and return (new_state, 32-bit output)."""
    new_state = state * _multiplier() + inc
    xorshifted = ti.cast(ti.bit_shr(ti.bit_shr(state, ti.u64(18)) ^ state, ti.u64(27)), ti.u32)
    rot = ti.cast(ti.bit_shr(state, ti.u64(59)), ti.u32)
    value = ti.bit_shr(xorshifted, rot) | (xorshifted << ((ti.u32(32) - rot) & ti.u32(31)))
    return new_state, value


@ti.func
def pcg_seed(init_state: ti.u64, init_seq: ti.u64):
    """Return the (state, inc) pair of a freshly seeded generator."""
    inc = (init_seq << ti.u64(1)) | ti.u64(1)
    state, _ = pcg_step(ti.u64(0), inc)
    state += init_state
    state, _ = pcg_step(state, inc)
    return state, inc


@ti.func
def pcg_float(value: ti.u32) -> ti.f32:
    """Map a 32-bit output to [0, 1).

    Only the top 24 bits are kept so that the f32 result never rounds up
    to 1.
    """
    return ti.cast(ti.bit_shr(value, ti.u32(8)), ti.f32) * (1.0 / 16777216.0)


@ti.kernel
def fill_random_sequence(
    out: ti.types.ndarray(dtype=ti.u32, ndim=1),
    init_state: ti.u64,
    init_seq: ti.u64,
):
    """Write the first ``out.shape[0]`` outputs of a seeded generator."""
    ti.loop_config(serialize=True)
    for _ in range(1):
        state, inc = pcg_seed(init_state, init_seq)
        for i in range(out.shape[0]):
            new_state, value = pcg_step(state, inc)
            state = new_state
            out[i] = value
