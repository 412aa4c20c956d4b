# Seedable 128-bit xorshift generator.
# Replays only work if every host draws exactly the same numbers, so
# both the generator and the range sampling are fixed here bit for bit.

import random

U32_MASK = 0xFFFFFFFF
U8_MAX = 0xFF

# Default state of an unseeded generator
UNSEEDED_STATE = (0x193a6754, 0xa8a7d469, 0x97830e05, 0x113ba7bb)


class XorShiftRng:
    """Marsaglia's xorshift128 over four u32 words."""

    def __init__(self, x: int, y: int, z: int, w: int):
        self.x = x & U32_MASK
        self.y = y & U32_MASK
        self.z = z & U32_MASK
        self.w = w & U32_MASK

    @classmethod
    def unseeded(cls) -> "XorShiftRng":
        return cls(*UNSEEDED_STATE)

    @classmethod
    def from_seed(cls, seed) -> "XorShiftRng":
        """
        Build a generator from a 4-word seed.

        Raises ValueError if the seed is not four u32 values or is all zeros
        (an all-zero state would only ever produce zeros).
        """
        seed = list(seed)
        if len(seed) != 4:
            raise ValueError(f"Seed must have 4 words, got {len(seed)}")
        for word in seed:
            if not isinstance(word, int) or isinstance(word, bool) or not (0 <= word <= U32_MASK):
                raise ValueError(f"Seed word out of u32 range: {word!r}")
        if not any(seed):
            raise ValueError("Seed must not be all zeros")
        return cls(*seed)

    def next_u32(self) -> int:
        x = self.x
        t = (x ^ (x << 11)) & U32_MASK
        self.x = self.y
        self.y = self.z
        self.z = self.w
        w = self.w
        self.w = (w ^ (w >> 19) ^ (t ^ (t >> 8))) & U32_MASK
        return self.w

    def next_u8(self) -> int:
        # Truncation of a full u32 draw, not a separate byte stream
        return self.next_u32() & U8_MAX

    def gen_range_u8(self, low: int, high: int) -> int:
        """
        Uniform draw in [low, high) for 8-bit operands.

        Uses rejection sampling over the largest multiple of the range that
        fits in a byte, so the number of draws consumed depends on the
        operand width. Callers must keep their counters within a byte.
        """
        if not (0 <= low < high <= U8_MAX):
            raise ValueError(f"Invalid u8 range [{low}, {high})")
        span = (high - low) & U8_MAX
        zone = U8_MAX - U8_MAX % span
        while True:
            v = self.next_u8()
            if v < zone:
                return low + v % span


def random_seed() -> list[int]:
    """Draw a fresh seed from the OS entropy source."""
    rng = random.SystemRandom()
    while True:
        seed = [rng.getrandbits(32) for _ in range(4)]
        if any(seed):
            return seed
