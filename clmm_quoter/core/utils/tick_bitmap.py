"""Sparse bitmap of initialized ticks, one 256-bit word per 256 spaced ticks.

Lookups are bounded to a single word. The quote loop re-invokes the search word
by word, so a swap that travels far takes one extra step per empty word it
passes through, exactly as on-chain execution does.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from clmm_quoter.core.constants import MAX_UINT256


def position(compressed: int) -> tuple[int, int]:
    """Word index and bit index of a compressed tick."""
    return compressed >> 8, compressed & 0xFF


def compress(tick: int, tick_spacing: int) -> int:
    # floor division rounds toward negative infinity, as required for negative ticks
    return tick // tick_spacing


def most_significant_bit(x: int) -> int:
    return x.bit_length() - 1


def least_significant_bit(x: int) -> int:
    return (x & -x).bit_length() - 1


class TickBitmap:
    def __init__(self, words: Mapping[int, int] | None = None) -> None:
        self._words: dict[int, int] = {}
        for word_pos, word in (words or {}).items():
            if word < 0 or word > MAX_UINT256:
                raise ValueError(f"bitmap word {word_pos} does not fit in uint256")
            if word:
                self._words[int(word_pos)] = int(word)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TickBitmap):
            return NotImplemented
        return self._words == other._words

    def __repr__(self) -> str:
        return f"TickBitmap(words={len(self._words)})"

    def word(self, word_pos: int) -> int:
        return self._words.get(word_pos, 0)

    def words(self) -> dict[int, int]:
        return dict(self._words)

    def copy(self) -> TickBitmap:
        return TickBitmap(self._words)

    def is_initialized(self, tick: int, tick_spacing: int) -> bool:
        if tick % tick_spacing:
            return False
        word_pos, bit_pos = position(compress(tick, tick_spacing))
        return bool(self.word(word_pos) & (1 << bit_pos))

    def flip_tick(self, tick: int, tick_spacing: int) -> None:
        if tick % tick_spacing:
            raise ValueError(f"tick {tick} is not a multiple of spacing {tick_spacing}")
        word_pos, bit_pos = position(tick // tick_spacing)
        flipped = self.word(word_pos) ^ (1 << bit_pos)
        if flipped:
            self._words[word_pos] = flipped
        else:
            self._words.pop(word_pos, None)

    def initialized_ticks(self, tick_spacing: int) -> Iterator[int]:
        for word_pos in sorted(self._words):
            word = self._words[word_pos]
            while word:
                bit_pos = least_significant_bit(word)
                yield ((word_pos << 8) + bit_pos) * tick_spacing
                word &= word - 1

    def next_initialized_tick_within_one_word(
        self, tick: int, tick_spacing: int, lte: bool
    ) -> tuple[int, bool]:
        """Next initialized tick in the word of ``tick``, searching left if ``lte``.

        When the word holds no candidate, the word edge in the search direction
        is returned with ``initialized=False``. The result may lie outside the
        global tick range; callers clamp it.
        """
        compressed = compress(tick, tick_spacing)

        if lte:
            word_pos, bit_pos = position(compressed)
            # all the 1s at or to the right of the current bit
            mask = (1 << bit_pos) - 1 + (1 << bit_pos)
            masked = self.word(word_pos) & mask
            initialized = masked != 0
            if initialized:
                next_compressed = compressed - (bit_pos - most_significant_bit(masked))
            else:
                next_compressed = compressed - bit_pos
            return next_compressed * tick_spacing, initialized

        # start from the word of the next tick, since the current tick state doesn't matter
        word_pos, bit_pos = position(compressed + 1)
        # all the 1s at or to the left of the bit position
        mask = ~((1 << bit_pos) - 1) & MAX_UINT256
        masked = self.word(word_pos) & mask
        initialized = masked != 0
        if initialized:
            next_compressed = compressed + 1 + (least_significant_bit(masked) - bit_pos)
        else:
            next_compressed = compressed + 1 + (0xFF - bit_pos)
        return next_compressed * tick_spacing, initialized
