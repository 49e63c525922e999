"""
Khmer character categories.

Each scalar in the Khmer block gets a rank that is also its sort priority
inside a syllable: a base consonant first, then robat, subscripts, register
shifters, vowels in visual order, and finally signs.
"""
import enum


class Rank(enum.IntEnum):
    OTHER = 0
    BASE = 1
    ROBAT = 2
    COENG = 3
    ZFCOENG = 4
    SHIFT = 5
    Z = 6
    VPRE = 7
    VB = 8
    VA = 9
    VPOST = 10
    MS = 11
    MF = 12


KHMER_BLOCK_START = 0x1780
KHMER_BLOCK_END = 0x17FF

COENG_SIGN = 0x17D2
ZWNJ = 0x200C
ZWJ = 0x200D

_B, _R, _C, _S = Rank.BASE, Rank.ROBAT, Rank.COENG, Rank.SHIFT
_VPRE, _VB, _VA, _VPOST = Rank.VPRE, Rank.VB, Rank.VA, Rank.VPOST
_MS, _MF, _O = Rank.MS, Rank.MF, Rank.OTHER

# U+1780 .. U+17DD, one entry per scalar
RANKS = (
    (_B,) * 35          # 1780-17A2 consonants
    + (_O,) * 2         # 17A3-17A4 deprecated independent vowels
    + (_B,) * 15        # 17A5-17B3 independent vowels
    + (_O,) * 2         # 17B4-17B5 inherent vowels
    + (_VPOST,)         # 17B6
    + (_VA,) * 4        # 17B7-17BA
    + (_VB,) * 3        # 17BB-17BD
    + (_VPRE,) * 8      # 17BE-17C5
    + (_MS,)            # 17C6 nikahit
    + (_MF,) * 2        # 17C7-17C8 reahmuk, yuukaleapintu
    + (_S,) * 2         # 17C9-17CA muusikatoan, triisap
    + (_MS,)            # 17CB bantoc
    + (_R,)             # 17CC robat
    + (_MS,) * 5        # 17CD-17D1
    + (_C,)             # 17D2 coeng
    + (_MS,)            # 17D3
    + (_O,) * 9         # 17D4-17DC punctuation, currency, avakrahasanya
    + (_MS,)            # 17DD atthacan
)

_TABLE_END = KHMER_BLOCK_START + len(RANKS) - 1

# zero width marks that take part in Khmer clusters
_INVISIBLE = {
    ZWJ: Rank.ZFCOENG,
    ZWNJ: Rank.Z,
}


def is_khmer(code):
    return KHMER_BLOCK_START <= code <= KHMER_BLOCK_END


def lookup(code):
    """Table rank of a scalar, without context."""
    if KHMER_BLOCK_START <= code <= _TABLE_END:
        return RANKS[code - KHMER_BLOCK_START]
    return _INVISIBLE.get(code, Rank.OTHER)


def classify(code, previous_code=None):
    """
    Returns the rank of `code` given the scalar right before it.

    A base (or zero width joiner) written after the coeng sign is the
    subscript half of a coeng pair and sorts together with the sign.
    """
    rank = lookup(code)
    if previous_code == COENG_SIGN and rank in (Rank.BASE, Rank.ZFCOENG):
        return Rank.COENG
    return rank
