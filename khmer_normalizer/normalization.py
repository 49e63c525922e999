import re
from typing import NamedTuple

from .categories import COENG_SIGN, Rank, classify
from .rule_engine import RepairRuleEngine


class ScalarItem(NamedTuple):
    code: int
    rank: Rank
    text: str


class DecodeError(ValueError):
    """Input bytes are not valid UTF-8."""

    def __init__(self, reason, start=None, end=None):
        super().__init__(reason)
        self.reason = reason
        self.start = start
        self.end = end


# Khmer block plus the zero width marks used inside Khmer words
_KHMER_RUN = "\u1780-\u17ff\u200c\u200d"
PATTERN_KHMER = re.compile(f"([{_KHMER_RUN}]+)|([^{_KHMER_RUN}]+)")


def _decode(data):
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(
            f"Invalid UTF-8 at byte {e.start}: {e.reason}", e.start, e.end
        ) from e


def _is_stray_coeng(items, index):
    """True if items[index] is a coeng sign not followed by its subscript."""
    if items[index].code != COENG_SIGN:
        return False
    if index + 1 == len(items):
        return True
    following = items[index + 1]
    return following.rank != Rank.COENG or following.code == COENG_SIGN


class KhmerNormalizer:
    def __init__(self, rule_engine=None):
        self.rule_engine = rule_engine or RepairRuleEngine()

    def segment(self, text):
        """Split text into scalars, each ranked using the scalar before it."""
        items = []
        previous_code = None
        for char in text:
            code = ord(char)
            items.append(ScalarItem(code, classify(code, previous_code), char))
            previous_code = code
        return tuple(items)

    def reorder(self, items):
        """
        Sort every syllable by rank and repair it.

        A syllable starts at a base and runs while the following ranks are
        above BASE. A coeng sign with no subscript after it closes the
        syllable and stays last, so sorting never carries it onto a later
        base. Anything else is copied through where it stands.
        """
        res = []
        i = 0
        n = len(items)
        while i < n:
            if items[i].rank != Rank.BASE:
                res.append(items[i].text)
                i += 1
                continue

            # Scan for end of syllable
            j = i + 1
            stray = ""
            while j < n and items[j].rank > Rank.BASE:
                if _is_stray_coeng(items, j):
                    stray = items[j].text
                    break
                j += 1

            # sorted() is stable, so equal ranks keep their order
            window = sorted(items[i:j], key=lambda item: item.rank)
            replaces = "".join(item.text for item in window)
            res.append(self.rule_engine.apply_rules(replaces) + stray)
            i = j + 1 if stray else j

        return "".join(res)

    def khnormalize(self, text):
        """Normalize a run made only of Khmer characters."""
        if isinstance(text, bytes):
            return self.khnormalize(_decode(text)).encode("utf-8")
        return self.reorder(self.segment(text))

    def normalize(self, text):
        """
        Normalizes Khmer text: every Khmer run is reordered into canonical
        order and repaired, everything else is returned untouched.

        Accepts str or UTF-8 bytes and returns the same type.
        Raises DecodeError for bytes that are not valid UTF-8.
        """
        if isinstance(text, bytes):
            return self.normalize(_decode(text)).encode("utf-8")
        if not isinstance(text, str):
            raise TypeError(f"Expected str or bytes, got {type(text).__name__}")

        result = []
        for m in PATTERN_KHMER.finditer(text):
            khmer, other = m.groups()
            if khmer:
                result.append(self.khnormalize(khmer))
            else:
                result.append(other)
        return "".join(result)

    def __call__(self, text):
        return self.normalize(text)


_default_normalizer = KhmerNormalizer()


def normalize(text):
    return _default_normalizer.normalize(text)


def khnormalize(text):
    return _default_normalizer.khnormalize(text)
