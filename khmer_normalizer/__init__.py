from .categories import Rank, classify, is_khmer
from .normalization import DecodeError, KhmerNormalizer, ScalarItem, khnormalize, normalize
from .rule_engine import RepairRuleEngine, RuleError, load_rules

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "KhmerNormalizer",
    "Rank",
    "RepairRuleEngine",
    "RuleError",
    "ScalarItem",
    "classify",
    "is_khmer",
    "khnormalize",
    "load_rules",
    "normalize",
    "__version__",
]
