import logging
import re
from typing import Iterable, List, Optional, Sequence

from .types import NormalizationRule

logger = logging.getLogger(__name__)

CHARACTER_RULES: List[NormalizationRule] = [
    NormalizationRule(re.compile("\ufb00"), "ff"),
    NormalizationRule(re.compile("\ufb01"), "fi"),
    NormalizationRule(re.compile("\ufb02"), "fl"),
    NormalizationRule(re.compile("\ufb03"), "ffi"),
    NormalizationRule(re.compile("\ufb04"), "ffl"),
    NormalizationRule(re.compile("[\u2018\u2019\u201a\u201b]"), "'"),
    NormalizationRule(re.compile("[\u201c\u201d\u201e\u201f]"), '"'),
    NormalizationRule(re.compile("[\u2022\u2023\u25e6\u2043\u2219\u25cf\u25cb\u2981\u2619\u2765]"), "-"),
    NormalizationRule(re.compile("[\u2013\u2014]"), "-"),
    NormalizationRule(re.compile("\u00ad"), ""),
]

# Any run of horizontal whitespace (tabs, NBSP, em spaces, ideographic
# spaces, ASCII spaces) becomes one space. Line breaks are kept.
WHITESPACE_RULE = NormalizationRule(re.compile(r"[^\S\r\n]+"), " ")

# Same, but runs of plain ASCII spaces survive so column alignment reaches
# the fenced-block detector.
COLUMN_SAFE_WHITESPACE_RULE = NormalizationRule(re.compile(r"[^\S\r\n ]+"), " ")

BUILTIN_RULES: List[NormalizationRule] = [*CHARACTER_RULES, WHITESPACE_RULE]

_PASCAL_PAIR = re.compile(r"([A-Z][a-z]+)([A-Z][a-z]+)")
_LOWER_THEN_WORD = re.compile(r"([a-z])([A-Z][a-z]+)")

# Three passes catch chained transitions such as "AbcDefGhi"
PASCAL_CASE_RULES: List[NormalizationRule] = [
    NormalizationRule(_PASCAL_PAIR, r"\1 \2"),
    NormalizationRule(_LOWER_THEN_WORD, r"\1 \2"),
    NormalizationRule(_PASCAL_PAIR, r"\1 \2"),
]

_CRLF = re.compile(r"\r\n?")
_BLANK_RUNS = re.compile(r"\n{2,}")


def apply_rule(text: str, rule: NormalizationRule) -> str:
    """
    Apply one rule to the whole text.

    A rule that cannot be applied (bad pattern, bad replacement template,
    wrong types) leaves the text unchanged and is logged.
    """
    try:
        pattern = rule.compile()
        return pattern.sub(rule.replacement, text)
    except (re.error, TypeError, IndexError) as e:
        logger.warning(f"⚠️  Skipping malformed normalization rule {rule!r}: {e}")
        return text


def apply_rules(text: str, rules: Iterable[NormalizationRule]) -> str:
    for rule in rules:
        text = apply_rule(text, rule)
    return text


class RuleEngine:
    """
    Ordered find/replace normalization over extracted text.

    Built-in rules always run first, followed by the rules given at
    construction, then the rules given per call. Callers can only append,
    never reorder the built-ins.
    """

    def __init__(
        self,
        custom_rules: Optional[Sequence[NormalizationRule]] = None,
        split_pascal_case: bool = False,
        keep_column_spacing: bool = False,
    ) -> None:
        self.custom_rules: List[NormalizationRule] = list(custom_rules or [])
        self.split_pascal_case = split_pascal_case
        self.keep_column_spacing = keep_column_spacing

    @property
    def builtin_rules(self) -> List[NormalizationRule]:
        if self.keep_column_spacing:
            return [*CHARACTER_RULES, COLUMN_SAFE_WHITESPACE_RULE]
        return list(BUILTIN_RULES)

    def rules_for(self, extra_rules: Optional[Sequence[NormalizationRule]] = None) -> List[NormalizationRule]:
        rules = [*self.builtin_rules, *self.custom_rules, *(extra_rules or [])]
        if self.split_pascal_case:
            rules.extend(PASCAL_CASE_RULES)
        return rules

    def normalize(self, text: Optional[str], extra_rules: Optional[Sequence[NormalizationRule]] = None) -> str:
        if not text:
            return ""
        rules = self.rules_for(extra_rules)
        logger.debug(f"Normalizing {len(text)} characters with {len(rules)} rules")
        return apply_rules(text, rules).strip()


def prepare_text(text: str) -> str:
    """Unify line endings and squeeze blank-line runs before reconstruction."""
    text = _CRLF.sub("\n", text)
    return _BLANK_RUNS.sub("\n\n", text).strip()
