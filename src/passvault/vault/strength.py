"""Credential strength scoring.

Additive heuristic: length tiers, character diversity, two bonuses and a
penalty for runs of three identical characters. Deterministic and pure.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[^A-Za-z0-9]")
_SYMBOL_SET = re.compile(r"[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]")
_REPEAT = re.compile(r"(.)\1{2,}")


class StrengthCategory(str, Enum):
    """Strength buckets, weakest first."""
    VERY_WEAK = "VeryWeak"
    WEAK = "Weak"
    FAIR = "Fair"
    GOOD = "Good"
    STRONG = "Strong"

    @property
    def label(self) -> str:
        """Human-readable name for display."""
        return "Very Weak" if self is StrengthCategory.VERY_WEAK else self.value

    @classmethod
    def from_score(cls, score: int) -> "StrengthCategory":
        if score <= 2:
            return cls.VERY_WEAK
        if score <= 4:
            return cls.WEAK
        if score <= 6:
            return cls.FAIR
        if score <= 7:
            return cls.GOOD
        return cls.STRONG


@dataclass
class StrengthReport:
    score: int
    feedback: List[str] = field(default_factory=list)
    category: StrengthCategory = StrengthCategory.VERY_WEAK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "feedback": list(self.feedback),
            "category": self.category.value,
            "label": self.category.label,
        }


class StrengthScorer:
    """Scores credentials; holds no state."""

    @staticmethod
    def score(credential: str) -> StrengthReport:
        feedback: List[str] = []
        score = 0
        length = len(credential)

        if length >= 12:
            score += 2
        elif length >= 8:
            score += 1
        else:
            feedback.append("use at least 8 characters")

        if _LOWER.search(credential):
            score += 1
        else:
            feedback.append("add lowercase letters")

        if _UPPER.search(credential):
            score += 1
        else:
            feedback.append("add uppercase letters")

        if _DIGIT.search(credential):
            score += 1
        else:
            feedback.append("add numbers")

        if _SPECIAL.search(credential):
            score += 1
        else:
            feedback.append("add special characters")

        # Bonuses
        if length >= 16:
            score += 1
        if _SYMBOL_SET.search(credential):
            score += 1

        # Penalty
        if _REPEAT.search(credential):
            score -= 1
            feedback.append("avoid repeating characters")

        return StrengthReport(
            score=score,
            feedback=feedback,
            category=StrengthCategory.from_score(score),
        )
