"""
Keyword detection: pick a capability name from free text.

Rules are evaluated top-to-bottom and the first match wins, so the order of
the rule tuple is the tie-break when several rules could match.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DetectionRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...] = Field(..., min_length=1)
    capability: str = Field(..., min_length=1)

    @field_validator("keywords")
    @classmethod
    def _lowercase(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        # Input is lowercased before matching, keywords must be too
        keywords = tuple(k.lower() for k in v if k.strip())
        if not keywords:
            raise ValueError("at least one non-blank keyword is required")
        return keywords

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


DEFAULT_RULES: tuple[DetectionRule, ...] = (
    DetectionRule(keywords=("search", "find"), capability="web_search"),
    DetectionRule(keywords=("calculate", "math"), capability="calculator"),
    DetectionRule(keywords=("code", "program"), capability="code_executor"),
    DetectionRule(keywords=("email", "send"), capability="email_client"),
    DetectionRule(keywords=("analyze", "data"), capability="data_analyzer"),
)


def detect(text: str | None, rules: Iterable[DetectionRule] = DEFAULT_RULES) -> str | None:
    if not isinstance(text, str) or not text:
        return None
    lowered = text.lower()
    for rule in rules:
        if rule.matches(lowered):
            return rule.capability
    return None
