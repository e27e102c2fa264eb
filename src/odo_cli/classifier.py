"""Map a directory inventory to candidate (language, project type) pairs.

Detection looks at entry names only, never at file contents. The rule
table is an ordered list; when several rules match, candidates are sorted
by specificity (highest first) and then by their position in ``RULES``.
That ordering decides which language is pre-selected when the user has to
choose.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class Confidence(str, Enum):
    DETECTED = "Detected"
    FALLBACK = "Fallback"


@dataclass(frozen=True)
class Rule:
    """Match when every marker is present, or, for marker-less rules, when any
    entry carries one of ``extensions``."""

    language: str
    project_type: str
    markers: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    specificity: int = 1

    def matches(self, names: frozenset[str]) -> bool:
        if self.markers:
            return all(marker in names for marker in self.markers)
        return any(name.endswith(ext) for name in names for ext in self.extensions)


RULES: tuple[Rule, ...] = (
    Rule("python", "django", markers=("manage.py", "requirements.txt"), specificity=3),
    Rule("java", "maven", markers=("pom.xml",), specificity=2),
    Rule("java", "gradle", markers=("build.gradle",), specificity=2),
    Rule("go", "go", markers=("go.mod",), specificity=2),
    Rule("javascript", "nodejs", markers=("package.json",), specificity=2),
    Rule("php", "laravel", markers=("composer.json", "artisan"), specificity=3),
    Rule("dotnet", "dotnet", extensions=(".csproj",), specificity=2),
    Rule("python", "python", markers=("requirements.txt",), specificity=2),
    Rule("python", "python", extensions=(".py",)),
    Rule("go", "go", extensions=(".go",)),
)


@dataclass(frozen=True)
class Candidate:
    language: str
    project_type: str
    confidence: Confidence


@dataclass(frozen=True)
class Classification:
    candidates: tuple[Candidate, ...] = ()
    unrecognized: bool = False

    @property
    def detected(self) -> Optional[Candidate]:
        """The single unambiguous candidate, if there is one."""
        if len(self.candidates) == 1 and self.candidates[0].confidence is Confidence.DETECTED:
            return self.candidates[0]
        return None

    @property
    def languages(self) -> list[str]:
        seen: list[str] = []
        for candidate in self.candidates:
            if candidate.language not in seen:
                seen.append(candidate.language)
        return seen


def _subsumed(rule: Rule, matched: list[Rule]) -> bool:
    # e.g. django (manage.py + requirements.txt) hides plain python
    return any(
        other.language == rule.language
        and other.project_type != rule.project_type
        and other.specificity > rule.specificity
        and set(rule.markers) <= set(other.markers)
        for other in matched
    )


def classify(inventory: Iterable[str], rules: Iterable[Rule] = RULES) -> Classification:
    entries = tuple(inventory)
    names = frozenset(name for name in entries if not name.startswith("."))
    if not names:
        return Classification(unrecognized=bool(entries))

    rules = list(rules)
    matched = [rule for rule in rules if rule.matches(names)]
    kept = [rule for rule in matched if not _subsumed(rule, matched)]

    # (language, project_type) -> (best specificity, first declaration index)
    ranked: dict[tuple[str, str], tuple[int, int]] = {}
    for rule in kept:
        key = (rule.language, rule.project_type)
        index = rules.index(rule)
        if key in ranked:
            best, first = ranked[key]
            ranked[key] = (max(best, rule.specificity), min(first, index))
        else:
            ranked[key] = (rule.specificity, index)

    if not ranked:
        return Classification(unrecognized=True)

    order = sorted(ranked, key=lambda key: (-ranked[key][0], ranked[key][1]))
    confidence = Confidence.DETECTED if len(order) == 1 else Confidence.FALLBACK
    return Classification(tuple(Candidate(lang, ptype, confidence) for lang, ptype in order))
