"""
Keyword skill tagger backed by a skill catalog.

A skill matches content when its name or any of its keywords occurs in the
lower-cased title and description. When a category is given only skills of
that category are considered.
"""

from typing import Iterable, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict


class SkillDefinition(BaseModel):
    """Catalog entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    keywords: Tuple[str, ...] = ()


class CatalogSkillTagger:
    """SkillTagger over an in-memory catalog snapshot."""

    def __init__(self, skills: Iterable[SkillDefinition]):
        self.skills: Tuple[SkillDefinition, ...] = tuple(skills)

    def extract(self, title: str, description: str, category: Optional[str]) -> Set[str]:
        candidates = (
            [s for s in self.skills if s.category == category] if category else self.skills
        )
        text = f"{title} {description or ''}".lower()
        matched: Set[str] = set()
        for skill in candidates:
            if skill.name.lower() in text or any(k.lower() in text for k in skill.keywords if k):
                matched.add(skill.name)
        return matched
