"""
Phase Builder - Turns one phase definition plus aggregated content into a Phase.

Selection:
- Tutorials: exact category match only, sorted by declared order.
- Challenges: keyword match (no category exists), first CHALLENGE_CAP.
- Projects: category match, else keyword match over projects whose category
  no other phase owns; sorted by order, first PROJECT_CAP.

Construction keeps a single linear chain over tutorials, their quizzes and
challenges. Projects hang off the last chained step and never off each other.
"""

from typing import AbstractSet, Dict, List, Optional, Sequence

from learnpath.engines.study_plan.matching import (
    CategoryMatch,
    KeywordMatch,
    MatchRule,
    searchable_text,
    select_first_matching,
)
from learnpath.engines.study_plan.repositories import SkillTagger
from learnpath.engines.study_plan.types import (
    Challenge,
    ContentBundle,
    DifficultyTier,
    Phase,
    PhaseSpec,
    Project,
    Step,
    StepType,
    Tutorial,
    make_step_id,
)
from learnpath.kernel.models.content import ChallengeDifficulty
from learnpath.logging_config import get_logger

logger = get_logger(__name__)

BASE_HOURS: Dict[StepType, float] = {
    StepType.TUTORIAL: 3.0,
    StepType.CHALLENGE: 2.0,
    StepType.QUIZ: 0.5,
    StepType.PROJECT: 8.0,
}

CHALLENGE_MULTIPLIER: Dict[ChallengeDifficulty, int] = {
    ChallengeDifficulty.EASY: 1,
    ChallengeDifficulty.MEDIUM: 2,
    ChallengeDifficulty.HARD: 3,
}

CHALLENGE_TIER: Dict[ChallengeDifficulty, DifficultyTier] = {
    ChallengeDifficulty.EASY: DifficultyTier.BEGINNER,
    ChallengeDifficulty.MEDIUM: DifficultyTier.INTERMEDIATE,
    ChallengeDifficulty.HARD: DifficultyTier.ADVANCED,
}

CHALLENGE_CAP = 3
PROJECT_CAP = 2


def tier_for(difficulty: int) -> DifficultyTier:
    """Map a 1-5 difficulty onto the three learner-facing tiers."""
    if difficulty <= 2:
        return DifficultyTier.BEGINNER
    if difficulty <= 4:
        return DifficultyTier.INTERMEDIATE
    return DifficultyTier.ADVANCED


def estimate_hours(step_type: StepType, multiplier: int) -> float:
    """Base hours for the content type scaled by difficulty. Quizzes are flat."""
    if step_type == StepType.QUIZ:
        return BASE_HOURS[StepType.QUIZ]
    return BASE_HOURS[step_type] * multiplier


class StepChain:
    """
    Linear prerequisite chain for one phase.

    ``append`` adds a step whose sole prerequisite is the id appended last;
    ``attach`` adds a side step (a project) that depends on the current tail
    without becoming the tail. Both draw from one running order counter.
    """

    def __init__(self) -> None:
        self._steps: List[Step] = []
        self._attached: List[Step] = []
        self._tail_id: Optional[str] = None
        self._next_order = 1

    @property
    def tail_id(self) -> Optional[str]:
        return self._tail_id

    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    @property
    def attached(self) -> List[Step]:
        return list(self._attached)

    def _make(self, **fields) -> Step:
        prerequisites = (self._tail_id,) if self._tail_id else ()
        step = Step(prerequisites=prerequisites, order=self._next_order, **fields)
        self._next_order += 1
        return step

    def append(self, **fields) -> Step:
        step = self._make(**fields)
        self._steps.append(step)
        self._tail_id = step.id
        return step

    def attach(self, **fields) -> Step:
        step = self._make(**fields)
        self._attached.append(step)
        return step


class PhaseBuilder:
    """Builds a single Phase from a PhaseSpec."""

    def __init__(
        self,
        skill_tagger: SkillTagger,
        *,
        challenge_cap: int = CHALLENGE_CAP,
        project_cap: int = PROJECT_CAP,
    ):
        self.skill_tagger = skill_tagger
        self.challenge_cap = challenge_cap
        self.project_cap = project_cap

    @staticmethod
    def rules_for(spec: PhaseSpec) -> List[MatchRule]:
        """Matching rules in priority order: category first, then keywords."""
        rules: List[MatchRule] = [CategoryMatch(slug=spec.category_slug)]
        if spec.keywords:
            rules.append(KeywordMatch(words=tuple(spec.keywords)))
        return rules

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_tutorials(
        self,
        spec: PhaseSpec,
        tutorials: Sequence[Tutorial],
        claimed: AbstractSet[str] = frozenset(),
    ) -> List[Tutorial]:
        selected, _ = select_first_matching(
            tutorials,
            [CategoryMatch(slug=spec.category_slug)],
            category_of=lambda t: t.category_slug,
            text_of=lambda t: searchable_text(t.title, t.description),
            exclude=lambda t: make_step_id(StepType.TUTORIAL, t.slug) in claimed,
        )
        return sorted(selected, key=lambda t: t.order)

    def select_challenges(
        self,
        spec: PhaseSpec,
        challenges: Sequence[Challenge],
        claimed: AbstractSet[str] = frozenset(),
    ) -> List[Challenge]:
        if not spec.keywords:
            return []
        selected, _ = select_first_matching(
            challenges,
            [KeywordMatch(words=tuple(spec.keywords))],
            category_of=lambda c: None,
            text_of=lambda c: searchable_text(c.title, c.description),
            exclude=lambda c: make_step_id(StepType.CHALLENGE, c.slug) in claimed,
        )
        return selected[: self.challenge_cap]

    def select_projects(
        self,
        spec: PhaseSpec,
        projects: Sequence[Project],
        claimed: AbstractSet[str] = frozenset(),
        reserved_categories: AbstractSet[str] = frozenset(),
    ) -> List[Project]:
        def taken(p: Project) -> bool:
            if make_step_id(StepType.PROJECT, p.slug) in claimed:
                return True
            # Categories owned by another phase are only placed by that phase
            return p.category in reserved_categories and p.category != spec.category_slug

        selected, _ = select_first_matching(
            projects,
            self.rules_for(spec),
            category_of=lambda p: p.category,
            text_of=lambda p: searchable_text(p.title, p.description),
            exclude=taken,
        )
        return sorted(selected, key=lambda p: p.order)[: self.project_cap]

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _skills(self, title: str, description: str, category: Optional[str]) -> frozenset:
        return frozenset(self.skill_tagger.extract(title, description, category))

    def build(
        self,
        spec: PhaseSpec,
        content: ContentBundle,
        claimed: AbstractSet[str] = frozenset(),
        reserved_categories: AbstractSet[str] = frozenset(),
    ) -> Phase:
        """
        Build the phase for ``spec``.

        Args:
            spec: Phase definition
            content: Aggregated content
            claimed: Step ids already placed by earlier phases; never reused
            reserved_categories: Category slugs owned by phases in the plan

        Returns:
            Phase with chained steps and independent projects. May be empty.
        """
        chain = StepChain()

        for tutorial in self.select_tutorials(spec, content.tutorials, claimed):
            tier = tier_for(tutorial.difficulty)
            tutorial_step = chain.append(
                id=make_step_id(StepType.TUTORIAL, tutorial.slug),
                title=tutorial.title,
                description=tutorial.description,
                type=StepType.TUTORIAL,
                resource_slug=tutorial.slug,
                estimated_hours=estimate_hours(StepType.TUTORIAL, tutorial.difficulty),
                difficulty=tier,
                category=tutorial.category_slug,
                skills=self._skills(tutorial.title, tutorial.description, tutorial.category_slug),
                is_premium=tutorial.is_premium,
                required_plan=tutorial.required_plan,
            )

            quiz = content.quiz_for(tutorial)
            if quiz is None or make_step_id(StepType.QUIZ, quiz.slug) in claimed:
                continue
            chain.append(
                id=make_step_id(StepType.QUIZ, quiz.slug),
                title=quiz.title,
                description=f"Check your understanding of {tutorial.title}",
                type=StepType.QUIZ,
                resource_slug=quiz.slug,
                estimated_hours=estimate_hours(StepType.QUIZ, tutorial.difficulty),
                difficulty=tier,
                category=tutorial.category_slug,
                skills=self._skills(quiz.title, "", tutorial.category_slug),
                is_premium=quiz.is_premium,
                required_plan=quiz.required_plan,
                parent_step_id=tutorial_step.id,
            )

        for challenge in self.select_challenges(spec, content.challenges, claimed):
            chain.append(
                id=make_step_id(StepType.CHALLENGE, challenge.slug),
                title=challenge.title,
                description=challenge.description,
                type=StepType.CHALLENGE,
                resource_slug=challenge.slug,
                estimated_hours=estimate_hours(
                    StepType.CHALLENGE, CHALLENGE_MULTIPLIER[challenge.difficulty]
                ),
                difficulty=CHALLENGE_TIER[challenge.difficulty],
                category=None,
                skills=self._skills(challenge.title, challenge.description, None),
                is_premium=challenge.is_premium,
                required_plan=challenge.required_plan,
            )

        for project in self.select_projects(
            spec, content.projects, claimed, reserved_categories
        ):
            chain.attach(
                id=make_step_id(StepType.PROJECT, project.slug),
                title=project.title,
                description=project.description,
                type=StepType.PROJECT,
                resource_slug=project.slug,
                estimated_hours=estimate_hours(StepType.PROJECT, project.difficulty),
                difficulty=tier_for(project.difficulty),
                category=project.category or None,
                skills=self._skills(project.title, project.description, project.category or None),
                is_premium=project.is_premium,
                required_plan=project.required_plan,
            )

        phase = Phase(
            id=spec.id,
            title=spec.title,
            description=spec.description,
            color_token=spec.color_token,
            icon_token=spec.icon_token,
            estimated_weeks=spec.estimated_weeks,
            steps=tuple(chain.steps),
            projects=tuple(chain.attached),
        )

        if phase.is_empty:
            logger.warning(
                "Phase has no matching content",
                extra={
                    "phase_id": spec.id,
                    "category_slug": spec.category_slug,
                    "keywords": list(spec.keywords),
                },
            )
        else:
            logger.debug(
                "Phase built",
                extra={
                    "phase_id": spec.id,
                    "step_count": len(phase.steps),
                    "project_count": len(phase.projects),
                },
            )
        return phase
