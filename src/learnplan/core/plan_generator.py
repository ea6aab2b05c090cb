"""Plan generation pipeline.

prompt -> LLM completion -> parser -> (fallback plan) -> resources

Upstream failures never escape: an unconfigured or failing LLM, or a response
the parser cannot turn into days, yields the deterministic fallback plan.
Resource search has its own fallback list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

import structlog

from learnplan.core.fallback_plan import generate_fallback_plan
from learnplan.core.models import LearningPlan, StudentProfile, utc_now_iso
from learnplan.core.plan_parser import parse_plan_response
from learnplan.core.prompt_builder import (
    SYSTEM_PROMPT,
    build_adapted_plan_prompt,
    build_plan_prompt,
)
from learnplan.errors import UpstreamError, ValidationError

if TYPE_CHECKING:
    from learnplan.llm.client import LLMClient
    from learnplan.search.client import ResourceSearchClient

logger = structlog.get_logger(__name__)

REQUIRED_PROFILE_FIELDS = ("name", "age")
DEFAULT_NEEDS = "learning needs"


def validate_profile(data: dict[str, Any]) -> None:
    """Check the fields a plan request cannot do without.

    Raises:
        ValidationError: If name or age is missing
    """
    missing = [f for f in REQUIRED_PROFILE_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise ValidationError("Name and age are required")


class PlanGenerator:
    """Builds learning plans for student profiles."""

    def __init__(
        self,
        llm_client: LLMClient | None,
        search_client: ResourceSearchClient,
        mock_mode: bool = False,
        clock: Callable[[], str] | None = None,
    ):
        """Initialize the generator.

        Args:
            llm_client: Completion client (None disables LLM calls)
            search_client: Resource search client
            mock_mode: Skip the LLM and always use the fallback plan
            clock: Timestamp provider for ``createdAt``
        """
        self.llm_client = llm_client
        self.search_client = search_client
        self.mock_mode = mock_mode
        self._clock = clock or utc_now_iso

    @property
    def llm_enabled(self) -> bool:
        return (
            not self.mock_mode
            and self.llm_client is not None
            and self.llm_client.is_configured
        )

    def _plan_from_llm(
        self, prompt: str, profile: StudentProfile, created_at: str
    ) -> LearningPlan | None:
        """Ask the LLM for a plan; None means use the fallback."""
        if not self.llm_enabled:
            logger.info(
                "plan_fallback_used",
                student=profile.name,
                reason="mock_mode" if self.mock_mode else "llm_not_configured",
            )
            return None

        try:
            raw = self.llm_client.simple_chat(SYSTEM_PROMPT, prompt)
        except UpstreamError as e:
            logger.warning(
                "plan_fallback_used",
                student=profile.name,
                reason="llm_error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        plan = parse_plan_response(raw, profile, created_at=created_at)
        if plan.source == "unparsed" or not plan.daily_plans:
            logger.warning(
                "plan_fallback_used",
                student=profile.name,
                reason="unparsable_response",
                response_chars=len(raw),
            )
            return None
        return plan

    def _attach_resources(self, plan: LearningPlan, profile: StudentProfile) -> LearningPlan:
        plan.resources = self.search_client.search_resources(profile.diagnosis or DEFAULT_NEEDS)
        return plan

    def generate(self, profile: StudentProfile) -> LearningPlan:
        """Generate a new 7-day plan.

        Args:
            profile: Student profile

        Returns:
            LearningPlan (source "llm" or "fallback") with resources attached
        """
        created_at = self._clock()
        plan = self._plan_from_llm(build_plan_prompt(profile), profile, created_at)
        if plan is None:
            plan = generate_fallback_plan(profile, created_at=created_at)

        logger.info(
            "plan.generated",
            student=profile.name,
            source=plan.source,
            days=len(plan.daily_plans),
        )
        return self._attach_resources(plan, profile)

    def generate_adapted(
        self, profile: StudentProfile, progress: dict[str, Any] | None
    ) -> LearningPlan:
        """Generate a plan adapted to recorded progress.

        Args:
            profile: Student profile (its ``latest_plan`` is summarized)
            progress: Progress data in canonical shape

        Returns:
            LearningPlan with resources attached
        """
        created_at = self._clock()
        prompt = build_adapted_plan_prompt(profile, progress)
        plan = self._plan_from_llm(prompt, profile, created_at)
        if plan is None:
            plan = generate_fallback_plan(profile, created_at=created_at)

        logger.info(
            "plan.adapted",
            student=profile.name,
            source=plan.source,
            days=len(plan.daily_plans),
        )
        return self._attach_resources(plan, profile)
