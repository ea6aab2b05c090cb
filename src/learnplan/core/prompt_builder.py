"""Prompt construction for plan generation and resource search.

Pure string building: no I/O. Coded form values are replaced by their
human-readable labels and missing attributes render as "Not specified".
"""

from __future__ import annotations

from typing import Any

from learnplan.core.models import NOT_SPECIFIED, StudentProfile
from learnplan.core.progress import summarize_progress

SYSTEM_PROMPT = """You are an educational specialist who creates highly personalized 7-day learning plans for neurodiverse students.
Your plans are evidence-based, practical, and tailored to each student's unique strengths, challenges, interests, and learning style.
You specialize in creating plans for students with ADHD, autism, dyslexia, and other neurodiverse conditions.

IMPORTANT GUIDELINES:
1. Make each plan HIGHLY PERSONALIZED to the specific student, not generic recommendations.
2. Incorporate the student's specific interests, strengths, and learning style throughout the plan.
3. Address the student's specific challenges with targeted, evidence-based strategies.
4. Consider cultural background and preferences when provided.
5. Create activities that are engaging and appropriate for the student's age and grade level.
6. Structure time blocks based on the student's attention span.
7. Include specific materials, resources, and teaching methods for each activity.
8. Provide clear, practical accommodations that address the student's specific needs.

Your responses should be structured, detailed, and focused on practical implementation.
Each plan should feel custom-designed for the specific student, not a generic template."""

LEARNING_STYLE_LABELS = {
    "visual": "Visual (learns best through seeing)",
    "auditory": "Auditory (learns best through hearing)",
    "kinesthetic": "Kinesthetic (learns best through hands-on activities)",
    "reading/writing": "Reading/Writing (learns best through text)",
    "multimodal": "Multimodal (combination of styles)",
}

ATTENTION_SPAN_LABELS = {
    "very-short": "Very short (5-10 minutes)",
    "short": "Short (10-20 minutes)",
    "moderate": "Moderate (20-30 minutes)",
    "long": "Long (30+ minutes)",
    "variable": "Highly variable (depends on interest)",
}

PLAN_SECTIONS_INSTRUCTIONS = """1. Student Profile: {profile_hint}

2. Learning Approach: {approach_hint}

3. Daily Plans (for 7 days): For each day (Day 1 through Day 7), create a structured schedule with:
   - Time blocks based on the student's attention span (label each block with a time range such as 9:00-9:20)
   - Subject focus for each block
   - Specific activities that leverage strengths and address challenges
   - Teaching methods/approaches for each activity (label them "Approach:")
   - Required materials or resources (label them "Materials:")

4. Accommodations: {accommodations_hint}

5. Progress Monitoring: How to track and measure the student's progress{progress_hint}."""


def _text(value: Any, default: str = NOT_SPECIFIED) -> str:
    """Render a form value, substituting a default for missing/blank values."""
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def describe_learning_style(value: str | None) -> str:
    """Human-readable label for a learning style code."""
    if not value:
        return NOT_SPECIFIED
    return LEARNING_STYLE_LABELS.get(value, value)


def describe_attention_span(value: str | None) -> str:
    """Human-readable label for an attention span code."""
    if not value:
        return NOT_SPECIFIED
    return ATTENTION_SPAN_LABELS.get(value, value)


def _describe_learning_style_results(results: dict[str, Any] | None) -> str:
    if not results:
        return ""
    primary = results.get("primaryLearningStyle")
    secondary = results.get("secondaryLearningStyle")
    parts = []
    if primary:
        parts.append(f"primary {primary}")
    if secondary:
        parts.append(f"secondary {secondary}")
    if not parts:
        return ""
    return f"Learning Style Assessment: {', '.join(parts)}\n"


def _describe_cultural_data(cultural: dict[str, Any] | None) -> str:
    if not cultural:
        return ""
    lines = []
    for key, value in cultural.items():
        if value in (None, "", [], {}):
            continue
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        label = "".join(" " + c.lower() if c.isupper() else c for c in key).strip()
        lines.append(f"- {label.capitalize()}: {value}")
    if not lines:
        return ""
    return "\nCULTURAL BACKGROUND:\n" + "\n".join(lines) + "\n"


def build_plan_prompt(profile: StudentProfile) -> str:
    """Build the user prompt for a new 7-day learning plan.

    Args:
        profile: Student attributes (any of them may be missing)

    Returns:
        Prompt text requesting the five named sections
    """
    diagnosis = _text(profile.diagnosis)
    if profile.diagnosis_other:
        diagnosis = f"{diagnosis} ({profile.diagnosis_other})"

    sections = PLAN_SECTIONS_INSTRUCTIONS.format(
        profile_hint=(
            "A brief summary of the student's learning profile, including strengths, "
            "challenges, and learning style."
        ),
        approach_hint=(
            "Overall recommended teaching approach for this student, considering their "
            "diagnosis, learning style, and attention span."
        ),
        accommodations_hint=(
            "Specific classroom and testing accommodations that will help the student "
            "access the curriculum."
        ),
        progress_hint=" toward their learning goals",
    )

    return f"""Create a comprehensive 7-day personalized learning plan for the following neurodiverse student:

STUDENT INFORMATION:
Name: {_text(profile.name)}
Age: {_text(profile.age)}
Grade: {_text(profile.grade)}
Diagnosis/Condition: {diagnosis}

LEARNING PROFILE:
Strengths: {_text(profile.strengths)}
Struggles: {_text(profile.struggles)}
Learning Style: {describe_learning_style(profile.learning_style)}
Attention Span: {describe_attention_span(profile.attention_span)}
Known Triggers: {_text(profile.triggers, "None specified")}
Interests & Motivators: {_text(profile.interests, "None specified")}
Current Accommodations: {_text(profile.current_accommodations, "None currently in place")}
{_describe_learning_style_results(profile.learning_style_results)}{_describe_cultural_data(profile.cultural_data)}
Please create a detailed 7-day learning plan with the following sections:

{sections}

Format your response with clear headings for each section. Be specific and practical in your recommendations. Focus on evidence-based strategies for students with {_text(profile.diagnosis, "learning differences")}.

For the daily plans, please structure each day with clear time blocks and ensure activities are engaging and appropriate for the student's age, grade level, and attention span.
"""


def build_adapted_plan_prompt(
    profile: StudentProfile, progress: dict[str, Any] | None
) -> str:
    """Build the user prompt for adapting a plan to recorded progress.

    Args:
        profile: Student profile, including ``latest_plan`` when available
        progress: Progress data (canonical ``weeklyProgress`` map plus notes)

    Returns:
        Prompt text embedding progress and the previous plan summary
    """
    progress = progress or {}
    previous_plan = profile.latest_plan or {}
    previous_summary = _text(
        previous_plan.get("studentProfile"), "No previous plan available"
    )

    sections = PLAN_SECTIONS_INSTRUCTIONS.format(
        profile_hint="An updated summary of the student's learning profile based on progress.",
        approach_hint="Refined teaching approach based on what worked well.",
        accommodations_hint="Updated accommodations based on progress.",
        progress_hint="",
    )

    rating = progress.get("overallRating")
    rating_line = f"Overall rating: {rating}/5\n" if rating not in (None, "") else ""

    return f"""Create an adapted 7-day learning plan for the following neurodiverse student based on their progress:

STUDENT INFORMATION:
Name: {_text(profile.name)}
Age: {_text(profile.age)}
Grade: {_text(profile.grade)}
Diagnosis/Condition: {_text(profile.diagnosis)}

LEARNING PROFILE:
Strengths: {_text(profile.strengths)}
Struggles: {_text(profile.struggles)}
Learning Style: {describe_learning_style(profile.learning_style)}
Attention Span: {describe_attention_span(profile.attention_span)}

PROGRESS INFORMATION:
{rating_line}{summarize_progress(progress)}

WHAT WORKED WELL:
{_text(progress.get("whatWorked"))}

WHAT DIDN'T WORK:
{_text(progress.get("challenges"))}

NEXT STEPS SUGGESTED BY THE EDUCATOR:
{_text(progress.get("nextSteps"))}

PREVIOUS PLAN SUMMARY:
{previous_summary}

Please create an updated 7-day learning plan that builds on what worked well and addresses the challenges. Include the following sections:

{sections}

Format your response with clear headings for each section. Be specific and practical in your recommendations. Focus on evidence-based strategies for students with {_text(profile.diagnosis, "learning differences")}.
"""


def build_resource_query(needs: str) -> str:
    """Search query for educational resources matching a student's needs."""
    return f"educational resources for students with {needs}"


def build_strategy_query(challenge: str) -> str:
    """Search query for teaching strategies addressing a learning challenge."""
    return f"evidence-based teaching strategies for students with {challenge}"
