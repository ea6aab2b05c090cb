"""Deterministic, template-based learning plan.

Used whenever the LLM cannot be reached, is not configured, or its answer
cannot be parsed into days. The output only depends on the profile (and the
creation timestamp), so the same student always gets the same plan.
"""

from __future__ import annotations

import hashlib
import random

import structlog

from learnplan.core.models import Day, LearningPlan, StudentProfile, TimeBlock

logger = structlog.get_logger(__name__)

DEFAULT_INTERESTS = ["dinosaurs", "space", "technology"]
ROTATING_SUBJECTS = ["Math", "Reading", "Science", "Social Studies", "Writing", "Art", "Technology"]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

FALLBACK_ACCOMMODATIONS = [
    "Provide visual schedule and checklists for daily activities and transitions",
    "Allow use of fidget tools during seated work to support focus",
    "Break assignments into smaller chunks with clear visual markers for each section",
    "Provide extra time for reading tasks and comprehension activities",
    "Offer alternatives to handwriting (typing, voice recording, scribe)",
    "Seat near teacher for frequent check-ins and redirection",
    "Use visual timer for all activities to support time management",
    "Provide quiet headphones during independent work to reduce auditory distractions",
    "Use color-coding system for organizing materials and information",
    "Incorporate movement breaks between learning activities",
    "Provide step-by-step visual instructions for multi-step tasks",
    "Allow preferential seating away from distractions (windows, doors, high traffic areas)",
]


def _seed(profile: StudentProfile) -> int:
    key = "|".join([profile.name, profile.diagnosis, profile.interests])
    return int.from_bytes(hashlib.sha256(key.encode("utf-8")).digest()[:8], "big")


def _interests(profile: StudentProfile) -> list[str]:
    return profile.interest_list() or list(DEFAULT_INTERESTS)


def _student_profile_text(profile: StudentProfile) -> str:
    name = profile.name or "The student"
    return (
        f"{name} is a {profile.age or 'school'}-year-old student in grade {profile.grade or '5'} "
        f"with {profile.diagnosis or 'ADHD'}. {name} demonstrates strengths in "
        f"{profile.strengths or 'verbal communication and creative problem-solving'}, while facing "
        f"challenges with {profile.struggles or 'maintaining focus and reading comprehension'}. "
        f"{name} has a {profile.learning_style or 'visual'} learning style and typically maintains "
        f"focus for {profile.attention_span or 'short (10-20 minute)'} periods. {name} is "
        f"particularly interested in {profile.interests or 'science topics and technology'}, which "
        f"can be leveraged to increase engagement."
    )


def _learning_approach_text(profile: StudentProfile) -> str:
    name = profile.name or "this student"
    interests = profile.interests or "science and technology"
    return "\n\n".join(
        [
            f"For {name}, a structured yet flexible approach is recommended, with the following key strategies:",
            "1. Use visual supports extensively, including graphic organizers, color-coding, and visual schedules",
            "2. Break learning into 15-20 minute chunks to match attention span, with brief movement breaks between activities",
            f"3. Incorporate high-interest topics like {interests} into lessons across subjects",
            "4. Provide immediate feedback and positive reinforcement, using a points system for motivation",
            "5. Use multisensory teaching methods that combine visual, auditory, and kinesthetic elements",
            "6. Minimize writing demands by offering alternatives like voice recording, typing, or verbal responses",
            "7. Create a predictable routine with clear transitions and expectations",
        ]
    )


def _progress_monitoring_text(profile: StudentProfile) -> str:
    name = profile.name or "the student"
    return "\n".join(
        [
            f"Progress for {name} should be monitored using the following approaches:",
            "",
            "1. Daily check-in/check-out system with visual tracking of goals",
            "2. Weekly progress chart for specific target behaviors (task completion, focus time, etc.)",
            "3. Point system tied to specific learning objectives with visual tracking",
            "4. Bi-weekly assessment of reading fluency and comprehension using leveled passages",
            "5. Math skill checks using visual problem-solving templates",
            f"6. Self-monitoring tools where {name} rates own focus and effort after activities",
            "7. Regular communication between home and school using a visual communication log",
            "8. Monthly review of accommodations to determine effectiveness and make adjustments as needed",
        ]
    )


def _day_one(interests: list[str]) -> Day:
    first = interests[0]
    return Day(
        title="Day 1 - Monday",
        time_blocks=[
            TimeBlock(
                "9:00-9:20",
                "Morning Meeting",
                "Visual schedule review and daily goals",
                "Use visual schedule cards and interactive goal-setting",
                "Visual schedule, goal chart, stickers",
            ),
            TimeBlock(
                "9:25-9:45",
                "Math",
                f"Number patterns with {first} theme",
                "Visual aids and manipulatives with high-interest theme",
                "Pattern blocks, themed worksheets, tablet for interactive math game",
            ),
            TimeBlock(
                "9:50-10:10",
                "Movement Break",
                "Structured movement game with math concepts",
                "Kinesthetic learning with clear rules and boundaries",
                "Open space, number cards, music",
            ),
            TimeBlock(
                "10:15-10:35",
                "Reading",
                f"Guided reading with book about {first}",
                "Pre-teaching vocabulary with visual supports, chunked reading passages",
                "Highlighted text, vocabulary cards, fidget tools",
            ),
            TimeBlock(
                "10:40-11:00",
                "Science",
                "Interactive video and discussion",
                "Visual learning with structured discussion prompts",
                "Short video segments, discussion cards, response board",
            ),
        ],
        notes=(
            "Ensure fidget tools are available throughout the day. Use visual timer for all "
            "activities. Provide specific praise for on-task behavior."
        ),
    )


def _day_two(interests: list[str]) -> Day:
    second = interests[1] if len(interests) > 1 else interests[0]
    return Day(
        title="Day 2 - Tuesday",
        time_blocks=[
            TimeBlock(
                "9:00-9:20",
                "Morning Meeting",
                "Review schedule and set daily goals",
                "Interactive check-in with visual supports",
                "Visual schedule, goal chart, feelings cards",
            ),
            TimeBlock(
                "9:25-9:45",
                "Writing",
                f"Create a comic strip about {second}",
                "Visual storytelling with minimal writing",
                "Comic templates, colored pencils, word bank",
            ),
            TimeBlock(
                "9:50-10:10",
                "Movement Break",
                "Simon Says with academic concepts",
                "Structured movement with clear directions",
                "Open space, visual cue cards",
            ),
            TimeBlock(
                "10:15-10:35",
                "Social Studies",
                "Interactive map exploration",
                "Hands-on learning with visual supports",
                "Interactive maps, colored markers, tablet for virtual exploration",
            ),
            TimeBlock(
                "10:40-11:00",
                "Math",
                "Problem-solving with visual models",
                "Step-by-step visual problem solving",
                "Math manipulatives, visual problem-solving template",
            ),
        ],
        notes=(
            "Check in frequently during writing activity. Provide extra visual supports for "
            "transitions between activities."
        ),
    )


def _generic_day(day_number: int, interests: list[str], rng: random.Random) -> Day:
    subjects = list(ROTATING_SUBJECTS)
    rng.shuffle(subjects)
    interest = rng.choice(interests)
    first, second, third = subjects[:3]

    return Day(
        title=f"Day {day_number} - {DAY_NAMES[day_number - 1]}",
        time_blocks=[
            TimeBlock(
                "9:00-9:20",
                "Morning Meeting",
                "Visual schedule review and goal setting",
                "Interactive check-in with visual supports",
                "Visual schedule, goal chart, timer",
            ),
            TimeBlock(
                "9:25-9:45",
                first,
                f"{first} activity with {interest} theme",
                "Visual learning with high-interest content",
                f"{first} materials, visual aids, fidget tools",
            ),
            TimeBlock(
                "9:50-10:10",
                "Movement Break",
                "Structured movement activity",
                "Kinesthetic learning with clear boundaries",
                "Open space, movement cards, music",
            ),
            TimeBlock(
                "10:15-10:35",
                second,
                f"Interactive {second} lesson",
                "Multisensory approach with visual supports",
                f"{second} materials, tablet for interactive elements",
            ),
            TimeBlock(
                "10:40-11:00",
                third,
                f"{third} exploration with visual aids",
                "Hands-on learning with frequent check-ins",
                f"{third} materials, visual supports, timer",
            ),
        ],
        notes=(
            "Focus on providing immediate feedback and positive reinforcement throughout the day. "
            f"Incorporate {interest} into activities when possible to increase engagement."
        ),
    )


def generate_fallback_plan(
    profile: StudentProfile,
    created_at: str | None = None,
) -> LearningPlan:
    """Build the template plan for a student.

    Always returns exactly seven days, each with five time blocks, and a
    non-empty accommodations list. Resources are left empty; the caller
    attaches them.

    Args:
        profile: Student profile (only name/interests/diagnosis affect choices)
        created_at: Creation timestamp (defaults to now)

    Returns:
        LearningPlan with source "fallback"
    """
    rng = random.Random(_seed(profile))
    interests = _interests(profile)

    days = [_day_one(interests), _day_two(interests)]
    days.extend(_generic_day(n, interests, rng) for n in range(3, 8))

    logger.info("fallback_plan_generated", student=profile.name, days=len(days))

    return LearningPlan(
        student_name=profile.name,
        student_age=profile.age,
        student_grade=profile.grade or "5",
        diagnosis=profile.diagnosis or "ADHD",
        student_profile=_student_profile_text(profile),
        learning_approach=_learning_approach_text(profile),
        daily_plans=days,
        accommodations=list(FALLBACK_ACCOMMODATIONS),
        progress_monitoring=_progress_monitoring_text(profile),
        created_at=created_at or "",
        source="fallback",
    )
