"""Core domain logic.

Modules:
- models: Student profile and learning plan records
- prompt_builder: Prompt text for plan generation and search queries
- plan_parser: Structured extraction from free-text LLM output
- fallback_plan: Deterministic template plan
- plan_generator: LLM -> parser -> fallback -> resources pipeline
- progress: Weekly progress records
- calendar: Moving time blocks between days
- consultations: Expert consultation requests
"""

__all__ = [
    "models",
    "prompt_builder",
    "plan_parser",
    "fallback_plan",
    "plan_generator",
    "progress",
    "calendar",
    "consultations",
]
