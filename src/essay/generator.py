"""Tailored scholarship essays: prompt assembly and model fallback."""

import logging
from collections.abc import Sequence

from src.core.schemas import Scholarship
from src.essay.llm import LLMProvider
from src.essay.schema import StudentProfile

logger = logging.getLogger(__name__)

NOT_PROVIDED = "Not provided"

ESSAY_INSTRUCTIONS = (
    "Write a BRAND NEW essay that directly answers the essay question above",
    "DO NOT rewrite or paraphrase the student's background essay",
    "Use the student's background information ONLY to understand their "
    "experiences, voice, and perspective",
    "Create original content that specifically addresses the scholarship's "
    "requirements and essay question",
    "Draw from the student's experiences mentioned in their background, but "
    "present them in a fresh way that fits the question",
    "Keep the student's authentic voice but craft entirely new sentences and structure",
    "Make the essay compelling, specific, and directly relevant to this scholarship",
    "Do NOT use em dashes (—) in the essay. Use commas, semicolons, or "
    "parentheses instead",
    "Length: 400-650 words",
    "Return ONLY the essay text, no introduction or explanation",
)


class EssayGenerationError(Exception):
    """Every configured model failed to produce an essay."""


def _profile_context(profile: StudentProfile) -> str:
    lines = [
        "Student Profile Details:",
        f"- Name: {profile.full_name or NOT_PROVIDED}",
        f"- Age: {profile.age or NOT_PROVIDED}",
        f"- Graduation Year: {profile.graduation_year or NOT_PROVIDED}",
        f"- Transfer Student: {'Yes' if profile.is_transfer else 'No'}",
        f"- Interests: {', '.join(profile.interests) or NOT_PROVIDED}",
    ]
    if profile.quiz_answers:
        lines.append("Tailoring Quiz Answers:")
        lines.extend(f"- {q}: {a}" for q, a in profile.quiz_answers.items())
    return "\n".join(lines)


def build_essay_prompt(
    question: str,
    scholarship: Scholarship,
    profile: StudentProfile | None = None,
) -> str:
    """Assemble the essay prompt for one scholarship and essay question."""
    profile = profile or StudentProfile()
    background = profile.base_essay or question
    instructions = "\n".join(
        f"{i}. {text}" for i, text in enumerate(ESSAY_INSTRUCTIONS, start=1)
    )
    return (
        "Task: Write a COMPLETELY NEW scholarship essay from scratch that answers "
        "the specific essay question below.\n\n"
        "SCHOLARSHIP INFORMATION:\n"
        f"- Name: {scholarship.name}\n"
        f"- Provider: {scholarship.provider}\n"
        f"- Description: {scholarship.description}\n"
        f"- Requirements: {', '.join(scholarship.requirements)}\n\n"
        "ESSAY QUESTION TO ANSWER:\n"
        f'"{question}"\n\n'
        "STUDENT BACKGROUND (Use this to understand the student, but DO NOT copy "
        "or rewrite it):\n"
        f"{_profile_context(profile)}\n\n"
        "Student's Personal Story/Background:\n"
        f'"{background}"\n\n'
        "CRITICAL INSTRUCTIONS:\n"
        f"{instructions}\n"
    )


def generate_essay(
    provider: LLMProvider,
    question: str,
    scholarship: Scholarship,
    profile: StudentProfile | None = None,
    models: Sequence[str] = (),
) -> str:
    """Generate an essay, trying each model in order until one succeeds.

    ``models`` defaults to the provider's own fallback list.

    Raises:
        ValueError: If ``question`` is blank.
        EssayGenerationError: If every model fails or returns nothing.
    """
    if not question.strip():
        msg = "Essay question must not be empty"
        raise ValueError(msg)

    prompt = build_essay_prompt(question, scholarship, profile)
    candidates = list(models) or provider.fallback_models

    last_error: Exception | None = None
    for model in candidates:
        logger.info("Attempting essay with %s/%s", provider.provider_id, model)
        try:
            text = provider.complete(prompt, model=model)
        except ImportError:
            raise
        except Exception as e:
            logger.warning("Model %s failed: %s — falling back", model, e)
            last_error = e
            continue
        if text and text.strip():
            return text.strip()
        logger.warning("Model %s returned an empty essay — falling back", model)

    msg = (
        f"Failed to generate essay with all available models "
        f"({', '.join(candidates)}). Please check your API key and try again."
    )
    raise EssayGenerationError(msg) from last_error
