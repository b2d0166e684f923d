"""
Narrative Agent - First-person "About Me" generation

Builds a bounded prompt from the mapped profile and races the LLM call
against a client-side deadline.
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List, Optional, Tuple

from config import settings
from schemas.profile_schemas import (
    CanonicalProfile,
    NarrativeGenerated,
    NarrativeGenerationFailed,
    NarrativeGenerationTimedOut,
    NarrativeOutcome,
)
from utils.llm_client import llm_client
from utils.logger import logger


SYSTEM_PROMPT = (
    "You write short, warm, first-person 'About Me' paragraphs for professional "
    "portfolio sites. Reply with the paragraph only, two or three sentences, no preamble."
)


class NarrativeAgent:
    """Agent responsible for generating the About Me narrative"""

    def __init__(self):
        self.name = "NarrativeAgent"
        logger.info(f"{self.name} initialized")

    def build_prompt(self, profile: CanonicalProfile) -> str:
        """
        Summarize the profile into a prompt of at most NARRATIVE_PROMPT_MAX_CHARS

        Args:
            profile: Mapped profile (education, experience and skills are sampled)

        Returns:
            Prompt text
        """
        limit = settings.NARRATIVE_MAX_ITEMS
        lines: List[str] = ["Write an About Me paragraph for this person."]
        if profile.full_name:
            lines.append(f"Name: {profile.full_name}")
        if profile.current_role:
            lines.append(f"Role: {profile.current_role}")

        education = [
            " ".join(p for p in (e.degree, "at" if e.degree and e.institution else "", e.institution) if p)
            for e in profile.education[:limit]
        ]
        if any(education):
            lines.append("Education: " + "; ".join(e for e in education if e))

        experience = [
            " ".join(p for p in (x.job_title, "at" if x.job_title and x.organization else "", x.organization) if p)
            for x in profile.experience[:limit]
        ]
        if any(experience):
            lines.append("Experience: " + "; ".join(x for x in experience if x))

        skills = profile.technical_skills[:settings.NARRATIVE_MAX_SKILLS]
        if skills:
            lines.append("Skills: " + ", ".join(skills))

        return "\n".join(lines)[:settings.NARRATIVE_PROMPT_MAX_CHARS]

    def _complete(self, prompt: str) -> str:
        response = llm_client.generate(
            prompt,
            system_prompt=SYSTEM_PROMPT,
            max_tokens=settings.NARRATIVE_MAX_TOKENS,
            temperature=settings.NARRATIVE_TEMPERATURE,
        )
        return (response.get("content") or "").strip()

    def generate(self, profile: CanonicalProfile) -> NarrativeOutcome:
        """
        Generate the narrative, bounded by NARRATIVE_TIMEOUT

        The call runs in a worker thread. If the deadline wins, the worker is
        abandoned and its eventual result ignored. The worker is not a daemon
        thread, so interpreter shutdown still waits for a hung provider call,
        bounded by GROQ_TIMEOUT / HF_TIMEOUT.

        Returns:
            NarrativeGenerated, NarrativeGenerationFailed or NarrativeGenerationTimedOut
        """
        prompt = self.build_prompt(profile)
        timeout = settings.NARRATIVE_TIMEOUT

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="narrative")
        future = executor.submit(self._complete, prompt)
        try:
            text = future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning(f"{self.name}: Generation timed out", timeout=timeout)
            return NarrativeGenerationTimedOut(timeout_seconds=timeout)
        except Exception as e:
            logger.warning(f"{self.name}: Generation failed: {type(e).__name__}: {e}")
            return NarrativeGenerationFailed(cause=f"About Me generation failed: {e}")
        finally:
            executor.shutdown(wait=False)

        if not text:
            logger.warning(f"{self.name}: Empty completion")
            return NarrativeGenerationFailed(cause="About Me generation returned no text")

        logger.info(f"{self.name}: Narrative generated", chars=len(text))
        return NarrativeGenerated(text=text)

    def resolve(self, outcome: NarrativeOutcome) -> Tuple[str, Optional[str]]:
        """
        Turn an outcome into (about_me, warning)

        Failures and timeouts resolve to DEFAULT_ABOUT_ME with the cause as warning.
        """
        if isinstance(outcome, NarrativeGenerated):
            return outcome.text, None
        return settings.DEFAULT_ABOUT_ME, outcome.cause


# Agent instance
narrative_agent = NarrativeAgent()
