"""Enhancer agent - one LLM polishing pass guarded by content protection"""
import logging
import re
from typing import Callable, List, Tuple
from openai import OpenAI

from email_qa.base_agent import AgentError, BaseAgent
from email_qa.config.settings import settings
from email_qa.config.validator_config import (
    BLOAT_THRESHOLD_PERCENT,
    BODY_PREFIX_LENGTH,
    MAX_INTEGRITY_REASONS,
    TRUNCATION_THRESHOLD_PERCENT,
)
from email_qa.core.integrity_checker import check_integrity, extract_title
from email_qa.enhancer.enhancer_prompt import ENHANCER_SYSTEM_PROMPT, build_enhancement_prompt
from email_qa.enhancer.enhancer_schemas import (
    EnhancementResult,
    EnhancementValidation,
    EnhancementVersions,
    ProtectionDecision,
    SizeAnalysis,
)
from email_qa.models.requirements import BrandPalette, RequirementsBundle

logger = logging.getLogger(__name__)

BODY_CONTENT_PATTERN = re.compile(r"<body[^>]*>([\s\S]*)</body>", re.IGNORECASE)
IMG_TAG_PATTERN = re.compile(r"<img[^>]*>")
BASIC_STRUCTURE_TAGS = ("<html", "</html>", "<body", "</body>")

ORIGINAL_PRESERVED_NOTICE = "Оригинальный HTML сохранён из-за проблем с оптимизацией"
FALLBACK_ENHANCEMENTS = ["Общие улучшения дизайна и структуры", "Оптимизация для email клиентов"]

MarkerPredicate = Callable[[str, str, BrandPalette], bool]

# Ordered (description, predicate(original, optimized, palette)) pairs describing what changed.
# Descriptive only: a match does not prove the model made that edit.
ENHANCEMENT_MARKERS: List[Tuple[str, MarkerPredicate]] = [
    ("Добавлена мобильная адаптивность",
     lambda original, optimized, palette: "@media" in optimized and "@media" not in original),
    ("Добавлена поддержка темной темы",
     lambda original, optimized, palette: "prefers-color-scheme" in optimized and "prefers-color-scheme" not in original),
    ("Добавлены современные визуальные эффекты",
     lambda original, optimized, palette: "box-shadow" in optimized or "gradient" in optimized),
    ("Улучшен дизайн кнопок и элементов",
     lambda original, optimized, palette: "border-radius" in optimized),
    ("Улучшена доступность с alt текстами",
     lambda original, optimized, palette: "alt=" in optimized),
    ("Улучшена типографика и выделения",
     lambda original, optimized, palette: "font-weight: bold" in optimized or "<strong>" in optimized),
    ("Оптимизирована цветовая схема",
     lambda original, optimized, palette: palette.primary in optimized or palette.accent in optimized),
]


def _flag(value: bool) -> str:
    return "true" if value else "false"


def extract_campaign_facts(bundle: RequirementsBundle) -> dict:
    """Campaign facts for the prompt; placeholders are already resolved by the models"""
    content = bundle.content
    return {
        "subject": content.subject,
        "destination": content.destination,
        "formatted_price": content.formatted_price,
        "primary_color": bundle.template.palette.primary,
        "accent_color": bundle.template.palette.accent,
    }


# Applies the four vetoes in order: truncation, bloat, broken structure, failed integrity.
# Any single veto prefers the original; every triggered veto contributes a reason.
def decide_protection(original_html: str, candidate_html: str) -> ProtectionDecision:
    """
    Decide whether the model output must be discarded

    Args:
        original_html: HTML sent to the model
        candidate_html: HTML returned by the model

    Returns:
        ProtectionDecision with localized reasons and the integrity result
    """
    size = SizeAnalysis.compare(original_html, candidate_html)
    reasons: List[str] = []

    if size.change_percent < TRUNCATION_THRESHOLD_PERCENT:
        title = extract_title(original_html)
        body_match = BODY_CONTENT_PATTERN.search(original_html)
        body = body_match.group(1) if body_match else ""
        images = IMG_TAG_PATTERN.findall(original_html)

        has_title = title in candidate_html
        has_content = body[:BODY_PREFIX_LENGTH] in candidate_html if body else True
        has_images = all(image in candidate_html for image in images)

        if not (has_title and has_content and has_images):
            logger.warning(
                f"[Enhancer] ✗ Content truncation detected | "
                f"size_change: {size.change_percent:.1f}% | "
                f"title: {has_title} | content: {has_content} | images: {has_images}"
            )
            reasons.append(
                f"Обнаружено обрезание контента "
                f"(Title: {_flag(has_title)}, Content: {_flag(has_content)}, Images: {_flag(has_images)})"
            )

    if size.change_percent > BLOAT_THRESHOLD_PERCENT:
        logger.warning(f"[Enhancer] ✗ Size grew too much | size_change: {size.change_percent:.1f}%")
        reasons.append(f"Слишком большое увеличение размера: {size.change_percent:.1f}%")

    if not all(tag in candidate_html for tag in BASIC_STRUCTURE_TAGS):
        logger.warning("[Enhancer] ✗ Candidate lost basic HTML structure")
        reasons.append("Некорректная HTML структура")

    integrity = check_integrity(original_html, candidate_html)
    if not integrity.is_valid:
        reasons.append(f"Проблемы целостности: {', '.join(integrity.issues[:MAX_INTEGRITY_REASONS])}")

    return ProtectionDecision(
        should_prefer_original=bool(reasons),
        reasons=reasons,
        integrity_check=integrity,
    )


def describe_enhancements(original_html: str, optimized_html: str, palette: BrandPalette) -> List[str]:
    """Evaluate ENHANCEMENT_MARKERS; generic entries when nothing matched"""
    made = [
        description for description, predicate in ENHANCEMENT_MARKERS
        if predicate(original_html, optimized_html, palette)
    ]
    return made or list(FALLBACK_ENHANCEMENTS)


class EnhancerAgent(BaseAgent):
    """Runs the HTML enhancement call and chooses between original and optimized output"""

    def __init__(self, client: OpenAI, model: str = None, temperature: float = None, **kwargs):
        super().__init__(
            client=client,
            model=model or settings.enhancement_model,
            temperature=temperature if temperature is not None else settings.enhancement_temperature,
            agent_name="Enhancer",
            **kwargs
        )

    # Returns a protected result holding the untouched original; used when the model call fails.
    def _failed_result(self, current_html: str, error: Exception) -> EnhancementResult:
        reason = f"AI enhancement failed: {error}"
        logger.error(f"[{self.agent_name}] ✗ {reason} | keeping original HTML")
        return EnhancementResult(
            enhanced_html=current_html,
            enhancements_made=[reason],
            versions=EnhancementVersions(original=current_html, optimized=current_html, preferred="original"),
            size_analysis=SizeAnalysis.compare(current_html, current_html),
            validation=EnhancementValidation(has_warnings=True, warning_reasons=[reason]),
        )

    async def enhance(self, current_html: str, bundle: RequirementsBundle) -> EnhancementResult:
        """
        Enhance an email template with one LLM pass

        Args:
            current_html: Template HTML to improve
            bundle: Campaign requirements (facts, palette)

        Returns:
            EnhancementResult; when the original is preferred, enhanced_html is current_html unchanged.
            Model failures are returned as protected results, never raised.
        """
        facts = extract_campaign_facts(bundle)
        logger.info(
            f"[{self.agent_name}] Enhancing template | "
            f"size: {len(current_html)} | "
            f"subject: {facts['subject']} | "
            f"destination: {facts['destination']} | "
            f"price: {facts['formatted_price']}"
        )

        try:
            candidate_html = await self._call_openai(
                ENHANCER_SYSTEM_PROMPT,
                build_enhancement_prompt(current_html, facts),
            )
            if not candidate_html:
                raise AgentError("Agent returned empty HTML")
            if not candidate_html.startswith("<"):
                raise AgentError("Agent returned non-HTML response")
        except AgentError as e:
            return self._failed_result(current_html, e)

        size = SizeAnalysis.compare(current_html, candidate_html)
        decision = decide_protection(current_html, candidate_html)

        if decision.should_prefer_original:
            preferred = "original"
            enhanced_html = current_html
            enhancements_made = [ORIGINAL_PRESERVED_NOTICE, *decision.reasons]
        else:
            preferred = "optimized"
            enhanced_html = candidate_html
            enhancements_made = describe_enhancements(current_html, candidate_html, bundle.template.palette)

        logger.info(
            f"[{self.agent_name}] {'✗ Protection triggered' if decision.should_prefer_original else '✓ Enhancement accepted'} | "
            f"preferred: {preferred} | "
            f"size: {size.original_length} → {size.optimized_length} ({size.change_percent:.1f}%) | "
            f"reasons: {len(decision.reasons)}"
        )

        return EnhancementResult(
            enhanced_html=enhanced_html,
            enhancements_made=enhancements_made,
            versions=EnhancementVersions(original=current_html, optimized=candidate_html, preferred=preferred),
            size_analysis=size,
            validation=EnhancementValidation(
                has_warnings=decision.should_prefer_original,
                warning_reasons=decision.reasons,
                integrity_check=decision.integrity_check,
            ),
        )
