"""Validation tool entry points: validate_and_correct_html and enhance_email_design"""
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple
from openai import OpenAI

from email_qa.config.settings import Settings, settings as default_settings
from email_qa.config.validator_config import (
    ERROR_REPORT_PATH,
    LATEST_ENHANCED_FILENAME,
    TEMPLATE_HTML_PATH,
    TEMPLATES_DIR,
    VALIDATION_REPORT_PATH,
)
from email_qa.core.cache import TTLCache, hash_payload
from email_qa.core.html_validator import validate_html
from email_qa.core.requirement_loaders import load_requirements_bundle
from email_qa.enhancer.enhancer_agent import EnhancerAgent
from email_qa.enhancer.enhancer_schemas import EnhancementResult
from email_qa.models.errors import ErrorCode, ValidationToolError
from email_qa.models.requirements import RequirementsBundle
from email_qa.models.schemas import ValidationResult
from email_qa.tools.reports import (
    build_comparison_report,
    build_error_report,
    build_validation_report,
    filesystem_timestamp,
    write_json,
    write_text,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineOutcome:
    """Everything one pipeline run produced"""
    timestamp: str
    current_html: str
    result: EnhancementResult
    initial_validation: ValidationResult
    final_validation: ValidationResult
    main_template_updated: bool
    files: Dict[str, str] = field(default_factory=dict)


class ValidationToolkit:
    """
    Owns the enhancer and both process-wide caches.
    Caches are injected so tests can use fresh instances or a fake clock.
    """

    def __init__(
        self,
        enhancer: EnhancerAgent,
        settings: Settings = default_settings,
        validation_cache: Optional[TTLCache] = None,
        context_cache: Optional[TTLCache] = None,
    ):
        self.enhancer = enhancer
        self.settings = settings
        if validation_cache is None:
            validation_cache = TTLCache(settings.cache_ttl_seconds, settings.validation_cache_max_entries)
        if context_cache is None:
            context_cache = TTLCache(settings.cache_ttl_seconds, settings.context_cache_max_entries)
        self.validation_cache = validation_cache
        self.context_cache = context_cache

    async def get_context(self, campaign_path: str) -> RequirementsBundle:
        """Requirements bundle for a campaign, cached by path"""
        cache_key = f"context_{campaign_path}"
        bundle = self.context_cache.get(cache_key)
        if bundle is not None:
            logger.debug(f"[Tools] Using cached campaign context | key: {cache_key}")
            return bundle

        bundle = await load_requirements_bundle(campaign_path)
        self.context_cache.set(cache_key, bundle)
        return bundle

    def validate_cached(self, html: str, bundle: RequirementsBundle) -> ValidationResult:
        """Validation result cached by a digest of the HTML and the bundle"""
        cache_key = f"validation_{hash_payload(html, bundle.model_dump(mode='json'))}"
        result = self.validation_cache.get(cache_key)
        if result is not None:
            logger.debug(f"[Tools] Using cached validation | key: {cache_key[:24]}...")
            return result

        result = validate_html(html, bundle)
        self.validation_cache.set(cache_key, result)
        return result

    # Validates the campaign path and reads templates/email-template.html.
    # Input problems become ValidationToolError with a specific code.
    async def _read_template(self, campaign_path: str) -> Tuple[Path, str]:
        if not campaign_path:
            raise ValidationToolError(ErrorCode.CAMPAIGN_PATH_MISSING, "Campaign path is required")

        campaign_dir = Path(campaign_path)
        if not campaign_dir.is_dir():
            raise ValidationToolError(
                ErrorCode.CAMPAIGN_NOT_FOUND,
                f"Campaign directory does not exist: {campaign_path}",
            )

        template_path = campaign_dir.joinpath(*TEMPLATE_HTML_PATH)
        try:
            html = await asyncio.to_thread(template_path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise ValidationToolError(
                ErrorCode.TEMPLATE_NOT_FOUND,
                f"HTML template file not found: {template_path}",
                hint="Run the design stage before validation",
            )
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationToolError(ErrorCode.TEMPLATE_UNREADABLE, f"Failed to read HTML template: {e}")

        if not html.strip():
            raise ValidationToolError(ErrorCode.TEMPLATE_EMPTY, "HTML template file is empty")

        return template_path, html

    # Writes the preferred HTML (timestamped + latest) and the differing variants.
    # Write failures are logged; the run continues without them.
    async def _save_variants(self, templates_dir: Path, timestamp: str, result: EnhancementResult) -> Dict[str, str]:
        versions = result.versions
        enhanced_html = result.enhanced_html

        files = {
            "original_file": TEMPLATE_HTML_PATH[-1],
            "enhanced_file": f"email-template-enhanced-{timestamp}.html",
            "latest_enhanced_file": LATEST_ENHANCED_FILENAME,
        }
        writes = [
            (files["enhanced_file"], enhanced_html),
            (files["latest_enhanced_file"], enhanced_html),
        ]
        if versions.original != enhanced_html:
            files["original_backup_file"] = f"email-template-original-{timestamp}.html"
            writes.append((files["original_backup_file"], versions.original))
        if versions.optimized != enhanced_html and versions.optimized != versions.original:
            files["optimized_file"] = f"email-template-optimized-{timestamp}.html"
            writes.append((files["optimized_file"], versions.optimized))

        try:
            for filename, html in writes:
                await write_text(templates_dir / filename, html)
                logger.info(f"[Tools] ✓ Saved {filename} | size: {len(html)}")
        except OSError as e:
            logger.error(f"[Tools] ✗ Failed to save enhanced HTML files: {e}")

        return files

    # Shared pipeline: read → context → validate → enhance → validate again → persist.
    # update_main_template controls whether a non-protected result overwrites email-template.html.
    async def _run_pipeline(
        self,
        campaign_path: str,
        trace_id: Optional[str],
        update_main_template: bool,
        write_validation_report: bool,
    ) -> PipelineOutcome:
        template_path, current_html = await self._read_template(campaign_path)
        logger.info(
            f"[Tools] Template loaded | "
            f"campaign: {Path(campaign_path).name} | "
            f"trace_id: {trace_id or 'none'} | "
            f"size: {len(current_html)}"
        )

        bundle = await self.get_context(campaign_path)
        initial_validation = self.validate_cached(current_html, bundle)
        logger.info(
            f"[Tools] Initial validation | "
            f"errors: {len(initial_validation.errors)} | "
            f"warnings: {len(initial_validation.warnings)}"
        )

        result = await self.enhancer.enhance(current_html, bundle)
        final_validation = self.validate_cached(result.enhanced_html, bundle)

        timestamp = filesystem_timestamp()
        templates_dir = Path(campaign_path) / TEMPLATES_DIR
        files = await self._save_variants(templates_dir, timestamp, result)

        main_template_updated = False
        if update_main_template and not result.protection_triggered:
            try:
                await write_text(template_path, result.enhanced_html)
                main_template_updated = True
                logger.info("[Tools] ✓ Main template updated with enhanced content")
            except OSError as e:
                logger.error(f"[Tools] ✗ Failed to update main template: {e}")
        elif result.protection_triggered:
            logger.warning("[Tools] Main template NOT updated - protection was triggered")

        outcome = PipelineOutcome(
            timestamp=timestamp,
            current_html=current_html,
            result=result,
            initial_validation=initial_validation,
            final_validation=final_validation,
            main_template_updated=main_template_updated,
            files=files,
        )

        comparison_path = templates_dir / f"enhancement-comparison-{timestamp}.json"
        try:
            await write_json(comparison_path, build_comparison_report(
                timestamp, files, result, initial_validation, final_validation, main_template_updated
            ))
            logger.info(f"[Tools] ✓ Comparison report saved | path: {comparison_path}")
        except OSError as e:
            logger.error(f"[Tools] ✗ Failed to save comparison report: {e}")

        if write_validation_report:
            report_path = Path(campaign_path).joinpath(*VALIDATION_REPORT_PATH)
            try:
                await write_json(report_path, build_validation_report(
                    timestamp, current_html, result, initial_validation, final_validation, main_template_updated,
                    mjml_source=bundle.template.mjml_template,
                ))
                logger.info(f"[Tools] ✓ Validation report saved | path: {report_path}")
            except OSError as e:
                logger.error(f"[Tools] ✗ Failed to save validation report: {e}")

        return outcome

    # Writes the error report when the campaign directory exists, then builds the error to raise.
    async def _handle_failure(self, error: Exception, campaign_path: str, trace_id: Optional[str]) -> ValidationToolError:
        logger.error(f"[Tools] ✗ HTML validation and enhancement failed | trace_id: {trace_id or 'none'} | error: {error}")

        if campaign_path and Path(campaign_path).is_dir():
            report_path = Path(campaign_path).joinpath(*ERROR_REPORT_PATH)
            try:
                await write_json(report_path, build_error_report(error, campaign_path, trace_id))
                logger.error(f"[Tools] Error report saved | path: {report_path}")
            except OSError as report_error:
                logger.error(f"[Tools] ✗ Failed to save error report: {report_error}")

        if isinstance(error, ValidationToolError):
            code, detail, hint = error.code, error.message, error.hint
        else:
            code, detail, hint = ErrorCode.PIPELINE_FAILED, str(error), None
        return ValidationToolError(
            code,
            f"HTML validation and enhancement failed: {detail}. Check error report for details.",
            hint=hint,
            trace_id=trace_id,
        )

    @staticmethod
    def _format_details(outcome: PipelineOutcome) -> str:
        result = outcome.result
        return (
            f"Made {len(result.enhancements_made)} improvements: {', '.join(result.enhancements_made)}. "
            f"Size changed by {result.size_analysis.change_percent:.1f}%. "
            f"Error count: {len(outcome.initial_validation.errors)} → {len(outcome.final_validation.errors)}. "
            f"Enhanced files saved with timestamp {outcome.timestamp}."
        )

    async def validate_and_correct_html(self, campaign_path: str, trace_id: Optional[str] = None) -> str:
        """
        Validate, enhance and persist the campaign's email template

        Args:
            campaign_path: Campaign directory
            trace_id: Optional trace ID for debugging

        Returns:
            Human-readable status string

        Raises:
            ValidationToolError: On input or pipeline failure, after writing the error report
        """
        logger.info(f"[Tools] === HTML VALIDATION & ENHANCEMENT === | campaign: {campaign_path} | trace_id: {trace_id or 'none'}")
        try:
            outcome = await self._run_pipeline(
                campaign_path, trace_id, update_main_template=True, write_validation_report=True
            )
        except Exception as e:
            raise await self._handle_failure(e, campaign_path, trace_id) from e

        if outcome.result.protection_triggered:
            status = (
                "⚠️ HTML Enhancement completed with PROTECTION TRIGGERED! "
                "Original template preserved due to content safety checks."
            )
        else:
            status = "✅ HTML Enhancement completed successfully!"
        return f"{status} {self._format_details(outcome)}"

    async def enhance_email_design(self, campaign_path: str, trace_id: Optional[str] = None) -> str:
        """
        Produce enhanced design variants without touching email-template.html

        Args:
            campaign_path: Campaign directory
            trace_id: Optional trace ID for debugging

        Returns:
            Human-readable status string

        Raises:
            ValidationToolError: On input or pipeline failure, after writing the error report
        """
        logger.info(f"[Tools] === EMAIL DESIGN ENHANCEMENT === | campaign: {campaign_path} | trace_id: {trace_id or 'none'}")
        try:
            outcome = await self._run_pipeline(
                campaign_path, trace_id, update_main_template=False, write_validation_report=False
            )
        except Exception as e:
            raise await self._handle_failure(e, campaign_path, trace_id) from e

        versions = outcome.result.versions
        if outcome.result.protection_triggered and versions.optimized == versions.original:
            # Enhancement failed; the optimized variant is the original
            status = (
                "⚠️ Email design enhancement completed with PROTECTION TRIGGERED! "
                "No optimized variant was produced; original template kept."
            )
        elif outcome.result.protection_triggered:
            status = (
                "⚠️ Email design enhancement completed with PROTECTION TRIGGERED! "
                "Optimized variant kept for review only."
            )
        else:
            status = (
                f"🎨 Email design enhancement completed! "
                f"Preferred variant: {versions.preferred}."
            )
        return f"{status} {self._format_details(outcome)}"


# Builds a toolkit with a real OpenAI client.
# Raises ValueError when no usable API key is configured.
def create_toolkit(api_key: Optional[str] = None, app_settings: Settings = default_settings) -> ValidationToolkit:
    api_key = api_key or app_settings.openai_api_key
    if not api_key or api_key.startswith("sk-xxxx") or "YOUR_" in api_key:
        raise ValueError("OPENAI_API_KEY not properly configured")

    client = OpenAI(api_key=api_key)
    enhancer = EnhancerAgent(
        client,
        model=app_settings.enhancement_model,
        temperature=app_settings.enhancement_temperature,
        timeout=app_settings.llm_timeout_seconds,
        max_tokens=app_settings.enhancement_max_tokens,
        debug_files=app_settings.agents_debug_files,
        debug_dir=app_settings.debug_dir,
    )
    return ValidationToolkit(enhancer, settings=app_settings)
