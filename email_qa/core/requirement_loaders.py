"""Campaign requirement loaders - each loader defaults instead of failing"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from email_qa.config.validator_config import (
    ASSET_MANIFEST_PATH,
    CONTENT_CONTEXT_PATH,
    DESIGN_BRIEF_PATH,
    TECHNICAL_SPEC_PATH,
    TEMPLATE_MJML_PATH,
)
from email_qa.models.requirements import (
    AssetManifest,
    ContentContext,
    RequirementsBundle,
    TechnicalRequirements,
    TemplateRequirements,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# Reads a campaign-relative JSON file off the event loop.
# Raises ValueError when the top level is not an object so callers fall back to defaults.
async def _read_json(campaign_path: PathLike, relative: tuple) -> Dict[str, Any]:
    file_path = Path(campaign_path).joinpath(*relative)
    text = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{file_path.name} must contain a JSON object, got {type(data).__name__}")
    return data


# Reads an optional campaign-relative text file; absence is not an error.
async def _read_optional_text(campaign_path: PathLike, relative: tuple) -> Optional[str]:
    file_path = Path(campaign_path).joinpath(*relative)
    try:
        return await asyncio.to_thread(file_path.read_text, encoding="utf-8")
    except FileNotFoundError:
        return None


# Loads design brief expectations (visual elements, logo, brand colors) and the MJML source if present.
# Missing or malformed brief yields empty requirements so no template checks run.
async def load_template_requirements(campaign_path: PathLike) -> TemplateRequirements:
    """Load template requirements from the design brief"""
    try:
        brief = await _read_json(campaign_path, DESIGN_BRIEF_PATH)
        mjml_template = await _read_optional_text(campaign_path, TEMPLATE_MJML_PATH)
        requirements = TemplateRequirements.from_brief(brief, mjml_template)
        logger.debug(
            f"[Loaders] ✓ Template requirements | "
            f"elements: {len(requirements.expected_elements)} | "
            f"brand_colors: {len(requirements.brand_colors)} | "
            f"logo_required: {requirements.requires_logo}"
        )
        return requirements
    except Exception as e:
        logger.warning(f"[Loaders] Could not load template requirements, using defaults: {e}")
        return TemplateRequirements()


# Loads technical limits from the technical specification.
# A missing or malformed technical specification yields the standard email defaults (XHTML doctype, 640px, 100KB).
async def load_technical_requirements(campaign_path: PathLike) -> TechnicalRequirements:
    """Load technical requirements from docs/specifications"""
    try:
        spec = await _read_json(campaign_path, TECHNICAL_SPEC_PATH)
        requirements = TechnicalRequirements.from_spec(spec)
        logger.debug(
            f"[Loaders] ✓ Technical requirements | "
            f"max_width: {requirements.max_width} | "
            f"max_file_size: {requirements.max_file_size} | "
            f"required_meta: {len(requirements.required_meta)}"
        )
        return requirements
    except Exception as e:
        logger.warning(f"[Loaders] Could not load technical requirements, using email defaults: {e}")
        return TechnicalRequirements.email_defaults()


async def load_asset_manifest(campaign_path: PathLike) -> AssetManifest:
    """Load asset manifest from assets/manifests"""
    try:
        manifest = AssetManifest.from_raw(await _read_json(campaign_path, ASSET_MANIFEST_PATH))
        logger.debug(
            f"[Loaders] ✓ Asset manifest | "
            f"images: {len(manifest.images)} | "
            f"expected: {len(manifest.expected_assets)}"
        )
        return manifest
    except Exception as e:
        logger.warning(f"[Loaders] Could not load asset manifest, using empty manifest: {e}")
        return AssetManifest()


async def load_content_context(campaign_path: PathLike) -> ContentContext:
    """Load content context; fallback carries placeholders only"""
    try:
        return ContentContext.from_raw(await _read_json(campaign_path, CONTENT_CONTEXT_PATH))
    except Exception as e:
        logger.warning(f"[Loaders] Could not load content context, using placeholder facts: {e}")
        return ContentContext.fallback()


# Fans out the four loaders concurrently; one failing loader never aborts the others.
# Returns a fully populated bundle for the validator and the enhancer.
async def load_requirements_bundle(campaign_path: PathLike) -> RequirementsBundle:
    """
    Load every campaign input in parallel

    Args:
        campaign_path: Campaign directory

    Returns:
        RequirementsBundle with per-loader defaults applied
    """
    template, technical, assets, content = await asyncio.gather(
        load_template_requirements(campaign_path),
        load_technical_requirements(campaign_path),
        load_asset_manifest(campaign_path),
        load_content_context(campaign_path),
    )
    logger.info(f"[Loaders] ✓ Campaign context loaded | campaign: {Path(campaign_path).name}")
    return RequirementsBundle(template=template, technical=technical, assets=assets, content=content)
