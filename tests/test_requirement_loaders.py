"""Tests for campaign requirement loaders and their defaults"""
import json
import pytest

from email_qa.config.validator_config import DEFAULT_REQUIRED_META, XHTML_TRANSITIONAL_DOCTYPE
from email_qa.core.requirement_loaders import (
    load_asset_manifest,
    load_content_context,
    load_requirements_bundle,
    load_technical_requirements,
    load_template_requirements,
)
from email_qa.models.requirements import TechnicalRequirements


def _write(root, parts, data):
    path = root.joinpath(*parts)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


class TestTemplateRequirements:

    @pytest.mark.asyncio
    async def test_brief_and_mjml_loaded(self, tmp_path):
        _write(tmp_path, ("content", "design-brief-from-context.json"), {
            "visual_elements": [{"type": "header", "description": "Brand header"}, "footer"],
            "brand_elements": {"logo": "assets/logo.png"},
            "brand_colors": [{"name": "primary", "value": "#123456"}],
        })
        _write(tmp_path, ("templates", "email-template.mjml"), "<mjml></mjml>")

        requirements = await load_template_requirements(tmp_path)

        assert [(e.name, e.selector, e.content) for e in requirements.expected_elements] == [
            ("header", "header", "Brand header"),
            ("footer", "footer", None),
        ]
        assert requirements.requires_logo
        assert requirements.palette.primary == "#123456"
        assert requirements.palette.accent == "#FF6240"
        assert requirements.design_brief["brand_elements"] == {"logo": "assets/logo.png"}
        assert requirements.mjml_template == "<mjml></mjml>"

    @pytest.mark.asyncio
    async def test_dict_colors_only_feed_palette(self, tmp_path):
        _write(tmp_path, ("content", "design-brief-from-context.json"), {
            "brand_colors": {"primary": "#111111", "accent": "#222222"},
        })

        requirements = await load_template_requirements(tmp_path)

        assert requirements.brand_colors == []
        assert requirements.palette.primary == "#111111"
        assert requirements.mjml_template is None

    @pytest.mark.asyncio
    async def test_missing_brief_imposes_nothing(self, tmp_path):
        requirements = await load_template_requirements(tmp_path)

        assert requirements.expected_elements == []
        assert not requirements.requires_logo


class TestTechnicalRequirements:

    @pytest.mark.asyncio
    async def test_missing_spec_uses_email_defaults(self, tmp_path):
        requirements = await load_technical_requirements(tmp_path)

        assert requirements == TechnicalRequirements.email_defaults()
        assert requirements.required_meta == DEFAULT_REQUIRED_META

    @pytest.mark.asyncio
    async def test_malformed_spec_uses_email_defaults(self, tmp_path):
        _write(tmp_path, ("docs", "specifications", "technical-specification.json"), "{not json")

        requirements = await load_technical_requirements(tmp_path)

        assert requirements.max_width == 640

    @pytest.mark.asyncio
    async def test_spec_values_and_nested_max_width(self, tmp_path):
        _write(tmp_path, ("docs", "specifications", "technical-specification.json"), {
            "max_file_size": 80000,
            "specification": {"design": {"constraints": {"layout": {"maxWidth": 600}}}},
        })

        requirements = await load_technical_requirements(tmp_path)

        assert requirements.max_file_size == 80000
        assert requirements.max_width == 600
        assert requirements.required_doctype == XHTML_TRANSITIONAL_DOCTYPE
        assert requirements.required_meta == []


class TestAssetAndContent:

    @pytest.mark.asyncio
    async def test_nested_manifest_and_expected_assets(self, tmp_path):
        _write(tmp_path, ("assets", "manifests", "asset-manifest.json"), {
            "assetManifest": {"images": [
                {"filename": "hero.jpg", "path": "assets/hero.jpg", "purpose": "hero", "width": 600},
                {"filename": "icon.png", "path": "assets/icon.png", "purpose": "decoration"},
            ]}
        })

        manifest = await load_asset_manifest(tmp_path)

        assert len(manifest.images) == 2
        assert [a.filename for a in manifest.expected_assets] == ["hero.jpg"]

    @pytest.mark.asyncio
    async def test_non_object_manifest_defaults(self, tmp_path):
        _write(tmp_path, ("assets", "manifests", "asset-manifest.json"), [1, 2, 3])

        manifest = await load_asset_manifest(tmp_path)

        assert manifest.images == []

    @pytest.mark.asyncio
    async def test_content_layered_fallbacks(self, tmp_path):
        _write(tmp_path, ("content", "email-content.json"), {
            "subject": "Top-level subject",
            "pricing": {"min_price": 19900},
            "generated_content": {"context": {"destination": "Сочи"}, "cta": {"primary": {"text": "Купить"}}},
        })

        content = await load_content_context(tmp_path)

        assert content.subject == "Top-level subject"
        assert content.destination == "Сочи"
        assert content.formatted_price == "19900 RUB"
        assert content.generated.cta_text == "Купить"

    @pytest.mark.asyncio
    async def test_missing_content_has_placeholders_only(self, tmp_path):
        content = await load_content_context(tmp_path)

        assert content.generated is None
        assert content.subject == "Email Subject"
        assert content.formatted_price == "Цена по запросу"


class TestBundle:

    @pytest.mark.asyncio
    async def test_one_broken_file_does_not_affect_others(self, campaign_dir):
        (campaign_dir / "content" / "email-content.json").write_text("[broken", encoding="utf-8")

        bundle = await load_requirements_bundle(campaign_dir)

        assert bundle.content.generated is None
        assert bundle.template.palette.primary == "#4BFF7E"
        assert bundle.technical.max_file_size == 50000
        assert [a.filename for a in bundle.assets.expected_assets] == ["hero.png"]

    @pytest.mark.asyncio
    async def test_empty_directory_yields_defaults(self, tmp_path):
        bundle = await load_requirements_bundle(str(tmp_path))

        assert bundle.technical == TechnicalRequirements.email_defaults()
        assert bundle.assets.images == []
