"""Shared fixtures: a compliant email template, an accepted enhancement of it, and campaign folders"""
import json
from pathlib import Path

import pytest

from email_qa.models.requirements import (
    AssetManifest,
    ContentContext,
    RequirementsBundle,
    TechnicalRequirements,
    TemplateRequirements,
)

BASE_HTML = """<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Transitional//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-transitional.dtd">
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
<meta http-equiv="Content-Type" content="text/html; charset=utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Summer in Antalya</title>
</head>
<body style="margin: 0; padding: 0; background-color: #EDEFFF;">
<table width="600" style="width: 600px; margin: 0 auto;">
<tr><td style="padding: 20px;">
<h1 style="color: #4BFF7E; font-family: Arial, sans-serif;">Summer in Antalya</h1>
<p style="font-size: 16px; line-height: 24px;">Discover turquoise beaches and ancient ruins with direct flights from Moscow this summer season.</p>
<img src="assets/hero.png" alt="Antalya beach" style="display: block; width: 600px;">
<a href="https://example.com/book" class="cta-button" style="background-color: #FF6240; color: #ffffff; padding: 12px 24px;">Book now</a>
</td></tr>
</table>
</body>
</html>
"""

# Adds a mobile media query and rounded CTA corners; everything else is untouched
ENHANCED_HTML = BASE_HTML.replace(
    "<head>\n",
    "<head>\n<style>@media (max-width: 600px) { h1 { font-size: 24px; } }</style>\n",
).replace(
    'style="background-color: #FF6240;',
    'style="border-radius: 4px; background-color: #FF6240;',
)

DESIGN_BRIEF = {
    "visual_elements": [
        {"name": "Hero heading", "type": "h1", "content": "Summer in Antalya"},
    ],
    "brand_elements": {"logo": False},
    "brand_colors": [
        {"name": "primary", "value": "#4BFF7E"},
        {"name": "accent", "value": "#FF6240"},
    ],
}

TECHNICAL_SPEC = {
    "max_file_size": 50000,
    "max_width": 640,
    "required_meta": [
        '<meta http-equiv="Content-Type" content="text/html; charset=utf-8">',
    ],
}

ASSET_MANIFEST = {
    "assetManifest": {
        "images": [
            {"filename": "hero.png", "path": "assets/hero.png", "purpose": "hero"},
        ],
        "icons": [],
    }
}

EMAIL_CONTENT = {
    "generated_content": {
        "subject": "Summer in Antalya",
        "cta": {"text": "Book now"},
    },
    "context_analysis": {"destination": "Antalya"},
    "pricing_analysis": {"best_price": 45000, "currency": "RUB"},
}


def write_campaign(root: Path, html: str = BASE_HTML, include_requirements: bool = True) -> Path:
    """Lay out a campaign directory the way the content and design stages leave it"""
    (root / "templates").mkdir(parents=True, exist_ok=True)
    (root / "templates" / "email-template.html").write_text(html, encoding="utf-8")
    if include_requirements:
        files = {
            ("content", "design-brief-from-context.json"): DESIGN_BRIEF,
            ("docs", "specifications", "technical-specification.json"): TECHNICAL_SPEC,
            ("assets", "manifests", "asset-manifest.json"): ASSET_MANIFEST,
            ("content", "email-content.json"): EMAIL_CONTENT,
        }
        for parts, data in files.items():
            path = root.joinpath(*parts)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return root


@pytest.fixture
def base_html():
    return BASE_HTML


@pytest.fixture
def enhanced_html():
    return ENHANCED_HTML


@pytest.fixture
def campaign_bundle():
    """Requirements matching BASE_HTML exactly"""
    return RequirementsBundle(
        template=TemplateRequirements.from_brief(DESIGN_BRIEF),
        technical=TechnicalRequirements.email_defaults(),
        assets=AssetManifest.from_raw(ASSET_MANIFEST),
        content=ContentContext.from_raw(EMAIL_CONTENT),
    )


@pytest.fixture
def campaign_dir(tmp_path):
    return write_campaign(tmp_path / "campaign-antalya")


@pytest.fixture
def make_campaign(tmp_path):
    """Factory for campaign directories with a custom template"""
    def _make(name: str = "campaign", html: str = BASE_HTML, include_requirements: bool = True) -> Path:
        return write_campaign(tmp_path / name, html, include_requirements)
    return _make
