"""
Tests for the structural email HTML validator.

Covers each of the six checks on its own plus the aggregate contract:
validity depends on errors only, and validation is a pure function.
"""
from email_qa.core.html_validator import (
    validate_accessibility,
    validate_asset_usage,
    validate_content_alignment,
    validate_email_client_compatibility,
    validate_html,
    validate_technical_requirements,
    validate_template_structure,
)
from email_qa.models.requirements import (
    AssetManifest,
    BrandColor,
    ContentContext,
    ExpectedElement,
    GeneratedContent,
    RequirementsBundle,
    TechnicalRequirements,
    TemplateRequirements,
)
from email_qa.models.schemas import ErrorType, Severity, WarningType


class TestAggregateValidation:
    """validate_html contract"""

    def test_compliant_template_is_valid(self, base_html, campaign_bundle):
        result = validate_html(base_html, campaign_bundle)

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_warnings_do_not_block_validity(self):
        """Image without alt only warns"""
        html = '<html><head><title>T</title></head><body><img src="https://cdn.example.com/a.png"></body></html>'

        result = validate_html(html, RequirementsBundle())

        assert result.is_valid
        assert "Image missing alt attribute" in [w.message for w in result.warnings]

    def test_missing_doctype_is_single_critical_error(self):
        bundle = RequirementsBundle(technical=TechnicalRequirements(required_doctype="<!DOCTYPE html>"))
        html = '<html><head><title>T</title></head><body><h1>Hi</h1></body></html>'

        result = validate_html(html, bundle)

        assert not result.is_valid
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.type == ErrorType.TECHNICAL
        assert error.severity == Severity.CRITICAL
        assert error.message == "Missing or incorrect DOCTYPE"

    def test_validity_matches_error_presence(self, base_html, campaign_bundle):
        broken = base_html.replace("#FF6240", "#000000")

        result = validate_html(broken, campaign_bundle)

        assert result.is_valid is (len(result.errors) == 0)
        assert not result.is_valid

    def test_validation_is_idempotent(self, base_html, campaign_bundle):
        html = base_html.replace("alt=\"Antalya beach\" ", "")

        first = validate_html(html, campaign_bundle)
        second = validate_html(html, campaign_bundle)

        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_summary_counts_by_severity(self):
        bundle = RequirementsBundle(technical=TechnicalRequirements.email_defaults())

        summary = validate_html("<html><body></body></html>", bundle).summary()

        assert summary["critical_errors"] == 1
        assert summary["major_errors"] == 2  # both default meta tags
        assert summary["total_errors"] == 3


class TestTemplateStructure:

    def test_element_found_by_selector_or_content(self):
        requirements = TemplateRequirements(expected_elements=[
            ExpectedElement(name="Header", selector="<header", content="Welcome"),
        ])

        assert validate_template_structure("<p>Welcome aboard</p>", requirements) == []
        assert validate_template_structure("<header></header>", requirements) == []

    def test_missing_element_is_major(self):
        requirements = TemplateRequirements(expected_elements=[
            ExpectedElement(name="Footer", selector="footer", content="Unsubscribe"),
        ])

        errors = validate_template_structure("<p>Hello</p>", requirements)

        assert [e.message for e in errors] == ["Missing required element: Footer"]
        assert errors[0].severity == Severity.MAJOR

    def test_logo_and_brand_color(self):
        requirements = TemplateRequirements(
            requires_logo=True,
            brand_colors=[BrandColor(name="primary", value="#4BFF7E")],
        )

        errors = validate_template_structure("<p style=\"color: #4bff7e\">Hi</p>", requirements)

        messages = {e.message: e for e in errors}
        assert messages["Missing brand logo"].severity == Severity.MAJOR
        # Hex match is case-sensitive
        assert messages["Missing brand color: primary"].severity == Severity.MINOR
        assert messages["Missing brand color: primary"].suggestion == "Use brand color #4BFF7E in the template"


class TestTechnicalRequirements:

    def test_file_size_limit(self):
        errors = validate_technical_requirements("x" * 11, TechnicalRequirements(max_file_size=10))

        assert [e.message for e in errors] == ["HTML file size exceeds limit: 11 > 10"]

    def test_width_uses_largest_token(self):
        html = '<table style="width: 600px"><td style="max-width:700px">'

        errors = validate_technical_requirements(html, TechnicalRequirements(max_width=640))

        assert [e.message for e in errors] == ["Template width exceeds limit: 700 > 640"]

    def test_width_regex_is_case_insensitive(self):
        errors = validate_technical_requirements('<td WIDTH:800>', TechnicalRequirements(max_width=640))

        assert len(errors) == 1

    def test_missing_meta_tags_reported_individually(self):
        requirements = TechnicalRequirements(required_meta=['<meta charset="utf-8">', '<meta name="x">'])

        errors = validate_technical_requirements('<meta name="x">', requirements)

        assert [e.message for e in errors] == ['Missing required meta tag: <meta charset="utf-8">']

    def test_empty_requirements_impose_nothing(self):
        assert validate_technical_requirements("<div style=\"width: 9999px\">", TechnicalRequirements()) == []


class TestAssetUsage:

    def test_expected_asset_missing(self):
        manifest = AssetManifest.from_raw({"images": [
            {"filename": "hero.png", "path": "assets/hero.png", "purpose": "hero"},
            {"filename": "deco.png", "path": "assets/deco.png", "purpose": "decoration"},
        ]})

        errors = validate_asset_usage("<p>No images</p>", manifest)

        assert [e.message for e in errors] == ["Expected asset not used: hero.png"]
        assert errors[0].severity == Severity.MAJOR

    def test_unknown_local_src_is_minor(self):
        manifest = AssetManifest.from_raw({"images": [{"filename": "hero.png", "path": "assets/hero.png"}]})
        html = '<img src="assets/hero.png" alt=""><img src="images/other.jpg" alt="">'

        errors = validate_asset_usage(html, manifest)

        assert [e.message for e in errors] == ["Referenced asset not found in manifest: images/other.jpg"]
        assert errors[0].severity == Severity.MINOR
        assert errors[0].type == ErrorType.ASSET

    def test_src_matching_by_path_containment(self):
        manifest = AssetManifest.from_raw({"images": [{"filename": "x.png", "path": "/campaign/assets/optimized/hero.webp"}]})

        assert validate_asset_usage('<img src="assets/optimized/hero.webp">', manifest) == []

    def test_external_and_local_absolute_sources_skipped(self):
        manifest = AssetManifest.from_raw({"images": [{"filename": "hero.png", "path": "assets/hero.png"}]})
        html = (
            '<img src="https://cdn.example.com/a.png">'
            '<img src="/Users/designer/campaign/b.png">'
            '<img src="/home/ci/campaign/c.png">'
            '<img src="C:\\campaign\\d.png">'
        )

        assert validate_asset_usage(html, manifest) == []

    def test_local_src_unmatched_without_manifest_images(self):
        html = '<html><body><h1>x</h1><img src="images/hero.png" alt=""></body></html>'

        errors = validate_asset_usage(html, AssetManifest())

        assert [e.message for e in errors] == ["Referenced asset not found in manifest: images/hero.png"]
        assert errors[0].severity == Severity.MINOR
        assert errors[0].location == '<img src="images/hero.png" alt="">'


class TestContentAlignment:

    def test_generated_copy_must_appear(self):
        content = ContentContext(generated=GeneratedContent(
            subject="Summer sale", preheader="Only this week", cta_text="Buy now",
        ))

        errors = validate_content_alignment("<p>Summer sale</p>", content)

        assert [(e.message, e.severity) for e in errors] == [
            ("Preheader text not found in template", Severity.MINOR),
            ("Call-to-action text not found in template", Severity.MAJOR),
        ]

    def test_placeholder_context_skips_check(self):
        assert validate_content_alignment("<p></p>", ContentContext.fallback()) == []


class TestWarnings:

    def test_compatibility_warnings(self):
        html = '<div style="display: flex"></div><div style="display: grid"></div><link rel="stylesheet" href="x.css">'

        warnings = validate_email_client_compatibility(html)

        assert [w.message for w in warnings] == [
            "Flexbox detected - may not work in all email clients",
            "CSS Grid detected - may not work in all email clients",
            "External stylesheets detected - may be blocked by email clients",
        ]
        assert all(w.type == WarningType.COMPATIBILITY for w in warnings)

    def test_one_alt_warning_per_image(self):
        html = '<h1>Hi</h1><img src="a.png"><IMG SRC="b.png"><img src="c.png" alt="c">'

        warnings = validate_accessibility(html)

        assert [w.message for w in warnings] == ["Image missing alt attribute"] * 2

    def test_missing_h1(self):
        warnings = validate_accessibility("<h2>Sub</h2>")

        assert [w.message for w in warnings] == ["No H1 heading found"]
        assert warnings[0].type == WarningType.ACCESSIBILITY
