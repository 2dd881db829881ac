"""Campaign requirement models - parsed once from the campaign JSON files"""

import posixpath
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from email_qa.config.validator_config import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_ACCESSIBILITY_AREAS,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CURRENCY,
    DEFAULT_EMAIL_CLIENTS,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_WIDTH,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_REQUIRED_META,
    EXPECTED_ASSET_PURPOSES,
    PLACEHOLDER_DESTINATION,
    PLACEHOLDER_PRICE,
    PLACEHOLDER_SUBJECT,
    XHTML_TRANSITIONAL_DOCTYPE,
)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


class ExpectedElement(BaseModel):
    """Visual element the design brief asks for"""
    name: str
    selector: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ExpectedElement"]:
        if isinstance(raw, str) and raw:
            return cls(name=raw, selector=raw)
        if not isinstance(raw, dict):
            return None
        name = raw.get("name") or raw.get("type")
        if not name:
            return None
        return cls(
            name=str(name),
            selector=raw.get("selector") or raw.get("type"),
            content=raw.get("content") or raw.get("description"),
        )


class BrandColor(BaseModel):
    name: str
    value: str


class BrandPalette(BaseModel):
    """Colors the enhancement prompt and marker detection refer to"""
    primary: str = DEFAULT_PRIMARY_COLOR
    accent: str = DEFAULT_ACCENT_COLOR
    background: str = DEFAULT_BACKGROUND_COLOR


class TemplateRequirements(BaseModel):
    """
    Design brief expectations. Defaults impose no checks.
    design_brief, mjml_template and brand_fonts pass through to reports and the cache key; no check reads them.
    """
    design_brief: Dict[str, Any] = {}
    mjml_template: Optional[str] = None
    expected_elements: List[ExpectedElement] = []
    requires_logo: bool = False
    brand_colors: List[BrandColor] = []
    palette: BrandPalette = Field(default_factory=BrandPalette)
    brand_fonts: List[Any] = []

    @classmethod
    def from_brief(cls, brief: Dict[str, Any], mjml_template: Optional[str] = None) -> "TemplateRequirements":
        """
        Build requirements from design-brief-from-context.json

        Args:
            brief: Parsed design brief
            mjml_template: Optional MJML source kept alongside the brief

        Returns:
            TemplateRequirements with unknown shapes ignored
        """
        elements = [ExpectedElement.from_raw(item) for item in _as_list(brief.get("visual_elements"))]

        raw_colors = brief.get("brand_colors")
        brand_colors: List[BrandColor] = []
        palette_values: Dict[str, str] = {}
        if isinstance(raw_colors, list):
            # Only list-shaped colors are enforced by the validator
            for color in raw_colors:
                color = _as_dict(color)
                value = color.get("value")
                if isinstance(value, str) and value:
                    name = str(color.get("name") or value)
                    brand_colors.append(BrandColor(name=name, value=value))
                    palette_values.setdefault(name.lower(), value)
        elif isinstance(raw_colors, dict):
            palette_values = {
                str(key).lower(): value for key, value in raw_colors.items() if isinstance(value, str) and value
            }

        palette = BrandPalette(**{
            key: palette_values[key] for key in ("primary", "accent", "background") if key in palette_values
        })

        return cls(
            design_brief=brief,
            mjml_template=mjml_template,
            expected_elements=[element for element in elements if element is not None],
            requires_logo=bool(_as_dict(brief.get("brand_elements")).get("logo")),
            brand_colors=brand_colors,
            palette=palette,
            brand_fonts=_as_list(brief.get("brand_fonts")),
        )


class TechnicalRequirements(BaseModel):
    """
    Technical limits. Each None/empty field disables its check.
    email_client_compatibility and accessibility_requirements are informational: the client and
    accessibility warnings always run.
    """
    max_file_size: Optional[int] = None
    required_doctype: Optional[str] = None
    max_width: Optional[int] = None
    required_meta: List[str] = []
    email_client_compatibility: List[str] = []
    accessibility_requirements: List[str] = []

    @classmethod
    def email_defaults(cls) -> "TechnicalRequirements":
        return cls(
            max_file_size=DEFAULT_MAX_FILE_SIZE,
            required_doctype=XHTML_TRANSITIONAL_DOCTYPE,
            max_width=DEFAULT_MAX_WIDTH,
            required_meta=list(DEFAULT_REQUIRED_META),
            email_client_compatibility=list(DEFAULT_EMAIL_CLIENTS),
            accessibility_requirements=list(DEFAULT_ACCESSIBILITY_AREAS),
        )

    @classmethod
    def from_spec(cls, spec: Dict[str, Any]) -> "TechnicalRequirements":
        """Build requirements from technical-specification.json"""
        layout = _as_dict(_as_dict(_as_dict(_as_dict(spec.get("specification")).get("design")).get("constraints")).get("layout"))
        return cls(
            max_file_size=spec.get("max_file_size") or DEFAULT_MAX_FILE_SIZE,
            # XHTML Transitional is required whenever a technical specification exists
            required_doctype=XHTML_TRANSITIONAL_DOCTYPE,
            max_width=spec.get("max_width") or layout.get("maxWidth") or DEFAULT_MAX_WIDTH,
            required_meta=[meta for meta in _as_list(spec.get("required_meta")) if isinstance(meta, str)],
            email_client_compatibility=_as_list(spec.get("email_client_compatibility")),
            accessibility_requirements=_as_list(spec.get("accessibility_requirements")),
        )


class AssetEntry(BaseModel):
    """One manifest entry (image, font or icon)"""
    model_config = ConfigDict(extra="allow")

    filename: Optional[str] = None
    path: Optional[str] = None
    purpose: Optional[str] = None

    def matches_src(self, src: str) -> bool:
        """True if an <img src> plausibly points at this asset"""
        if self.filename and (self.filename == posixpath.basename(src.replace("\\", "/")) or self.filename in src):
            return True
        if self.path and (src in self.path or self.path in src):
            return True
        return False

    def appears_in(self, html: str) -> bool:
        return bool(
            (self.filename and self.filename in html) or (self.path and self.path in html)
        )

    @property
    def label(self) -> str:
        return self.filename or self.path or "unknown"


class AssetManifest(BaseModel):
    """Asset manifest. Defaults are an empty manifest. Only images are checked; fonts and icons pass through."""
    images: List[AssetEntry] = []
    fonts: List[Any] = []
    icons: List[Any] = []

    @property
    def expected_assets(self) -> List[AssetEntry]:
        return [image for image in self.images if image.purpose in EXPECTED_ASSET_PURPOSES]

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "AssetManifest":
        """Build from asset-manifest.json, accepting a nested "assetManifest" key"""
        manifest = _as_dict(raw.get("assetManifest")) or raw
        return cls(
            images=[AssetEntry(**image) for image in _as_list(manifest.get("images")) if isinstance(image, dict)],
            fonts=_as_list(manifest.get("fonts")),
            icons=_as_list(manifest.get("icons")),
        )


class GeneratedContent(BaseModel):
    """Copy produced by the content stage that must appear in the template"""
    subject: Optional[str] = None
    preheader: Optional[str] = None
    cta_text: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "GeneratedContent":
        cta = raw.get("cta")
        if isinstance(cta, str):
            cta_text = cta
        else:
            cta = _as_dict(cta)
            cta_text = cta.get("text") or _as_dict(cta.get("primary")).get("text")
        return cls(
            subject=raw.get("subject") or None,
            preheader=raw.get("preheader") or None,
            cta_text=cta_text or None,
        )


class ContentContext(BaseModel):
    """Campaign facts with placeholder fallbacks. generated is None when no copy was loaded; raw keeps the parsed file."""
    generated: Optional[GeneratedContent] = None
    subject: str = PLACEHOLDER_SUBJECT
    destination: str = PLACEHOLDER_DESTINATION
    best_price: Optional[Any] = None
    currency: str = DEFAULT_CURRENCY
    raw: Dict[str, Any] = {}

    @property
    def formatted_price(self) -> str:
        if self.best_price:
            return f"{self.best_price} {self.currency}"
        return PLACEHOLDER_PRICE

    @classmethod
    def fallback(cls) -> "ContentContext":
        return cls()

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "ContentContext":
        """
        Resolve campaign facts from email-content.json with layered fallbacks

        Args:
            raw: Parsed content file, any shape

        Returns:
            ContentContext that never lacks subject, destination or currency
        """
        generated_raw = raw.get("generated_content")
        generated = GeneratedContent.from_raw(generated_raw) if isinstance(generated_raw, dict) else None
        generated_raw = _as_dict(generated_raw)

        pricing = _as_dict(_first_truthy(
            raw.get("pricing_analysis"), raw.get("pricing"), generated_raw.get("pricing")
        ))

        return cls(
            generated=generated,
            subject=str(_first_truthy(generated_raw.get("subject"), raw.get("subject")) or PLACEHOLDER_SUBJECT),
            destination=str(_first_truthy(
                _as_dict(raw.get("context_analysis")).get("destination"),
                _as_dict(generated_raw.get("context")).get("destination"),
            ) or PLACEHOLDER_DESTINATION),
            best_price=_first_truthy(pricing.get("best_price"), pricing.get("min_price")),
            currency=str(pricing.get("currency") or DEFAULT_CURRENCY),
            raw=raw,
        )


class RequirementsBundle(BaseModel):
    """The four per-campaign inputs that parameterize validation"""
    template: TemplateRequirements = Field(default_factory=TemplateRequirements)
    technical: TechnicalRequirements = Field(default_factory=TechnicalRequirements)
    assets: AssetManifest = Field(default_factory=AssetManifest)
    content: ContentContext = Field(default_factory=ContentContext)
