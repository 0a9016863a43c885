"""Per-category conversion options.

These are collected by the front-end and carried on the request as an
extension point. The signature encoder does not consume them.
"""

from typing import Any, Literal, Mapping, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .catalog import category_of

QualityTier = Literal["low", "medium", "high", "best"]
Resolution = Literal["480p", "720p", "1080p", "1440p", "2160p"]

QUALITY_TIERS: tuple[str, ...] = get_args(QualityTier)
RESOLUTIONS: tuple[str, ...] = get_args(Resolution)

# Audio tier -> nominal bitrate shown next to the choice
AUDIO_BITRATES = {"low": 64, "medium": 128, "high": 256, "best": 320}

PAGE_RANGE_PATTERN = r"^(?:all|\s*\d+(?:\s*-\s*\d+)?(?:\s*,\s*\d+(?:\s*-\s*\d+)?)*\s*)$"


class InvalidOptions(ValueError):
    pass


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ImageOptions(_Options):
    quality: int = Field(default=80, ge=10, le=100, description="Output quality")
    width: int = Field(default=1280, gt=0, description="Width in pixels")
    height: int = Field(default=720, gt=0, description="Height in pixels")
    preserve_aspect_ratio: bool = Field(default=True, description="Keep the source aspect ratio")


class DocumentOptions(_Options):
    page_range: str = Field(default="all", pattern=PAGE_RANGE_PATTERN, description='"all" or e.g. "1-5, 8"')
    include_annotations: bool = Field(default=True, description="Carry annotations over")


class AudioOptions(_Options):
    quality_tier: QualityTier = Field(default="high", description="Bitrate tier")


class VideoOptions(_Options):
    quality_tier: QualityTier = Field(default="high", description="Quality preset")
    resolution: Resolution = Field(default="720p", description="Output resolution")
    bitrate_kbps: int = Field(default=1800, ge=500, le=8000, description="Video bitrate")


ConversionOptions = ImageOptions | DocumentOptions | AudioOptions | VideoOptions

OPTION_TYPES: dict[str, type[_Options]] = {
    "images": ImageOptions,
    "documents": DocumentOptions,
    "audio": AudioOptions,
    "video": VideoOptions,
}


def _invalid(category: str, error: ValidationError) -> InvalidOptions:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or 'options'}: {e['msg']}" for e in error.errors()
    )
    return InvalidOptions(f"invalid {category} options: {problems}")


def option_categories(source_format: str, target_format: str) -> list[str]:
    """Categories whose options apply: any that either side belongs to.

    Order follows the options panel: image, document, audio, video.
    """
    involved = {category_of(source_format), category_of(target_format)}
    return [c for c in ("images", "documents", "audio", "video") if c in involved]


def options_for_category(category: str, values: Mapping[str, Any] | None = None) -> ConversionOptions | None:
    model = OPTION_TYPES.get(category)
    if model is None:
        return None
    try:
        return model.model_validate(dict(values or {}))
    except ValidationError as e:
        raise _invalid(category, e) from e


def parse_options(raw: str | None, source_format: str) -> dict[str, Any] | None:
    """Parse the JSON ``options`` form field against the source's category.

    Returns the normalized option mapping, or None when no field was sent or
    the category has no options.
    """
    if raw is None or not raw.strip():
        return None
    category = category_of(source_format)
    model = OPTION_TYPES.get(category)
    if model is None:
        return None
    try:
        return model.model_validate_json(raw).model_dump()
    except ValidationError as e:
        raise _invalid(category, e) from e
