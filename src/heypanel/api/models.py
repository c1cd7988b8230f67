"""API data models with validation."""

import locale
import unicodedata
from dataclasses import dataclass
from typing import Any

ENGINE_SIMPLIFIED = "simplified"
ENGINE_STRUCTURED = "structured"
ENGINE_VARIANTS = (ENGINE_SIMPLIFIED, ENGINE_STRUCTURED)

VOICE_TYPES = ("custom", "system")


@dataclass(frozen=True)
class VoiceOption:
    """A selectable voice.

    Args:
        voice_id: Unique identifier for the voice
        name: Human-readable name of the voice
        language: Language label reported by the API
        type: "custom" for account voices, "system" for the public catalog
    """

    voice_id: str
    name: str
    language: str = ""
    type: str = "system"

    def __post_init__(self) -> None:
        """Validate voice information."""
        if not self.voice_id or not self.voice_id.strip():
            raise ValueError("voice_id cannot be empty")
        if self.type not in VOICE_TYPES:
            raise ValueError(f"type must be one of {VOICE_TYPES}, got {self.type!r}")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "VoiceOption":
        """Build a VoiceOption from a raw voice record."""
        voice_type = record.get("type")
        if voice_type not in VOICE_TYPES:
            voice_type = "custom" if record.get("is_custom") else "system"
        voice_id = str(record.get("voice_id") or record.get("id") or "")
        return cls(
            voice_id=voice_id,
            name=record.get("name") or record.get("display_name") or voice_id,
            language=record.get("language") or "",
            type=voice_type,
        )


def collation_key(name: str) -> tuple[str, str]:
    """Sort key for a display name.

    Accents are folded first so "Émile" sorts with "E" even under the C
    locale; the active LC_COLLATE then orders the folded names.
    """
    folded = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(c for c in folded if not unicodedata.combining(c))
    return locale.strxfrm(base), name


def sort_voices(voices: list[VoiceOption]) -> list[VoiceOption]:
    """Order voices custom-first, then by name using locale collation."""
    return sorted(voices, key=lambda v: (v.type != "custom", collation_key(v.name)))


@dataclass(frozen=True)
class UploadResult:
    """Identifiers returned for an uploaded image.

    Args:
        asset_id: Asset identifier
        image_key: Image key used by the simplified engine, when provided
    """

    asset_id: str
    image_key: str | None = None

    @property
    def reference(self) -> str:
        """Value to use as a generation job's visual asset."""
        return self.image_key or self.asset_id


@dataclass(frozen=True)
class GenerationJob:
    """A video generation request.

    Only video_id changes after submission; the job is never stored locally.
    """

    title: str
    script: str
    voice_id: str
    visual_asset_ref: str
    speed: float = 1.0
    engine_variant: str = ENGINE_SIMPLIFIED
    orientation: str = "portrait"
    fit: str = "cover"
    caption: bool = False
    motion_prompt: str = ""
    enhance_motion_prompt: bool = True
    background_color: str = "#ffffff"
    width: int = 720
    height: int = 1280
    video_id: str | None = None

    def __post_init__(self) -> None:
        """Validate job fields."""
        if not self.script or not self.script.strip():
            raise ValueError("Script cannot be empty")
        if not self.voice_id:
            raise ValueError("voice_id cannot be empty")
        if not self.visual_asset_ref:
            raise ValueError("visual_asset_ref cannot be empty")
        if self.engine_variant not in ENGINE_VARIANTS:
            raise ValueError(
                f"engine_variant must be one of {ENGINE_VARIANTS}, got {self.engine_variant!r}"
            )
        if not 0.5 <= self.speed <= 1.5:
            raise ValueError("speed must be between 0.5 and 1.5")


@dataclass(frozen=True)
class JobStatus:
    """State of a submitted video as reported by the status endpoint."""

    video_id: str
    status: str
    video_url: str | None = None
    thumbnail_url: str | None = None
    duration: float | None = None
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.status in ("completed", "failed")

    @classmethod
    def from_response(cls, video_id: str, body: dict[str, Any]) -> "JobStatus":
        data = body.get("data")
        if not isinstance(data, dict):
            data = {}
        error = data.get("error")
        if isinstance(error, dict):
            error = error.get("message") or error.get("detail") or str(error)
        return cls(
            video_id=data.get("id") or video_id,
            status=data.get("status") or "unknown",
            video_url=data.get("video_url"),
            thumbnail_url=data.get("thumbnail_url"),
            duration=data.get("duration"),
            error=error,
        )
