"""Request bodies for the two generation engines.

The simplified (Avatar IV) and structured (Avatar III) endpoints accept
incompatible schemas for the same action. Both are built exactly as the
remote API expects them.
"""

from typing import Any

from .models import ENGINE_SIMPLIFIED, ENGINE_STRUCTURED, GenerationJob

ENGINE_ENDPOINTS = {
    ENGINE_SIMPLIFIED: "/v2/video/av4/generate",
    ENGINE_STRUCTURED: "/v2/video/generate",
}


def build_simplified_payload(job: GenerationJob) -> dict[str, Any]:
    return {
        "image_key": job.visual_asset_ref,
        "video_title": job.title,
        "script": job.script,
        "voice_id": job.voice_id,
        "voice_settings": {"speed": job.speed},
        "video_orientation": job.orientation,
        "fit": job.fit,
        "caption": job.caption,
        "custom_motion_prompt": job.motion_prompt,
        "enhance_custom_motion_prompt": job.enhance_motion_prompt,
    }


def build_structured_payload(job: GenerationJob) -> dict[str, Any]:
    return {
        "title": job.title,
        "video_inputs": [
            {
                "character": {
                    "type": "talking_photo",
                    "talking_photo_id": job.visual_asset_ref,
                },
                "voice": {
                    "type": "text",
                    "input_text": job.script,
                    "voice_id": job.voice_id,
                    "speed": job.speed,
                },
                "background": {"type": "color", "value": job.background_color},
            }
        ],
        "dimension": {"width": job.width, "height": job.height},
        "caption": job.caption,
    }


def build_generation_request(job: GenerationJob) -> tuple[str, dict[str, Any]]:
    """Select endpoint path and body for a job's engine variant.

    Returns:
        Tuple of (endpoint path, JSON body)

    Raises:
        ValueError: If the engine variant is unknown
    """
    if job.engine_variant == ENGINE_SIMPLIFIED:
        body = build_simplified_payload(job)
    elif job.engine_variant == ENGINE_STRUCTURED:
        body = build_structured_payload(job)
    else:
        raise ValueError(f"Unknown engine variant: {job.engine_variant}")
    return ENGINE_ENDPOINTS[job.engine_variant], body
