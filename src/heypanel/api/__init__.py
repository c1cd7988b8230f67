"""Remote API client for avatar-video generation."""

from .client import ApiClient
from .errors import (
    AuthenticationMissing,
    CredentialRejected,
    MalformedResponse,
    PanelError,
    RemoteApiError,
    TransportError,
)
from .models import GenerationJob, JobStatus, UploadResult, VoiceOption

__all__ = [
    "ApiClient",
    "AuthenticationMissing",
    "CredentialRejected",
    "GenerationJob",
    "JobStatus",
    "MalformedResponse",
    "PanelError",
    "RemoteApiError",
    "TransportError",
    "UploadResult",
    "VoiceOption",
]
