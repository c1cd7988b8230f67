"""Async client for the avatar-video generation API.

Every call is authenticated from the CredentialStore and recorded in the
ActivityLog before and after dispatch.
"""

import dataclasses
import logging
from typing import Any

import httpx

from ..activity import ActivityLog
from ..config import APIConfig
from ..credentials import CredentialStore
from .content_type import resolve_content_type
from .errors import (
    AuthenticationMissing,
    CredentialRejected,
    MalformedResponse,
    RemoteApiError,
    TransportError,
)
from .models import GenerationJob, JobStatus, UploadResult, VoiceOption, sort_voices
from .payloads import build_generation_request

logger = logging.getLogger(__name__)


def extract_records(body: Any, *keys: str) -> list[dict[str, Any]]:
    """Pull the record array out of a listing response.

    Listing endpoints return either a bare array under "data" or an object
    holding the array under one of several keys.

    Args:
        body: Parsed response body
        keys: Candidate keys inside "data", tried in order

    Returns:
        The dict records found, or an empty list
    """
    if not isinstance(body, dict):
        return []
    data = body.get("data")
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            return []
    if not isinstance(data, list):
        return []
    return [record for record in data if isinstance(record, dict)]


def extract_error_message(body: Any, text: str, status: int) -> str:
    """Best available error message for a non-2xx response."""
    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
        error = body.get("error")
        if isinstance(error, dict):
            error = error.get("message") or error.get("code")
        if error:
            return str(error)
    if text and text.strip():
        return text.strip()
    return f"HTTP Error {status}"


class ApiClient:
    """Client for the remote avatar-video API.

    Provides the listing, upload, generation and polling operations used by
    the panel. Use as an async context manager or call aclose() when done.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        activity: ActivityLog,
        config: APIConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Source of the API key for every request
            activity: Transparency log receiving request/response/error events
            config: Endpoint configuration (defaults to the public API)
            http_client: Preconfigured httpx client; one is created and owned
                        by this instance when omitted
        """
        self.credentials = credentials
        self.activity = activity
        self.config = config or APIConfig()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.config.timeout)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def require_credential(self) -> str:
        """Return the stored credential.

        Raises:
            AuthenticationMissing: If the panel is locked
        """
        api_key = self.credentials.get()
        if not api_key:
            message = "No API key found. Unlock the panel with your key first."
            self.activity.record_error("Client", message)
            raise AuthenticationMissing(message)
        return api_key

    def _resolve_url(self, url: str, params: dict[str, Any] | None = None) -> str:
        if not url.startswith(("http://", "https://")):
            url = f"{self.config.base_url}{url}"
        return str(httpx.URL(url, params=params)) if params else url

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        check: bool = True,
    ) -> Any:
        """Send an authenticated request and return the parsed JSON body.

        Args:
            method: HTTP method
            url: Absolute URL or path relative to the API base URL
            json: JSON body
            content: Raw body bytes
            headers: Extra headers merged over the defaults
            params: Query parameters
            check: Raise RemoteApiError on non-2xx instead of returning the body

        Returns:
            Parsed JSON body

        Raises:
            AuthenticationMissing: If no credential is stored
            CredentialRejected: If the API answers 401 (credential is cleared)
            RemoteApiError: If the API answers non-2xx and check is set, or
                           the error body is not JSON
            TransportError: If the request fails below the HTTP layer
            MalformedResponse: If a 2xx body is not valid JSON
        """
        api_key = self.require_credential()

        target = self._resolve_url(url, params)
        self.activity.record_request_start(method, target)

        request_headers = {
            "X-Api-Key": api_key,
            "Accept": "application/json",
            **(headers or {}),
        }

        try:
            response = await self._http.request(
                method, target, json=json, content=content, headers=request_headers
            )
        except httpx.RequestError as e:
            message = str(e) or e.__class__.__name__
            self.activity.record_error("Network", message)
            raise TransportError(f"{method} {target} failed: {message}", e) from e

        status = response.status_code
        self.activity.record_request_end(method, target, status, response.is_success)

        try:
            body = response.json()
        except ValueError:
            body = None

        if status == 401:
            # A rejected key is never retried; force the panel back to locked
            self.credentials.clear()
            self.activity.record_error("Auth", "Credential rejected; panel locked")
            message = extract_error_message(body, response.text, status)
            raise CredentialRejected(f"Unauthorized: {message}", status)

        if not response.is_success and (check or body is None):
            raise RemoteApiError(extract_error_message(body, response.text, status), status)

        if body is None:
            message = f"{method} {target} returned a body that is not valid JSON"
            self.activity.record_error("Parse", message)
            raise MalformedResponse(message)

        return body

    async def list_voices(self) -> list[VoiceOption]:
        """Get available voices, custom voices first then by name."""
        body = await self.request("GET", "/v2/voices")
        voices = []
        for record in extract_records(body, "voices"):
            try:
                voices.append(VoiceOption.from_record(record))
            except ValueError as e:
                logger.debug(f"Skipping voice record: {e}")
        return sort_voices(voices)

    async def list_avatars(self) -> list[dict[str, Any]]:
        """Current-generation avatars and talking photos."""
        body = await self.request("GET", "/v2/avatars")
        return extract_records(body, "avatars") + extract_records(body, "talking_photos")

    async def list_avatar_groups(self) -> list[dict[str, Any]]:
        body = await self.request("GET", "/v2/avatar_group.list")
        return extract_records(body, "avatar_group_list", "groups")

    async def get_group_detail(self, group_id: str) -> list[dict[str, Any]]:
        """Looks belonging to one avatar group."""
        if not group_id:
            raise ValueError("group_id cannot be empty")
        body = await self.request("GET", f"/v2/avatar_group/{group_id}/avatars")
        return extract_records(body, "avatar_list", "avatars", "looks")

    async def list_legacy_talking_photos(self) -> list[dict[str, Any]]:
        body = await self.request("GET", "/v1/talking_photo.list")
        return extract_records(body, "talking_photos", "list")

    async def list_assets(self) -> list[dict[str, Any]]:
        body = await self.request("GET", "/v1/asset.list")
        return extract_records(body, "assets", "list")

    async def upload_asset(self, data: bytes, declared_mime_type: str | None = None) -> UploadResult:
        """Upload an image and return its identifiers.

        The Content-Type header is sniffed from the payload, overriding the
        declared type when they disagree.

        Raises:
            ValueError: If the payload is empty
            MalformedResponse: If the response carries no asset id
        """
        if not data:
            raise ValueError("Upload payload cannot be empty")

        content_type = resolve_content_type(data, declared_mime_type)
        if declared_mime_type and declared_mime_type != content_type:
            logger.info(f"Declared type {declared_mime_type} overridden by sniffed {content_type}")

        body = await self.request(
            "POST",
            self.config.upload_url,
            content=bytes(data),
            headers={"Content-Type": content_type},
        )
        payload = body.get("data") if isinstance(body, dict) else None
        if not isinstance(payload, dict) or not (payload.get("id") or payload.get("image_key")):
            message = "Upload response did not include an asset id"
            self.activity.record_error("Parse", message)
            raise MalformedResponse(message)

        return UploadResult(
            asset_id=str(payload.get("id") or payload.get("image_key")),
            image_key=payload.get("image_key"),
        )

    async def generate_video(self, job: GenerationJob) -> GenerationJob:
        """Submit a generation job to the endpoint matching its engine.

        Returns:
            The job with video_id set from the API response
        """
        path, payload = build_generation_request(job)
        body = await self.request(
            "POST", path, json=payload, headers={"Content-Type": "application/json"}
        )
        data = body.get("data") if isinstance(body, dict) else None
        video_id = data.get("video_id") if isinstance(data, dict) else None
        if not video_id:
            message = "Generation response did not include a video_id"
            self.activity.record_error("Parse", message)
            raise MalformedResponse(message)

        logger.info(f"Submitted {job.engine_variant} job {video_id}")
        return dataclasses.replace(job, video_id=video_id)

    async def poll_status(self, video_id: str) -> JobStatus:
        if not video_id:
            raise ValueError("video_id cannot be empty")
        body = await self.request("GET", "/v1/video_status.get", params={"video_id": video_id})
        return JobStatus.from_response(video_id, body if isinstance(body, dict) else {})
