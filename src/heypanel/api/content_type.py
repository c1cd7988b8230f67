"""Content-Type detection for binary uploads.

The upload endpoint validates Content-Type against the actual bytes, and the
type reported by the operating system is often wrong (renamed files, missing
extensions). The leading "magic bytes" decide instead.
"""

DEFAULT_CONTENT_TYPE = "image/jpeg"

# (leading bytes, mime type), checked in order
SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF", "image/gif"),
    (b"RIFF", "image/webp"),
)


def resolve_content_type(data: bytes, declared_type: str | None = None) -> str:
    """Determine the Content-Type to send for an upload payload.

    Args:
        data: Upload payload (only the first 4 bytes are inspected)
        declared_type: Type reported by the caller, may be empty or wrong

    Returns:
        The sniffed type, else the declared type, else image/jpeg
    """
    head = bytes(data[:4])
    for signature, mime_type in SIGNATURES:
        if head.startswith(signature):
            return mime_type

    if declared_type and declared_type.strip():
        return declared_type.strip()
    return DEFAULT_CONTENT_TYPE
