"""heypanel - operator control panel for an avatar-video generation API."""

__version__ = "0.1.0"
__all__ = ["open_services"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "open_services":
        from .services import open_services

        return open_services
    raise AttributeError(f"module 'heypanel' has no attribute {name!r}")
