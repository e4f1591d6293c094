"""
EnderShare - temporary two-party container sharing with durable storage.

Two participants merge their private 27-slot containers into one shared
54-slot container, use it together, and later split it back, even when one
of them is offline at split time.

Example usage:
    from endershare import ShareService

    service = ShareService(gateway=host, store=store, scheduler=scheduler)
    service.start()
    ...
    service.stop()

CLI tools (after pip install):
    endershare-admin sessions --data-dir ./data
"""

from endershare.version import VERSION

__version__ = VERSION
__all__ = [
    "ShareService",
    "VERSION",
    "__version__",
]


def __getattr__(name: str):
    """Lazy import to keep configuration and tracing out of plain imports."""
    if name == "ShareService":
        from endershare.application.sharing.service import ShareService
        globals()["ShareService"] = ShareService  # Cache for subsequent accesses
        return ShareService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
