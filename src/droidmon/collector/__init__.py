"""Collectors that ship with droidmon."""

from droidmon.collector.android import new_android_collector


def register_builtin(registry) -> None:
    """Register every built-in collector with registry."""
    registry.register("android", True, new_android_collector)
