"""Backend registry for image-source backends.

This module provides the registry mapping service names to their
BackendDescriptor and re-exports the base types for convenience.
"""

from collections.abc import Iterable

from .base import (
    API_KEY_SUFFIX,
    DESCRIPTION_REGEXP,
    IMAGE_QUERIES_SUFFIX,
    BackendDescriptor,
    BackendError,
    DuplicateBackendError,
)

__all__ = [
    "API_KEY_SUFFIX",
    "BACKENDS",
    "DESCRIPTION_REGEXP",
    "IMAGE_QUERIES_SUFFIX",
    "BackendDescriptor",
    "BackendError",
    "DuplicateBackendError",
    "check_namespaces",
    "get_available_backends",
    "get_backend",
    "register_backend",
]

# Backend registry - populated by imports below
BACKENDS: dict[str, BackendDescriptor] = {}


def register_backend(descriptor: BackendDescriptor) -> BackendDescriptor:
    """Register a backend descriptor under its service name.

    Args:
        descriptor: Descriptor to register.

    Returns:
        The same descriptor, unmodified.

    Raises:
        DuplicateBackendError: If another descriptor already uses this service name.
    """
    existing = BACKENDS.get(descriptor.service_name)
    if existing is descriptor:
        return descriptor
    if existing is not None:
        msg = f"Backend '{descriptor.service_name}' is already registered"
        raise DuplicateBackendError(msg)
    check_namespaces([*BACKENDS.values(), descriptor])
    BACKENDS[descriptor.service_name] = descriptor
    return descriptor


def check_namespaces(descriptors: Iterable[BackendDescriptor] | None = None) -> None:
    """Ensure no two descriptors share a preference namespace or key.

    Args:
        descriptors: Descriptors to check. Defaults to the registered ones.

    Raises:
        DuplicateBackendError: On the first collision found.
    """
    owners: dict[str, BackendDescriptor] = {}
    for descriptor in BACKENDS.values() if descriptors is None else descriptors:
        for key in (descriptor.namespace(), *descriptor.preference_keys):
            owner = owners.setdefault(key, descriptor)
            if owner is not descriptor:
                msg = f"'{key}' is claimed by both '{owner.display_name}' and '{descriptor.display_name}'"
                raise DuplicateBackendError(msg)


def get_backend(name: str) -> BackendDescriptor:
    """Get a backend descriptor by name.

    Args:
        name: Backend identifier.

    Returns:
        The registered descriptor.

    Raises:
        KeyError: If the backend is not registered.
    """
    if name not in BACKENDS:
        available = ", ".join(BACKENDS.keys())
        msg = f"Unknown backend '{name}'. Available: {available}"
        raise KeyError(msg)
    return BACKENDS[name]


def get_available_backends() -> list[str]:
    """Get list of all registered backend names.

    Returns:
        List of backend names.
    """
    return list(BACKENDS.keys())


# Import backends to register them
# Cyclic import is intentional: backends import register_backend from here
# pylint: disable=wrong-import-position,cyclic-import
from . import pexels, wallhaven  # noqa: E402, F401

check_namespaces()
