"""Test utilities package."""

from tests.utils.cleanup import (
    cleanup_outer_infos,
    cleanup_project,
    cleanup_tenancy_cascade,
)

__all__ = [
    "cleanup_outer_infos",
    "cleanup_project",
    "cleanup_tenancy_cascade",
]
