# Services package
from .resolver import resolve_app_name, BUILTIN_APPS
from .reconciler import (
    ReconcileResult,
    reconcile_link,
    cleanup_numeric_links,
    link_app_screenshots,
)

__all__ = [
    'resolve_app_name',
    'BUILTIN_APPS',
    'ReconcileResult',
    'reconcile_link',
    'cleanup_numeric_links',
    'link_app_screenshots',
]
