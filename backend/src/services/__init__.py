"""Services package"""

from .record_normalizer import RecordNormalizer
from .override_reconciler import OverrideReconciler, apply_overrides
from .filter_pipeline import derive_visible_set
from .photo_store import PhotoStore

__all__ = ["RecordNormalizer", "OverrideReconciler", "apply_overrides", "derive_visible_set", "PhotoStore"]
