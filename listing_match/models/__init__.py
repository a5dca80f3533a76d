from .preference import Base, PropertyFeature, UserPropertyRequirement, utc_now
from .property import SavedProperty, PropertyAnalysis
from .comparison import PropertyComparison, ComparisonProperty, ComparisonNote

__all__ = [
    "Base",
    "PropertyFeature",
    "UserPropertyRequirement",
    "SavedProperty",
    "PropertyAnalysis",
    "PropertyComparison",
    "ComparisonProperty",
    "ComparisonNote",
    "utc_now",
]
