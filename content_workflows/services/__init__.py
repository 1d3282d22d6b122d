"""Services injected into workflow contexts."""

from .log_sink import LogSink
from .taxonomy import (
    BaseTaxonomyResolver,
    ResolutionStatus,
    TaxonomyResolution,
    TaxonomyResolver,
)

__all__ = [
    "LogSink",
    "BaseTaxonomyResolver",
    "ResolutionStatus",
    "TaxonomyResolution",
    "TaxonomyResolver",
]
