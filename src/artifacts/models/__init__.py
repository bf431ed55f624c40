"""Model namespace for covagg manifests and reports."""

from artifacts.models.records import ArtifactRecord
from artifacts.models.report import CoverageReport

__all__ = ["ArtifactRecord", "CoverageReport"]
