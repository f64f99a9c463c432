from .build import DEMO_DIST_ARTIFACT, DemoBuildStep

__all__ = ["DEMO_DIST_ARTIFACT", "DemoBuildStep"]
