from .build_test import NATIVE_TARGET_ARTIFACT, NativeBuildTestStep

__all__ = ["NATIVE_TARGET_ARTIFACT", "NativeBuildTestStep"]
