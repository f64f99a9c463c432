from .build_test import BROWSER_PKG_ARTIFACT, BrowserBuildTestStep, browser_build_only

__all__ = ["BROWSER_PKG_ARTIFACT", "BrowserBuildTestStep", "browser_build_only"]
