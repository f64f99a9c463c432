from .generate import DOCS_HTML_ARTIFACT, DocsGenerateStep

__all__ = ["DOCS_HTML_ARTIFACT", "DocsGenerateStep"]
