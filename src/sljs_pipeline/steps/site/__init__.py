from .assemble import SITE_DIR_ARTIFACT, AssemblyReport, SiteAssembleStep, assemble_site

__all__ = ["SITE_DIR_ARTIFACT", "AssemblyReport", "SiteAssembleStep", "assemble_site"]
