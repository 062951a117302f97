"""HTTP static-file skill provider for instructkit.

This package provides :class:`HTTPStaticFileSkillProvider`, a concrete
implementation of :class:`~instructkit_core.SkillProvider` that fetches
skill bundles from any static HTTP file host (S3, Azure Blob, CDN,
GitHub Pages, Nginx, etc.).

Install::

    pip install instructkit
"""

from instructkit_http.static import HTTPStaticFileSkillProvider

__all__ = ["HTTPStaticFileSkillProvider"]
