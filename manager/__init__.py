"""
Application state and domain services.
"""

from manager.orchestrator import WikiOrchestrator
from manager.page_tree import UNSET, PageDraft, PagePatch

__all__ = ["WikiOrchestrator", "PageDraft", "PagePatch", "UNSET"]
