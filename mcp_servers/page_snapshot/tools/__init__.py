"""
Page snapshot tools organized by domain.

- base: ToolContext, active-tab lookup, timeouts
- snapshot: take and search accessibility snapshots
- element: uid-addressed click/fill/hover/editor read
- page: page info, scroll, navigation, content, CSS-selector actions
"""

from .base import ToolContext, active_tab, bounded
from .element import click_element_by_uid, fill_element_by_uid, get_editor_value_by_uid, hover_element_by_uid
from .page import click_element, fill_form_field, get_page_content, get_page_info, navigate_to_url, scroll_page
from .snapshot import search_snapshot, take_snapshot

__all__ = [
    "ToolContext",
    "active_tab",
    "bounded",
    "click_element",
    "click_element_by_uid",
    "fill_element_by_uid",
    "fill_form_field",
    "get_editor_value_by_uid",
    "get_page_content",
    "get_page_info",
    "hover_element_by_uid",
    "navigate_to_url",
    "scroll_page",
    "search_snapshot",
    "take_snapshot",
]
