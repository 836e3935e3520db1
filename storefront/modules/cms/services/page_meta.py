"""
Page meta information (title, description) collected while a page route's
handlers run. ``set_page_meta`` goes through the hook table so extensions
can rewrite titles and descriptions.
"""

from __future__ import annotations

from typing import Any

SET_PAGE_META_INFO = "setPageMetaInfo"


def set_page_meta_info(ctx: Any, info: dict[str, Any]) -> dict[str, Any]:
    page_info = {**ctx.data.get("pageInfo", {}), **info}
    ctx.data["pageInfo"] = page_info
    return page_info


def set_page_meta(ctx: Any, info: dict[str, Any]) -> dict[str, Any]:
    """Store *info* as the page's meta information, applying every hook."""
    page_info = ctx.kernel.hooks.call(SET_PAGE_META_INFO, set_page_meta_info, ctx, info)
    ctx.data["pageInfo"] = page_info
    return page_info


def get_page_meta(ctx: Any) -> dict[str, Any]:
    return ctx.data.get("pageInfo", {})
