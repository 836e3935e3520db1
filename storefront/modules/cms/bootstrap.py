from storefront.modules.cms.services.page_meta import SET_PAGE_META_INFO


def append_store_name(page_info, ctx, info):
    """Suffix page titles with the configured store name."""
    store_name = ctx.config.get("shop", {}).get("name")
    title = page_info.get("title")
    if not store_name or not title or title.endswith(store_name):
        return None
    separator = ctx.config.get("cms", {}).get("titleSeparator", " | ")
    return {**page_info, "title": f"{title}{separator}{store_name}"}


def bootstrap(ctx):
    ctx.add_hook(SET_PAGE_META_INFO, "after", append_store_name)

    ctx.merge_config_schema(
        {
            "properties": {
                "cms": {
                    "type": "object",
                    "properties": {
                        "titleSeparator": {"type": "string"},
                    },
                },
            },
        }
    )
