from storefront.modules.cms.services.page_meta import set_page_meta


def handler(request, ctx):
    set_page_meta(ctx, {"title": "Widgets", "description": "Widgets"})
    ctx.data["filtersFromUrl"] = [
        {"key": key, "value": value} for key, value in request.query_params.items() if key not in ("page", "limit")
    ]
