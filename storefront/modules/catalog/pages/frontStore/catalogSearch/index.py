from storefront.modules.cms.services.page_meta import set_page_meta


def handler(request, ctx):
    keyword = request.query_params.get("keyword", "")
    set_page_meta(ctx, {"title": f"Search results for \"{keyword}\"" if keyword else "Search"})
