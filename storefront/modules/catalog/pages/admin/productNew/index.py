from storefront.modules.cms.services.page_meta import set_page_meta


def handler(request, ctx):
    set_page_meta(ctx, {"title": "Create a new product", "description": "Create a new product"})
