from storefront.modules.cms.services.page_meta import set_page_meta


def handler(request, ctx):
    shop = ctx.config.get("shop", {})
    set_page_meta(ctx, {"title": "Home page", "description": shop.get("name", "")})
