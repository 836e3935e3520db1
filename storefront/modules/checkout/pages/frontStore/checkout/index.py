from storefront.modules.cms.services.page_meta import set_page_meta


def handler(request, ctx):
    set_page_meta(ctx, {"title": "Checkout", "description": "Checkout"})
    ctx.data["showShippingNote"] = ctx.config.get("checkout", {}).get("showShippingNote", False)
