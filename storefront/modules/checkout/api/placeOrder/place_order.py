from storefront.modules.checkout.services.cart_fields import CART_FIELDS, CART_ITEM_FIELDS, compute_cart


async def handler(request, ctx):
    registry = ctx.kernel.registry
    cart_fields = await registry.run_processors(CART_FIELDS, [])
    item_fields = await registry.run_processors(CART_ITEM_FIELDS, [])
    cart = compute_cart(cart_fields, item_fields, ctx.data.pop("payload"))

    ctx.status_code = 201
    ctx.data["cart"] = {
        key: [{k: str(v) for k, v in item.items()} for item in value] if key == "items" else str(value)
        for key, value in cart.items()
    }
