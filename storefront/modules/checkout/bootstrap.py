from storefront.modules.checkout.services.cart_fields import (
    CART_FIELDS,
    CART_ITEM_FIELDS,
    register_cart_base_fields,
    register_cart_item_base_fields,
    sort_fields,
)


def bootstrap(ctx):
    ctx.add_processor(CART_FIELDS, register_cart_base_fields, 0)
    ctx.add_processor(CART_ITEM_FIELDS, register_cart_item_base_fields, 0)

    ctx.add_final_processor(CART_FIELDS, sort_fields)
    ctx.add_final_processor(CART_ITEM_FIELDS, sort_fields)

    ctx.merge_config_schema(
        {
            "properties": {
                "checkout": {
                    "type": "object",
                    "properties": {
                        "showShippingNote": {"type": "boolean"},
                    },
                },
            },
        }
    )
