from storefront.modules.catalog.services.filters import (
    PRODUCT_COLLECTION_FILTERS,
    dedupe_filters,
    register_default_filters,
)


def bootstrap(ctx):
    ctx.add_processor(PRODUCT_COLLECTION_FILTERS, register_default_filters, 0)
    ctx.add_final_processor(PRODUCT_COLLECTION_FILTERS, dedupe_filters)

    ctx.merge_config_schema(
        {
            "properties": {
                "catalog": {
                    "type": "object",
                    "properties": {
                        "product": {
                            "type": "object",
                            "properties": {
                                "image": {
                                    "type": "object",
                                    "properties": {
                                        "width": {"type": "integer"},
                                        "height": {"type": "integer"},
                                    },
                                },
                            },
                        },
                        "showOutOfStockProduct": {"type": "boolean"},
                    },
                },
            },
        }
    )
