from storefront.modules.catalog.services.filters import PRODUCT_COLLECTION_FILTERS, build_filters_from_query


async def handler(request, ctx):
    filters = await ctx.kernel.registry.run_processors(PRODUCT_COLLECTION_FILTERS, [])
    ctx.data["filters"] = build_filters_from_query(filters, dict(request.query_params))
