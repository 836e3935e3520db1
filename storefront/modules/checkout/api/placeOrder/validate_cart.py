from pydantic import ValidationError

from storefront.exception_handlers import create_error_response
from storefront.modules.checkout.schemas import CartInput


async def handler(request, ctx):
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    try:
        cart = CartInput.model_validate(payload)
    except ValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]) or "body", "message": error["msg"]}
            for error in exc.errors()
        ]
        return create_error_response(
            400,
            "Cart must contain items with sku and price",
            error_code="BAD_REQUEST",
            details={"validation_errors": errors},
            path=request.url.path,
        )
    ctx.data["payload"] = cart.model_dump()
