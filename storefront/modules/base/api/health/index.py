def handler(request, ctx):
    ctx.data["status"] = "ok"
    ctx.data["locked"] = ctx.kernel.is_locked
