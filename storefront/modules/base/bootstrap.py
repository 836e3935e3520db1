"""Shop-wide configuration schema."""


def bootstrap(ctx):
    ctx.merge_config_schema(
        {
            "properties": {
                "shop": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "currency": {"type": "string"},
                        "language": {"type": "string"},
                        "weightUnit": {"enum": ["kg", "lb"]},
                        "homeUrl": {"type": "string"},
                    },
                },
            },
        }
    )
