from collections.abc import Callable
from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

OPENAPI_TAGS_METADATA = [
    {
        "name": "tools",
        "description": "Remote tool callbacks invoked by the agent runner during a session.",
    },
    {
        "name": "status",
        "description": "Out-of-band session status notifications.",
    },
]

API_DESCRIPTION = """
## Agent Runner Callback API

Endpoints the agent runner calls back into while it executes sessions.

### Auth model
Every callback carries an HMAC-SHA256 envelope:

- `X-Signature`: `sha256=` + hex HMAC of `{timestamp}.{nonce}.{raw body}`
- `X-Timestamp`: unix seconds, accepted within 120 seconds of server time
- `X-Nonce`: 8-128 characters from `[A-Za-z0-9_-]`, accepted once

The envelope is checked against the raw body before the payload is parsed.
Without a shared secret every callback is rejected, unless `ALLOW_UNSIGNED_CALLBACKS`
is explicitly enabled for local development.

### Error format
Authentication and validation errors are returned as:

```json
{"detail": {"code": "SOME_CODE", "message": "Human readable message"}}
```

Tool failures are reported in the tool response itself as `{"success": false, "error": "..."}`.
"""

CALLBACK_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {
        "description": "Missing, stale, malformed, forged or replayed signature envelope.",
        "content": {
            "application/json": {
                "example": {
                    "detail": {
                        "code": "SIGNATURE_INVALID",
                        "message": "Invalid HMAC signature.",
                    }
                }
            }
        },
    },
    422: {
        "description": "Validation error on the callback payload.",
        "content": {
            "application/json": {
                "example": {
                    "detail": {
                        "code": "VALIDATION_ERROR",
                        "message": "status: Field required",
                    }
                }
            }
        },
    },
}


def install_custom_openapi(app: FastAPI) -> Callable[[], dict[str, Any]]:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = get_openapi(
            title=app.title,
            version=app.version,
            summary=app.summary,
            description=app.description,
            routes=app.routes,
            tags=OPENAPI_TAGS_METADATA,
            servers=app.servers,
            license_info=app.license_info,
        )

        schema.setdefault("components", {}).setdefault("securitySchemes", {})["hmacSignature"] = {
            "type": "apiKey",
            "in": "header",
            "name": "X-Signature",
            "description": "HMAC-SHA256 signature; sent together with X-Timestamp and X-Nonce.",
        }

        app.openapi_schema = schema
        return app.openapi_schema

    return custom_openapi
