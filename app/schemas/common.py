from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request schema accepting camelCase (browser) or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def changes(self, nullable: Iterable[str] = ()) -> dict[str, Any]:
        """
        Fields the client actually sent, for a partial update.

        An explicit null is kept only for fields listed in nullable
        (e.g. clearing a member's plan); elsewhere it is dropped.
        """
        allowed_null = set(nullable)
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in allowed_null
        }


def success_response(data: Any = None, message: str | None = None, **extra: Any) -> dict:
    """Build the ``{success: true, data, ...}`` envelope returned by every endpoint."""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def error_response(error: str, code: str, **extra: Any) -> dict:
    """Build the ``{success: false, error, code, ...}`` envelope."""
    return {"success": False, "error": error, "code": code, **extra}
