"""Response envelope shared by the routers: {"status": "success", "data": ...}."""

from typing import Any

from pydantic import BaseModel


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, (list, tuple)):
        return [_dump(v) for v in value]
    return value


def success(data: Any) -> dict:
    return {"status": "success", "data": _dump(data)}


def error(message: str) -> dict:
    return {"status": "error", "message": message}
