from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pytest
import yaml
from fastapi.routing import APIRoute

from washboard.main import app
from washboard.presentation.routers import router


def openapi_path() -> Path:
    from washboard.infrastructure.config import settings
    return settings.openapi_path


def _load_openapi_yaml() -> dict[str, Any]:
    with openapi_path().open("r", encoding="utf-8") as f:
        doc = yaml.safe_load(f)
    assert isinstance(doc, dict)
    return doc


def _normalize_http_methods(methods: Iterable[str]) -> set[str]:
    return {m.lower() for m in methods}


def _is_public_api_route(route: APIRoute) -> bool:
    # Exclude docs/openapi endpoints if they exist
    return not route.path.startswith(("/docs", "/redoc", "/openapi"))


def _fastapi_methods_by_path() -> dict[str, set[str]]:
    methods: dict[str, set[str]] = defaultdict(set)
    for route in router.routes:
        if isinstance(route, APIRoute) and _is_public_api_route(route):
            methods[route.path] |= _normalize_http_methods(route.methods or set())
    for path_methods in methods.values():
        # FastAPI automatically includes HEAD for GET routes; OpenAPI often omits it.
        path_methods.discard("head")
    return methods


def test_app_serves_the_yaml_contract() -> None:
    assert app.openapi() == _load_openapi_yaml()


def test_all_fastapi_routes_are_declared_in_openapi_paths() -> None:
    paths: dict[str, Any] = app.openapi().get("paths", {})
    routes = _fastapi_methods_by_path()
    assert routes, "No API routes found on the washboard router"

    missing = sorted(path for path in routes if path not in paths)
    assert not missing, f"Routes missing from OpenAPI paths: {missing}"


def test_openapi_methods_match_fastapi_methods() -> None:
    paths: dict[str, Any] = app.openapi().get("paths", {})

    mismatches: list[str] = []
    for path, fastapi_methods in _fastapi_methods_by_path().items():
        path_item = paths.get(path, {})
        openapi_methods = {k for k in path_item if k in {"get", "post", "put", "patch", "delete", "options", "head"}}
        if openapi_methods != fastapi_methods:
            mismatches.append(f"{path}: fastapi={sorted(fastapi_methods)} openapi={sorted(openapi_methods)}")

    assert not mismatches, "Method mismatches:\n" + "\n".join(mismatches)


@pytest.mark.parametrize("schema_name", [
    "Reservation", "ReservationCreate", "TimeSlot", "CancelResult", "Profile", "AccessLogPage", "AccessSummary",
])
def test_openapi_declares_expected_component_schemas(schema_name: str) -> None:
    schemas = app.openapi().get("components", {}).get("schemas", {})
    assert schema_name in schemas, f"Missing components.schemas.{schema_name} in OpenAPI"


def test_time_slot_enum_matches_the_board() -> None:
    from washboard.core.entities.reservation import TimeSlot

    declared = app.openapi()["components"]["schemas"]["TimeSlot"]["enum"]
    assert declared == [slot.value for slot in TimeSlot]
