#!/usr/bin/env python3
"""
Generate JSON Schemas, YAML variants, and OpenAPI from Pydantic models.

Outputs under src/specs/:
 - schemas/*.json (and *.yaml)
 - openapi.yaml and openapi.json
"""
from __future__ import annotations

import json
import re
import sys
from pathlib import Path

try:
    import yaml  # type: ignore
except Exception as exc:  # pragma: no cover
    print("PyYAML is required: pip install pyyaml", file=sys.stderr)
    raise


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SPECS = SRC / "specs"
SCHEMAS_DIR = SPECS / "schemas"

sys.path.insert(0, str(ROOT))

from src.specs.models import SCHEMA_MODELS  # noqa: E402
from src.specs.common.error_response_spec import ErrorResponse  # noqa: E402
from src.specs.routes_registry import ROUTES, RouteDef  # noqa: E402


def write_json_yaml(obj: dict, json_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with json_path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)
    yaml_path = json_path.with_suffix(".yaml")
    with yaml_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False)


def generate_model_schemas() -> None:
    for filename, model in SCHEMA_MODELS.items():
        schema = model.model_json_schema()
        write_json_yaml(schema, SCHEMAS_DIR / filename)


def _ref(model) -> dict:
    return {"$ref": f"#/components/schemas/{model.__name__}"}


def _json_content(model) -> dict:
    return {"application/json": {"schema": _ref(model)}}


def build_operation(route: RouteDef) -> dict:
    params = [
        {"in": "path", "name": name, "schema": {"type": "string"}, "required": True}
        for name in re.findall(r"{(\w+)}", route.path)
    ]
    params += [
        {"in": "query", "name": name, "schema": {"type": "string"}, "required": False}
        for name in route.query
    ]
    responses: dict = {}
    if route.response_model is not None:
        responses[str(route.status)] = {"description": route.summary, "content": _json_content(route.response_model)}
    else:
        responses[str(route.status)] = {"description": route.summary}
    if route.admin:
        responses["302"] = {"description": "No signed-in session; redirect to the login entry point"}
    for status, description in route.errors.items():
        responses[str(status)] = {"description": description, "content": _json_content(ErrorResponse)}

    op: dict = {
        "summary": route.summary,
        "operationId": route.operation_id,
        "parameters": params,
        "responses": responses,
    }
    if route.request_model is not None:
        op["requestBody"] = {"required": True, "content": _json_content(route.request_model)}
    if route.admin:
        op["tags"] = ["admin"]
    return op


def build_openapi() -> dict:
    # Inline the model schemas as OpenAPI components
    components = {"schemas": {}}
    for model in list(SCHEMA_MODELS.values()) + [ErrorResponse]:
        schema = model.model_json_schema(ref_template="#/components/schemas/{model}")
        for name, sub in schema.pop("$defs", {}).items():
            components["schemas"].setdefault(name, sub)
        components["schemas"][model.__name__] = schema

    paths: dict = {}
    for route in ROUTES:
        paths.setdefault(route.path, {})[route.method] = build_operation(route)

    spec = {
        "openapi": "3.0.3",
        "info": {
            "title": "Blog Functions API",
            "version": "0.1.0",
            "description": "HTTP endpoints exposed by the blog Azure Functions app.",
        },
        "servers": [
            {"url": "http://localhost:7071/api", "description": "Local Functions host"}
        ],
        "paths": paths,
        "components": components,
    }
    return spec


def generate_openapi() -> None:
    spec = build_openapi()
    write_json_yaml(spec, SPECS / "openapi.json")


def main() -> None:
    generate_model_schemas()
    generate_openapi()
    print("Specs generated under src/specs/")


if __name__ == "__main__":
    main()
