"""Write the service's OpenAPI document to docs/openapi.json."""

import json
from pathlib import Path

from fastapi.openapi.utils import get_openapi

from pantry_chef.main import app


output = Path("docs/openapi.json")
output.parent.mkdir(parents=True, exist_ok=True)

openapi_schema = get_openapi(
    title=app.title,
    version=app.version,
    description=app.description,
    routes=app.routes,
)

with output.open("w") as f:
    json.dump(openapi_schema, f, indent=2)
