import json
import os
from pathlib import Path

from zylorb.common.config import Config, DatabaseConfig
from zylorb.web.main import create_app
from zylorb.web.settings import APISettings

# The schema does not depend on the secret, but settings refuse to load without one
settings = APISettings(jwt_secret=os.environ.get("ZYLORB_API_JWT_SECRET", "openapi-docs-only"))
app = create_app(settings=settings, config=Config(database=DatabaseConfig(backend="memory")))

Path("docs").mkdir(exist_ok=True)
with open("docs/openapi.json", "w", encoding="utf-8") as f:
    json.dump(app.openapi(), f, indent=2, ensure_ascii=False)
print("wrote docs/openapi.json")

with open("docs/openapi.json", encoding="utf-8") as f:
    spec = json.load(f)

md = ["# ZYLORB API\n"]
for tag in spec.get("tags", []):
    md.append(f"## {tag['name']}\n{tag.get('description', '')}\n")
    for path, methods in spec.get("paths", {}).items():
        for verb, op in methods.items():
            if tag["name"] not in op.get("tags", []):
                continue
            summary = op.get("summary", "")
            md.append(f"- `{verb.upper()}` `{path}`: {summary}")
            for status, response in sorted(op.get("responses", {}).items()):
                md.append(f"  - `{status}` {response.get('description', '')}")
    md.append("")

with open("docs/openapi-endpoints.md", "w", encoding="utf-8") as f:
    f.write("\n".join(md))
print("wrote docs/openapi-endpoints.md")
