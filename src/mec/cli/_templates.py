"""Scaffolding templates: plain Python strings for ``mec init`` and ``mec create``.

No template engine here. ``mec create`` templates use ``str.format()``
with ``{name}`` (doubled braces are literal).
"""

# ---------------------------------------------------------------------------
# mec init: application skeleton
# ---------------------------------------------------------------------------

APP_PY = """\
from mec import App, AppConfig
from mec.config import load_settings

app = App(AppConfig.from_settings(load_settings("config")))

# Root view
app.add_client_view("/", "mec", title="Mec")


if __name__ == "__main__":
    app.run()
"""

VIEW_PY = """\
def render(request):
    return \"\"\"
      <style>
      * {
        font-family: sans-serif;
        text-align: center;
      }
      .logo {
        margin-top: 200px;
      }
      .logo img {
        width: 600px;
      }
      </style>
      <div class="logo">
        <img src="/static/mec.svg" alt="Mec logo" />
        <h1>Welcome to the Mec Framework!</h1>
        <p>Edit this component in <code>views/mec.py</code> to add your logic.</p>
        <mec-sample></mec-sample>
      </div>
    \"\"\"
"""

COMPONENT_JS = """\
import { html, MecComponent } from "mec";

export class MecSample extends MecComponent {
  static properties = {};

  render() {
    return html`
      <div>
        <h1>Mec Sample</h1>
      </div>
    `;
  }
}

customElements.define("mec-sample", MecSample);
"""

LOGO_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 240 80" width="600">
  <rect width="240" height="80" rx="12" fill="#1f2937"/>
  <text x="120" y="54" font-family="sans-serif" font-size="40" font-weight="700"
        fill="#f9fafb" text-anchor="middle">mec</text>
</svg>
"""

HEALTH_ROUTE_PY = """\
from mec import AppContext


async def handler(ctx: AppContext):
    return {"status": "ok", "models": sorted(ctx.models)}
"""

DEFAULT_JSON = """\
{
  "server": {
    "port": 9000,
    "routes_dir": "routes",
    "gql": false
  },
  "database": {
    "connection_uri": "sqlite:///app.db"
  }
}
"""

PACKAGE_JSON = """\
{
  "name": "mec-app",
  "private": true,
  "description": "Browser libraries served by mec at /_framework",
  "dependencies": {
    "@lit-labs/ssr-client": "^1.1.7",
    "@webcomponents/template-shadowroot": "^0.2.1",
    "lit": "^3.1.2"
  }
}
"""

GITIGNORE = """\
node_modules/
__pycache__/
.mec/
*.log
app.db
"""

# ---------------------------------------------------------------------------
# mec create: single-file scaffolds
# ---------------------------------------------------------------------------

MODEL_PY = """\
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class {class_name}:
    id: int
    title: str


class {class_name}Model:
    def __init__(self, db):
        self.db = db

    async def all(self):
        return await self.db.fetch({class_name}, "SELECT * FROM {name}")

    async def add(self, title):
        return await self.db.execute("INSERT INTO {name} (title) VALUES (?)", title)


async def define(ctx):
    await ctx.db.execute_script(
        "CREATE TABLE IF NOT EXISTS {name} (id INTEGER PRIMARY KEY, title TEXT NOT NULL)"
    )
    return {class_name}Model(ctx.db)
"""

ROUTE_PY = """\
from mec import Request


async def handler(request: Request):
    return {{"route": "{name}", "path": request.path}}
"""

GQL_PY = """\
type_defs = \"\"\"
  type {class_name} {{
    id: ID!
    title: String
  }}

  type Query {{
    {name}: [{class_name}]
  }}
\"\"\"


async def resolve_{name}(obj, info):
    ctx = info.context["ctx"]
    model = ctx.models.get("{name}")
    return await model.all() if model else []


resolvers = {{
    "Query": {{"{name}": resolve_{name}}},
}}
"""

CLIENT_VIEW_PY = """\
def render(request, response):
    return \"\"\"
      <div>
        <h1>{name}</h1>
        <p>Edit this view in <code>views/{name}.py</code>.</p>
      </div>
    \"\"\"
"""

# scaffold kind -> (template, destination directory parts, file suffix)
SCAFFOLDS: dict[str, tuple[str, tuple[str, ...], str]] = {
    "model": (MODEL_PY, ("models",), ".py"),
    "route": (ROUTE_PY, ("routes", "api"), ".py"),
    "gql": (GQL_PY, ("routes", "gql"), ".gql.py"),
    "clientview": (CLIENT_VIEW_PY, ("views",), ".py"),
}
