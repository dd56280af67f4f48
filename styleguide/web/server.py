"""
FastAPI web server: JSON rendering boundary for the styleguide UI.

The browser owns the widgets; it posts hash and search-input events here
and draws whatever view comes back.  Event handlers are ``async def`` and
never await, so they run one at a time on the event loop and a search
change always lands before the next hash change is resolved.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from styleguide.catalog.models import CatalogResult, ConfigError, Section
from styleguide.catalog.serialization import (
    catalog_to_dict, component_to_dict, section_to_dict,
)
from styleguide.config import load_config, load_env
from styleguide.state import Styleguide, View


log = logging.getLogger("styleguide.server")

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="Styleguide")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── State (persists across requests) ───────────────────────────────

_styleguide: Styleguide | None = None


def use_styleguide(sg: Styleguide | None) -> None:
    """Install the state object the routes operate on (None = lazy load)."""
    global _styleguide
    _styleguide = sg


def _state() -> Styleguide:
    global _styleguide
    if _styleguide is None:
        load_env()
        try:
            _styleguide = Styleguide(load_config())
        except ConfigError as exc:
            log.error("Cannot load styleguide config: %s", exc)
            raise HTTPException(500, str(exc))
    return _styleguide


# ── Models ─────────────────────────────────────────────────────────

class HashRequest(BaseModel):
    hash: str = ""


class SearchRequest(BaseModel):
    query: str = ""


def view_to_dict(view: View, sg: Styleguide) -> dict:
    return {
        "mode": view.mode,
        "hash": sg.hash,
        "query": sg.query,
        "current_url": view.current_url,
        "content": [section_to_dict(s) for s in view.sections],
        "navigation": [_nav_entry(s) for s in view.navigation],
    }


def _nav_entry(s: Section) -> dict:
    return {
        "name": s.name,
        "is_opened": s.is_opened,
        "components": [{"url": c.url, "name": c.name} for c in s.components],
    }


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/api/view")
async def get_view():
    """Current view for the stored hash and search query."""
    sg = _state()
    return view_to_dict(sg.render(), sg)


@app.post("/api/hash")
async def change_hash(req: HashRequest):
    """The URL fragment changed."""
    sg = _state()
    sg.on_hash_change(req.hash)
    return view_to_dict(sg.render(), sg)


@app.post("/api/search")
async def change_search(req: SearchRequest):
    """The search input changed; an empty query clears the search."""
    sg = _state()
    sg.on_search_change(req.query)
    return view_to_dict(sg.render(), sg)


@app.post("/api/reload")
async def reload_config():
    """Rebuild both catalogs (hot reload after component or config edits)."""
    sg = _state()
    try:
        if sg.config is not None and getattr(sg.config, "source_file", None) is not None:
            sg.load(load_config(sg.config.source_file))
        else:
            sg.reload()
    except ConfigError as exc:
        raise HTTPException(400, str(exc))
    return catalog_to_dict(CatalogResult(sg.default_sections, sg.errors))


@app.get("/api/catalog")
async def get_catalog():
    """The unfiltered catalog plus any build errors."""
    sg = _state()
    return catalog_to_dict(CatalogResult(sg.default_sections, sg.errors))


@app.get("/api/components/{url:path}")
async def get_component(url: str):
    sg = _state()
    comp = sg.find_component(url)
    if comp is None:
        raise HTTPException(404, f"Unknown component '{url}'")
    return component_to_dict(comp)


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("styleguide.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
