"""
Styleguide: entry point.

Usage:
    python -m styleguide serve                    # web server on :8000
    python -m styleguide serve --port 3000 --config path/to/styleguide.json
    python -m styleguide list                     # print the catalog
    python -m styleguide list --query butt        # print search results
"""

import argparse
import logging
import os
import sys

from styleguide.catalog.models import ConfigError


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="styleguide", description="Browse documented UI components")
    p.add_argument("--config", default=None, help="Path to styleguide.json")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd")

    sv = sub.add_parser("serve", help="Start the web server")
    sv.add_argument("--host", default="127.0.0.1", help="Host to bind")
    sv.add_argument("--port", type=int, default=8000, help="Port to bind")

    ls = sub.add_parser("list", help="Print sections, components and build errors")
    ls.add_argument("--query", default="", help="Only show components matching this search")

    return p


def _list(config_file, query: str) -> int:
    from styleguide.config import load_config
    from styleguide.state import Styleguide

    try:
        sg = Styleguide(load_config(config_file))
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 1

    sg.on_search_change(query)
    if not sg.sections:
        print("No components found.")
    for section in sg.sections:
        print(section.name)
        for comp in section.components:
            print(f"  {comp.name:<30} #{comp.url}  ({len(comp.tests)} tests)")
    for err in sg.errors:
        print(f"! {err}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from styleguide.config import CONFIG_ENV, load_env
    load_env()
    if args.config:
        os.environ[CONFIG_ENV] = os.path.abspath(args.config)

    if args.cmd == "list":
        return _list(args.config, args.query)

    from styleguide.web.server import main as serve
    serve(host=getattr(args, "host", "127.0.0.1"), port=getattr(args, "port", 8000))
    return 0


if __name__ == "__main__":
    sys.exit(main())
