"""Command-line client for a running gymticks server.

Usage:
    python -m gymticks.client routes
    python -m gymticks.client add "blue arete" --section AB3 --color blue --grade 10- --tick ascent
    python -m gymticks.client tick <route-id> attempt
    python -m gymticks.client export backup.json
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Any

import requests
from dotenv import load_dotenv

DEFAULT_URL = "http://127.0.0.1:8000"


class ClientError(RuntimeError):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class GymticksClient:
    def __init__(self, base_url: str = DEFAULT_URL, session: requests.Session | None = None, timeout: int = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        resp = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        if resp.status_code != 200:
            raise ClientError(resp.status_code, resp.text)
        return resp

    def routes(self, compact: bool = False) -> list[dict[str, Any]]:
        return self._request("GET", "/routes", params={"compact": str(compact).lower()}).json()

    def add_route(self, title: str, **fields: Any) -> dict[str, Any]:
        payload = {"title": title, **{k: v for k, v in fields.items() if v is not None}}
        return self._request("POST", "/routes", json=payload).json()

    def edit_route(self, route_id: str, **fields: Any) -> bool:
        payload = {k: v for k, v in fields.items() if v is not None}
        return bool(self._request("PUT", f"/routes/{route_id}", json=payload).json().get("ok"))

    def tick(self, route_id: str, kind: str) -> bool:
        return bool(self._request("POST", f"/routes/{route_id}/ticks", json={"kind": kind}).json().get("ok"))

    def retire(self, route_id: str) -> bool:
        return bool(self._request("POST", f"/routes/{route_id}/retire").json().get("ok"))

    def stats(self) -> dict[str, int]:
        return self._request("GET", "/stats").json()

    def export_snapshot(self) -> str:
        return self._request("GET", "/export").text

    def import_snapshot(self, text: str) -> bool:
        resp = self._request(
            "POST", "/import", data=text.encode("utf-8"), headers={"Content-Type": "application/json"}
        )
        return bool(resp.json().get("ok"))


def print_routes(groups: list[dict[str, Any]]) -> None:
    for block in groups:
        print(f"[{block['section']}]")
        for route in block["routes"]:
            mark = "*" if route["completed"] else " "
            print(
                f" {mark} {route['color']:<7} {route['grade']:<4} {route['title']:<24} "
                f"{route['ascents']:<16} {route['attempts']}  {route['id']}"
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Climbing gym route log")
    parser.add_argument("--url", default=os.getenv("GYMTICKS_URL", DEFAULT_URL), help="Server base URL")
    sub = parser.add_subparsers(dest="command", required=True)

    routes = sub.add_parser("routes", help="List active routes with stats")
    routes.add_argument("--compact", action="store_true", help="Use m/h/d time suffixes")

    for name, help_text in [("add", "Create a route"), ("edit", "Edit a route")]:
        p = sub.add_parser(name, help=help_text)
        if name == "edit":
            p.add_argument("route_id")
            p.add_argument("--title")
        else:
            p.add_argument("title")
            p.add_argument("--tick", choices=["ascent", "attempt"], help="Record a first tick right away")
        p.add_argument("--color")
        p.add_argument("--section")
        p.add_argument("--grade")

    tick = sub.add_parser("tick", help="Record an ascent or attempt")
    tick.add_argument("route_id")
    tick.add_argument("kind", choices=["ascent", "attempt"])

    retire = sub.add_parser("retire", help="Hide a route from the active list")
    retire.add_argument("route_id")

    sub.add_parser("stats", help="Show sends today and in total")

    export = sub.add_parser("export", help="Save the whole snapshot to a file")
    export.add_argument("file", type=Path)

    imp = sub.add_parser("import", help="Replace the snapshot with a file's contents")
    imp.add_argument("file", type=Path)
    return parser


def main(argv: list[str] | None = None, client: GymticksClient | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    client = client or GymticksClient(args.url)

    try:
        if args.command == "routes":
            print_routes(client.routes(compact=args.compact))
        elif args.command == "add":
            route = client.add_route(
                args.title, color=args.color, section=args.section, grade=args.grade, tick=args.tick
            )
            print(route["id"])
        elif args.command == "edit":
            fields = {"title": args.title, "color": args.color, "section": args.section, "grade": args.grade}
            if not client.edit_route(args.route_id, **fields):
                print(f"No route {args.route_id}", file=sys.stderr)
                return 1
        elif args.command == "tick":
            if not client.tick(args.route_id, args.kind):
                print(f"No route {args.route_id}", file=sys.stderr)
                return 1
        elif args.command == "retire":
            if not client.retire(args.route_id):
                print(f"No route {args.route_id}", file=sys.stderr)
                return 1
        elif args.command == "stats":
            totals = client.stats()
            print(f"Sends Today  {totals['sends_today']}")
            print(f"Sends Total  {totals['sends_total']}")
        elif args.command == "export":
            args.file.write_text(client.export_snapshot())
        elif args.command == "import":
            if not client.import_snapshot(args.file.read_text()):
                print(f"{args.file} is not a usable snapshot; nothing changed", file=sys.stderr)
                return 1
    except (ClientError, requests.RequestException) as err:
        print(f"Request failed: {err}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
