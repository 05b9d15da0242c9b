"""Command-line client for the route assistant."""

from __future__ import annotations

import argparse
import json

import httpx


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chat with the route assistant")
    parser.add_argument("query", help="User message, e.g. 从深圳湾科技园到龙华大浪")
    parser.add_argument("--agent-url", default="http://localhost:7002", help="Agent server base URL")
    parser.add_argument("--session", default=None, help="Session id to continue a conversation")
    parser.add_argument("--timeout", type=float, default=120.0, help="Request timeout seconds")
    parser.add_argument("--verbose", action="store_true", help="Print tool calls, map data and trace id")
    return parser


def summarize_map_data(map_data: dict) -> list[str]:
    lines: list[str] = []
    route = map_data.get("route")
    if route:
        lines.append(
            f"route: {route['distance'] / 1000:.1f} km, {round(route['duration'] / 60)} min, "
            f"{len(route['polyline'])} points"
        )
    for poi in map_data.get("pois") or []:
        lines.append(f"poi: {poi['name']} ({poi.get('rating') or '-'}) {poi['location']}")
    for marker in map_data.get("markers") or []:
        lines.append(f"marker: {marker['name']} {marker['location']}")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    url = f"{args.agent_url}/v1/chat"
    payload: dict = {"messages": [{"role": "user", "content": args.query}]}
    if args.session:
        payload["session_id"] = args.session

    # Avoid inheriting system proxy settings that can break localhost calls.
    try:
        with httpx.Client(timeout=args.timeout, trust_env=False) as client:
            resp = client.post(url, json=payload)
    except httpx.ReadTimeout:
        print("Request timed out. The server may still be processing the request.")
        print("Try again with a longer timeout, e.g. --timeout 300")
        return 1
    if resp.status_code >= 400:
        print(f"Request failed: {resp.status_code}")
        print(resp.text)
        return 1

    data = resp.json()
    print(data.get("content", ""))
    print(f"\n(session: {data.get('session_id')})")

    if args.verbose:
        print("\n--- trace_id ---")
        print(data.get("trace_id"))
        print("\n--- tool_calls ---")
        print(json.dumps(data.get("tool_calls", []), ensure_ascii=False, indent=2))
        print("\n--- map_data ---")
        for line in summarize_map_data(data.get("map_data") or {}):
            print(line)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
