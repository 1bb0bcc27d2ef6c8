"""Local CLI for the gateway.

Usage examples:
- JSON string input:
  python cli.py "{\"task\":\"ask_radiology\",\"payload\":{\"question\":\"hi\"}}"

- JSON file input (prefix with @):
  python cli.py @request.json

- English prompts, pretty print:
  python cli.py @request.json --lang en --pretty

- Show the prompt pair only (no provider call):
  python cli.py @request.json --prompts-only

Notes:
- The request goes through the same handler as the deployed function,
  including rate limiting, size checks and model fallback.
"""
import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from src.aigateway.gateway import Gateway
from src.aigateway.prompts import build_prompts
from src.aigateway.types import GatewayRequest
from src.aigateway.logging_util import get_logger

logger = get_logger(__name__)

def _load_input(spec: str) -> Dict[str, Any]:
    if spec.startswith("@"):
        p = Path(spec[1:])
        data = p.read_text(encoding="utf-8")
        return json.loads(data)

    return json.loads(spec)

def _dump(obj: Any, pretty: bool):
    if pretty:
        print(json.dumps(obj, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(obj, ensure_ascii=False))

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("input", help="JSON string or @path/to/json")
    ap.add_argument("--lang", help="Set meta.lang (e.g. en, ar)")
    ap.add_argument("--prompts-only", action="store_true", help="Print the prompt pair and exit")
    ap.add_argument("--pretty", action="store_true", help="Pretty print the output JSON")
    args = ap.parse_args()

    try:
        req = _load_input(args.input)
    except (OSError, ValueError) as e:
        logger.error("Failed to parse input: %s", e)
        sys.exit(2)

    if not isinstance(req, dict):
        logger.error("Input must be a JSON object")
        sys.exit(2)

    if args.lang:
        meta = req.get("meta") if isinstance(req.get("meta"), dict) else {}
        req["meta"] = {**meta, "lang": args.lang}

    if args.prompts_only:
        r = GatewayRequest.from_body(req)
        prompts = build_prompts(r.task, r.payload, r.meta)
        if prompts is None:
            logger.error("Unknown task: %s", r.task)
            sys.exit(2)
        _dump(asdict(prompts), args.pretty)
        return

    event = {
        "httpMethod": "POST",
        "headers": {"client-ip": "cli"},
        "body": json.dumps(req, ensure_ascii=False),
    }
    out = Gateway().handle(event)

    body = json.loads(out["body"]) if out.get("body") else None
    _dump({"statusCode": out["statusCode"], "body": body}, args.pretty)
    if out["statusCode"] >= 400:
        sys.exit(1)

if __name__ == "__main__":
    main()
