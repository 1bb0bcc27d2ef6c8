"""Serverless entrypoint.

Design goals:
- Keep this file small and stable.
- Delegate all real logic to src/aigateway so the same code runs from the CLI,
  from AWS Lambda (API Gateway proxy events) and from Netlify-style runtimes.

Expected event shape:
  {"httpMethod": "POST", "headers": {...},
   "body": "{\"task\":\"ask_radiology\",\"payload\":{\"question\":\"...\"},\"meta\":{\"lang\":\"en\"}}"}

Return:
  {"statusCode": ..., "headers": {...CORS...}, "body": JSON string}
  200 body: {"ok": true, "task", "provider", "model_used", "result", "usage"}
  error body: {"ok": false, "error": ..., ["details": ...]}
"""
from typing import Any, Dict

from src.aigateway.gateway import Gateway
from src.aigateway.logging_util import get_logger

logger = get_logger(__name__)

# One gateway per warm instance; the rate limiter state lives here.
_gateway = Gateway()

def lambda_handler(event: Dict[str, Any], context: Any):
    request_id = getattr(context, "aws_request_id", None)
    if request_id:
        logger.info("request_id=%s", request_id)
    return _gateway.handle(event or {})

handler = lambda_handler
