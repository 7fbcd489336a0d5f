"""
AWS Lambda handler for the Debt Renegotiation CRM calculator.

This is the serverless entry point for the stateless calculator endpoints.
For the full API (proposals, leads, reports), use main.py (Flask app) instead.
"""

import base64
import json
import logging

from crm_engine import CrmProcessor, config

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Initialize processor (reused across warm invocations)
processor = CrmProcessor()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - POST /calculate
    - POST /payment_plan
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    # Route to appropriate handler
    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path == "/calculate" and http_method == "POST":
        return handle_json_request(event, processor.process_from_dict, "calculate")
    elif path == "/payment_plan" and http_method == "POST":
        return handle_json_request(event, processor.payment_plan_from_dict, "payment_plan")
    else:
        return {"statusCode": 404, "headers": CORS_HEADERS, "body": json.dumps({"error": "Not found", "path": path})}


def handle_health():
    """Health check endpoint."""
    return {
        "statusCode": 200,
        "headers": CORS_HEADERS,
        "body": json.dumps({"status": "healthy", "environment": config.ENVIRONMENT}),
    }


def handle_api_info():
    """API information endpoint."""
    return {
        "statusCode": 200,
        "headers": CORS_HEADERS,
        "body": json.dumps(
            {
                "status": "ok",
                "message": "Debt Renegotiation CRM Calculator API",
                "version": "1.0",
                "environment": config.ENVIRONMENT,
                "runtime": "AWS Lambda",
                "endpoints": {
                    "calculate": "/calculate [POST]",
                    "payment_plan": "/payment_plan [POST]",
                    "health": "/health [GET]",
                },
            }
        ),
    }


def _read_body(event):
    body = event.get("body", "")
    if not isinstance(body, str):
        return body
    if not body:
        return None
    # Handle base64 encoded body (API Gateway)
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return json.loads(body)


def handle_json_request(event, handler, operation):
    """Parse the body, run one engine operation and wrap the result."""
    try:
        input_data = _read_body(event)
        if not input_data:
            return {
                "statusCode": 400,
                "headers": CORS_HEADERS,
                "body": json.dumps({"error": "No input data provided", "status": "failed"}),
            }

        logger.info(f"Running {operation}")
        result = handler(input_data)

        return {"statusCode": 200, "headers": CORS_HEADERS, "body": json.dumps(result)}

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return {
            "statusCode": 400,
            "headers": CORS_HEADERS,
            "body": json.dumps({"error": f"Invalid JSON: {str(e)}", "status": "failed"}),
        }

    except ValueError as e:
        # Validation errors from engine
        logger.error(f"Validation error: {str(e)}")
        return {
            "statusCode": 400,
            "headers": CORS_HEADERS,
            "body": json.dumps({"error": f"Validation error: {str(e)}", "status": "validation_failed"}),
        }

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return {
            "statusCode": 500,
            "headers": CORS_HEADERS,
            "body": json.dumps({"error": "An unexpected error occurred during processing", "status": "failed"}),
        }
