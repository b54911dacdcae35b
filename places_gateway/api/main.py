"""
Places Gateway - Local Entry Point

Command-line interface that runs one request through the Lambda handler with a
synthetic API Gateway proxy event. Useful for trying routes against the real
providers without deploying.

Usage:
    python -m places_gateway.api.main --route PATH [OPTIONS]

Options:
    --route TEXT        Route path (e.g., '/places/details')
    --body TEXT         JSON request body, or @path to read it from a file
    --method TEXT       HTTP method (default: POST)
    --source-ip TEXT    Caller IP placed in the request context
    --user-agent TEXT   Caller user agent placed in the request context
    --verbose           Enable debug logging
    --help              Show this message and exit

Examples:
    # Reverse geocode a coordinate:
    python -m places_gateway.api.main --route /geocode/locate \\
        --body '{"latitude": 37.7749, "longitude": -122.4194}'

    # Yelp details from a saved body with verbose logging:
    python -m places_gateway.api.main --route /fusion/details --body @details.json --verbose

Exit Codes:
    0: Route succeeded
    1: Route returned a failed response
    2: Fatal error (unreadable body file, etc.)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .handler import lambda_handler

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Run one request through the places gateway handler',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--route',
        type=str,
        required=True,
        help='Route path (e.g., "/places/details")'
    )

    parser.add_argument(
        '--body',
        type=str,
        help='JSON request body, or @path to read it from a file',
        default=None
    )

    parser.add_argument(
        '--method',
        type=str,
        help='HTTP method',
        default='POST'
    )

    parser.add_argument(
        '--source-ip',
        type=str,
        help='Caller IP placed in the request context',
        default='127.0.0.1',
        dest='source_ip'
    )

    parser.add_argument(
        '--user-agent',
        type=str,
        help='Caller user agent placed in the request context',
        default='places-gateway-cli',
        dest='user_agent'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def read_body(body: Optional[str]) -> Optional[str]:
    """Return the body text, reading it from a file when given as @path."""
    if body is not None and body.startswith('@'):
        return Path(body[1:]).read_text(encoding='utf-8')
    return body


def build_event(
    route: str,
    body: Optional[str],
    method: str = 'POST',
    source_ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> dict[str, Any]:
    """Build a minimal API Gateway proxy event."""
    return {
        'resource': route,
        'path': route,
        'httpMethod': method.upper(),
        'headers': {'Content-Type': 'application/json'},
        'body': body,
        'isBase64Encoded': False,
        'requestContext': {
            'resourcePath': route,
            'httpMethod': method.upper(),
            'identity': {
                'sourceIp': source_ip,
                'userAgent': user_agent,
            },
        },
    }


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the local gateway CLI.

    Returns:
        Exit code (0 = success, 1 = failed response, 2 = fatal error)
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    try:
        body = read_body(args.body)
        event = build_event(
            route=args.route,
            body=body,
            method=args.method,
            source_ip=args.source_ip,
            user_agent=args.user_agent
        )

        response = lambda_handler(event, None)
        print(json.dumps(response, indent=2))

        envelope = json.loads(response['body']) if response.get('body') else {}
        if envelope and not envelope.get('success'):
            logger.warning(
                "Route returned a failed response",
                extra={'route': args.route, 'status_code': response['statusCode']}
            )
            return 1

        return 0

    except OSError as e:
        logger.error(f"Could not read request body: {e}")
        return 2

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2


if __name__ == '__main__':
    sys.exit(main())
