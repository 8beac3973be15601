#!/usr/bin/env python3
"""
Launch Request

Send one method-channel call to the desktop launcher from the command line.

Usage:
    python launch_request.py <method> ['<json arguments>']

Example:
    python launch_request.py launchAppWithQR '{"packageName": "tpbank", "qrCode": "000201..."}'

Output:
    [OK] result=true
    Exit 0

    or

    [ERROR] INVALID_ARGUMENT: Package name is null
    Exit 1

    or

    [ERROR] Unknown method: fooBar
    Exit 2
"""

import json
import logging
import sys


def main(argv=None, facade=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        print("Usage: python launch_request.py <method> ['<json arguments>']", file=sys.stderr)
        return 2

    method = argv[0]
    arguments = {}
    if len(argv) > 1:
        try:
            arguments = json.loads(argv[1])
        except json.JSONDecodeError as e:
            print(f"[ERROR] Arguments are not valid JSON: {e}", file=sys.stderr)
            return 2
        if not isinstance(arguments, dict):
            print("[ERROR] Arguments must be a JSON object", file=sys.stderr)
            return 2

    if facade is None:
        from launcher.desktop_host import create_desktop_facade
        facade = create_desktop_facade()

    result = facade.handle(method, arguments)

    if result.status == "not_implemented":
        print(f"[ERROR] Unknown method: {method}", file=sys.stderr)
        return 2
    if result.status == "error":
        print(f"[ERROR] {result.code}: {result.message}", file=sys.stderr)
        return 1

    print(f"[OK] result={str(result.value).lower()}")
    return 0


if __name__ == "__main__":
    from launcher.config import get_config

    logging.basicConfig(
        level=str(get_config().get("system.log_level", "INFO")).upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    sys.exit(main())
