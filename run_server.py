"""Serve the reminder API with Flask's built-in server."""

import argparse
import os

from plantmanager import create_app


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="plantmanager-server")
    parser.add_argument("--host", default=os.environ.get("FLASK_RUN_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("FLASK_RUN_PORT", 8000)))
    args = parser.parse_args(argv)

    app = create_app()
    print(f"Server starting on http://{args.host}:{args.port}")
    print("Press Ctrl+C to stop\n")
    try:
        app.run(host=args.host, port=args.port, debug=False, use_reloader=False)
    except KeyboardInterrupt:
        print("\nServer stopped by user")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
