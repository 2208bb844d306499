"""HTTP server runner for the review service.

Usage:
    review-service                        # serve on HOST:PORT from the environment
    review-service --port 9000 --reload   # local development
"""

import argparse

import uvicorn

from app.config import HOST, PORT


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Doctor review service")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
