"""CLI entrypoint for the Giphy Block server."""

import argparse
import os

import uvicorn

from giphyblock.api.app import DEFAULT_DATABASE_URL


def main():
    parser = argparse.ArgumentParser(description="Giphy Block server")
    parser.add_argument(
        "--host", default=os.environ.get("GIPHYBLOCK_HOST", "127.0.0.1"), help="Bind address"
    )
    parser.add_argument(
        "--port", type=int, default=int(os.environ.get("GIPHYBLOCK_PORT", "8000")), help="Bind port"
    )
    parser.add_argument(
        "--database-url",
        default=os.environ.get("GIPHYBLOCK_DATABASE_URL", DEFAULT_DATABASE_URL),
        help="SQLAlchemy async database URL",
    )
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    os.environ["GIPHYBLOCK_DATABASE_URL"] = args.database_url

    uvicorn.run(
        "giphyblock.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
