"""FastAPI server entrypoint

Usage:
    python main.py
    # or
    uvicorn walrus_gateway.api:app --reload --host 0.0.0.0 --port 5000
"""
import argparse

import uvicorn

from walrus_gateway.config import get_config


if __name__ == "__main__":
    config = get_config()

    parser = argparse.ArgumentParser(description="Run the Walrus site gateway")
    parser.add_argument("--server.port", dest="server_port", type=int, default=config.port, help="Port to run the server on")
    parser.add_argument("--server.address", dest="server_address", type=str, default=config.host, help="Host to run the server on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args, unknown = parser.parse_known_args()

    uvicorn.run(
        "walrus_gateway.api:app",
        host=args.server_address,
        port=args.server_port,
        reload=args.reload,
    )
