#!/usr/bin/env python3
"""
kwarchive FastAPI server - keyword archive time-series queries

Entry point: load the YAML config, set up logging, serve with uvicorn.
"""

import argparse
import logging

import uvicorn

from .core.config import load_config_from
from .core.server import create_app


def main():
    """Main entry point for kwarchive server."""
    parser = argparse.ArgumentParser(description="kwarchive server")
    parser.add_argument("-c", "--config", help="Path to YAML config", default="config.yaml")
    args = parser.parse_args()

    # Load configuration
    config = load_config_from(args.config)
    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))

    app = create_app(config)

    uvicorn.run(app, host=config.host, port=config.port, reload=False, access_log=False)


if __name__ == "__main__":
    main()
