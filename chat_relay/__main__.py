"""命令行入口：python -m chat_relay [--host H] [--port P] [--config FILE]"""

import argparse
import os
import sys

from aiohttp import web

from chat_relay.api.service import ChatRelayService
from chat_relay.config.settings import load_settings
from chat_relay.domain.exceptions import ConfigError
from chat_relay.infrastructure.logging.logger import setup_logger
from chat_relay.server.app import create_app


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Chat relay for OpenAI-compatible completion backends")
    parser.add_argument("--host", help="Listen address (overrides HOST)")
    parser.add_argument("--port", type=int, help="Listen port (overrides PORT)")
    parser.add_argument("--config", help="YAML config file (overrides CHAT_RELAY_CONFIG_FILE)")
    args = parser.parse_args(argv)

    if args.config:
        os.environ["CHAT_RELAY_CONFIG_FILE"] = args.config
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port

    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        print(f"Invalid configuration: {e.message}", file=sys.stderr)
        return 2

    logger = setup_logger(settings)
    logger.info(
        f"Starting backend server on {settings.host}:{settings.port}",
        extra={"extra": {"mistralEndpoint": settings.mistral_api_url, "environment": settings.relay_env}},
    )
    app = create_app(ChatRelayService(settings))
    web.run_app(app, host=settings.host, port=settings.port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
