from __future__ import annotations

import argparse
import logging
import time

from .config import ServerSettings, configure_logging
from .runtime.server import ArtSpaceServer, run

logger = logging.getLogger(__name__)


def main() -> None:
    env = ServerSettings.from_env()

    p = argparse.ArgumentParser(prog="artspace", description="artspace: 3D portfolio gallery server")
    p.add_argument("--host", default=env.host)
    p.add_argument("--port", type=int, default=env.port)
    p.add_argument("--no-browser", action="store_true")
    p.add_argument(
        "--log-level",
        default=env.log_level,
        choices=["critical", "error", "warning", "info", "debug"],
    )
    p.add_argument("--seed-demo", action="store_true", default=env.seed_demo, help="populate the store with demo data")
    args = p.parse_args()

    configure_logging(args.log_level)

    srv = run(host=args.host, port=args.port, open_browser=not args.no_browser, log_level=args.log_level)
    if not isinstance(srv, ArtSpaceServer):
        # Attached to a server that is already running; nothing to serve here.
        print(srv.base_url)
        return

    if args.seed_demo:
        from .core.demo import seed_demo

        portfolio, _ = seed_demo()
        logger.info("demo gallery: %sapi/portfolios/%s/gallery.png", srv.url, portfolio.id)

    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    while True:
        time.sleep(3600)


if __name__ == "__main__":
    main()
