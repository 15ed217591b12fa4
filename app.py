from __future__ import annotations

import argparse
import sys
from typing import Optional

import uvicorn

from companion.core.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from companion.core.errors import CompanionError
from companion.core.logger import get_logger, setup_logging
from companion.core.ops_log import OpsLogger
from companion.core.runtime_store import RuntimeStore
from companion.web.api import create_app


def build(cfg: AppConfig, logger) -> RuntimeStore:
    ops = OpsLogger(path=cfg.store.ops_log_path)
    store = RuntimeStore.from_config(cfg.store, ops=ops, logger=logger)
    where = cfg.store.db_path or "memory"
    logger.info(f"Runtime store ready ({where}).")
    ops.log(trace_id="startup", event="runtime_store.opened", outcome="ok", details={"db_path": where})
    return store


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Companion runtime state store (HTTP)")
    ap.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the JSON config file.")
    ap.add_argument("--host", default=None, help="Override web.host.")
    ap.add_argument("--port", type=int, default=None, help="Override web.port.")
    ap.add_argument("--memory", action="store_true", help="Use a throwaway in-memory database.")
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config)
    except CompanionError as e:
        print(f"{e.user_message} ({args.config})", file=sys.stderr)
        return 2

    lc = cfg.logging
    logger = setup_logging(lc.log_dir, lc.level, max_bytes=lc.max_bytes, backup_count=lc.backup_count)
    if args.memory:
        cfg = cfg.model_copy(update={"store": cfg.store.model_copy(update={"db_path": None})})
    host = args.host or cfg.web.host
    port = int(args.port or cfg.web.port)

    try:
        store = build(cfg, get_logger("store"))
    except CompanionError as e:
        logger.error(f"Startup failed: {e.to_dict()}")
        return 3

    try:
        app = create_app(store, logger=get_logger("web"), allowed_origins=cfg.web.allowed_origins)
        server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="info"))
        logger.info(f"Web server starting on http://{host}:{port}")
        server.run()
    finally:
        store.close()
        logger.info("Runtime store closed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
