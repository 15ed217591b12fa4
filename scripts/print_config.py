from __future__ import annotations

import json
import sys

from companion.core.config import DEFAULT_CONFIG_PATH, load_config


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    cfg = load_config(path)
    print(json.dumps(cfg.model_dump(), indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
