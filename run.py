#!/usr/bin/env python
"""Development server: hot reload, demo pages on, DEBUG console logging."""

import logging
import os

os.environ.setdefault("DEV__ENABLE_DEMO_PAGES", "true")

from inkwell import main

if __name__ in {"__main__", "__mp_main__"}:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
    )
    # Rejected selections log on every mouseup
    logging.getLogger("inkwell.anchoring").setLevel(logging.INFO)
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    main()
