"""Load the dashboard once and log a per-view summary.

Run with: python -m finance_dashboard [--view VIEW] [--all]
"""

from __future__ import annotations

import argparse

from tireworks.config import get_settings
from tireworks.utils.logger import setup_logging

from finance_dashboard.app import create_app
from finance_dashboard.utils.logging import logger
from finance_dashboard.views import ViewId, ViewModel


def summarize(model: ViewModel) -> str:
    counts = ", ".join(f"{kind}={len(rows)}" for kind, rows in model.entities.items())
    actions = ", ".join(sorted(model.callbacks)) or "-"
    state = "loading" if model.is_loading else "ready"
    return f"[{model.view.value}] {model.title} ({state}) {counts} | actions: {actions}"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="TireWorks finance dashboard summary")
    parser.add_argument("--view", choices=[v.value for v in ViewId], help="view to show")
    parser.add_argument("--all", action="store_true", help="summarize every view")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level)

    app = create_app(settings, initial_view=args.view)
    app.run()
    try:
        views = list(ViewId) if args.all else [app.active_view]
        for view in views:
            logger.info(summarize(app.tabs.view_model(view)))
    finally:
        app.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
