"""Terminal QR display for the office screen.

    python scripts/qr_kiosk.py --base-url http://localhost:5000 --token "$HR_TOKEN" --mode rotating

Runs until interrupted in both modes; a static code stays on screen with no
timers armed. Ctrl+C tears down every timer before exiting.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv

from workline.display.api_client import QrApiClient
from workline.display.console import ConsoleView
from workline.display.controller import QrDisplayController
from workline.display.preferences import QrMode, load_preferences, save_preferences
from workline.display.timers import SchedScheduler

logger = logging.getLogger("qr_kiosk")

DEFAULT_PREFS_PATH = Path.home() / ".workline" / "qr_display.json"


def main() -> int:
    load_dotenv(override=False)

    parser = argparse.ArgumentParser(description="Show the attendance QR code in a terminal.")
    parser.add_argument("--base-url", default=os.getenv("WORKLINE_API_URL", "http://localhost:5000"))
    parser.add_argument("--token", default=os.getenv("WORKLINE_TOKEN"))
    parser.add_argument("--mode", choices=[m.value for m in QrMode], default=None)
    parser.add_argument("--prefs", type=Path, default=DEFAULT_PREFS_PATH)
    parser.add_argument("--revoke", action="store_true", help="revoke active codes and exit")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.token:
        parser.error("--token (or WORKLINE_TOKEN) is required")

    prefs = load_preferences(args.prefs)
    scheduler = SchedScheduler()
    controller = QrDisplayController(
        QrApiClient(args.base_url, token=args.token),
        ConsoleView(),
        scheduler,
        prefs,
        on_preferences_changed=lambda p: save_preferences(args.prefs, p),
    )

    if args.revoke:
        count = controller.revoke()
        if count is None:
            return 1
        print(f"revoked {count} session(s)")
        return 0

    if args.mode:
        controller.set_mode(QrMode(args.mode))

    if controller.generate() is None:
        return 1

    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        controller.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
