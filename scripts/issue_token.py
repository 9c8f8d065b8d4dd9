from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from workline.common.auth import issue_token
from workline.core.enums import Role


def main() -> None:
    parser = argparse.ArgumentParser(description="Sign a bearer token for local testing and kiosks.")
    parser.add_argument("user_id", type=int)
    parser.add_argument("--role", choices=[r.value for r in Role], default=Role.HR.value)
    parser.add_argument("--ttl", type=int, default=None, help="minutes; defaults to TOKEN_TTL_MINUTES")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    token = issue_token(
        user_id=args.user_id,
        role=Role(args.role),
        secret_key=settings.SECRET_KEY,
        ttl_minutes=args.ttl or int(getattr(settings, "TOKEN_TTL_MINUTES", 60)),
        algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
    )
    print(token)


if __name__ == "__main__":
    main()
