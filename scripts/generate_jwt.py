"""Sign a development bearer token for the Trainer Portal API.

Usage:
  export PORTAL_JWT_SECRET="your-secret"
  python scripts/generate_jwt.py --sub 7 --user-type TRAINING_COMPANY --role ADMIN --company-id 3
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

# Allow running from a checkout without installing the package.
BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from portal.security.auth import JWT_SECRET_ENV, sign_jwt  # noqa: E402
from portal.security.roles import ASSIGNABLE_ROLES, UserType  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sub", required=True, type=int, help="user id")
    ap.add_argument("--user-type", required=True, choices=[t.value for t in UserType])
    ap.add_argument("--role", choices=sorted(r.value for r in ASSIGNABLE_ROLES))
    ap.add_argument("--company-id", type=int)
    ap.add_argument("--exp-seconds", type=int, default=60 * 60 * 12)  # 12h
    args = ap.parse_args()

    secret = os.environ.get(JWT_SECRET_ENV)
    if not secret:
        raise SystemExit(f"Missing {JWT_SECRET_ENV} in environment.")

    claims = {"sub": args.sub, "user_type": args.user_type, "exp": int(time.time()) + args.exp_seconds}
    if args.role:
        claims["role"] = args.role
    if args.company_id is not None:
        claims["company_id"] = args.company_id

    print(sign_jwt(claims, secret))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
