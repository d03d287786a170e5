# Usage (for cron or any external scheduler):
#   python -m streamflix.jobs renew
#   python -m streamflix.jobs expire

from __future__ import annotations

import argparse
import logging

from streamflix.api.deps import get_expire_subscriptions_use_case, get_renew_subscriptions_use_case
from streamflix.shared.config import get_settings


JOBS = {
    "renew": get_renew_subscriptions_use_case,
    "expire": get_expire_subscriptions_use_case,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a subscription maintenance job once.")
    parser.add_argument("job", choices=sorted(JOBS))
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    summary = JOBS[args.job]().execute()
    logging.getLogger(__name__).info("%s", summary)
    return 1 if summary.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
