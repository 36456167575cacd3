"""
Screen one address from the command line.

Usage:
  python -m aml_screening.tools.screen_address 0x6B175474E89094C44Da98b954EedeAC495271d0F
  python -m aml_screening.tools.screen_address 0x... --report
  python -m aml_screening.tools.screen_address 0x... --json --no-latency

Exit code: 0 allow, 1 flag, 2 block, 3 invalid address or screening failure.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace

from aml_screening.analytics.decision_policy import Action, categorize_flags, decide
from aml_screening.analytics.report import format_risk_level, generate_report
from aml_screening.analytics.screening_service import create_screening_service
from aml_screening.config import get_settings
from aml_screening.core.exceptions import AMLScreeningError
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)

EXIT_CODES = {Action.ALLOW: 0, Action.FLAG: 1, Action.BLOCK: 2}
EXIT_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Screen an EVM address for AML risk.")
    parser.add_argument("address", help="Address to screen (0x + 40 hex characters)")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--report", action="store_true", help="Print the full plain-text report")
    output.add_argument("--json", action="store_true", help="Print result and decision as JSON")
    parser.add_argument("--no-latency", action="store_true", help="Skip the mock provider's simulated delay")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.no_latency:
        settings = replace(settings, mock_latency_min_sec=0.0, mock_latency_max_sec=0.0)

    service = create_screening_service(settings)
    try:
        result = service.screen(args.address.strip())
    except AMLScreeningError as e:
        print(f"error: {e.message} (code={e.code}, retryable={e.retryable})", file=sys.stderr)
        return EXIT_ERROR
    finally:
        service.close()

    decision = decide(result)
    if args.report:
        print(generate_report(result), end="")
    elif args.json:
        print(json.dumps({
            "result": result.to_dict(),
            "decision": decision.to_dict(),
            "flag_categories": categorize_flags(result.flags),
        }, indent=2))
    else:
        print(
            f"{result.address}: {decision.action.value.upper()} "
            f"(score={result.risk_score}, level={format_risk_level(result.risk_level.value)}, "
            f"wallet={result.wallet_type.value})"
        )
    return EXIT_CODES[decision.action]


if __name__ == "__main__":
    sys.exit(main())
