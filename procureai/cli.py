"""
ProcureAI command line.

Commands:
  procureai evaluate COHORT.json     Score every proposal of one RFP
  procureai compare COHORT.json      Ask for a single verdict across proposals
  procureai parse-rfp "TEXT"         Turn a free-text request into a structured RFP

COHORT.json holds {"rfp": {...}, "proposals": [{"id": ..., "vendor_name": ..., "raw_text": ...}]}.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

from procureai.agents.compare_agent import CompareAgent
from procureai.agents.rfp_agent import RfpAgent
from procureai.config import load_settings
from procureai.errors import EvaluationError
from procureai.llm import build_client
from procureai.logging_config import setup_logging
from procureai.pipeline import EvaluationOrchestrator
from procureai.schemas import Proposal, RfpRequirements

logger = logging.getLogger(__name__)


def load_cohort(path: str) -> Tuple[RfpRequirements, List[Proposal]]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict) or "rfp" not in data:
        raise ValueError(f"{path}: expected an object with 'rfp' and 'proposals'.")
    rfp = RfpRequirements.model_validate(data["rfp"])
    proposals = [Proposal.model_validate(p) for p in data.get("proposals", [])]
    return rfp, proposals


def cmd_evaluate(args, settings) -> int:
    if args.max_workers is not None:
        settings = replace(settings, max_workers=args.max_workers)
    rfp, proposals = load_cohort(args.cohort)
    results = EvaluationOrchestrator.from_settings(settings).evaluate(rfp, proposals)

    if args.json:
        print(json.dumps([r.model_dump() for r in results], indent=2, ensure_ascii=False))
        return 0

    for r in results:
        name = r.vendor_name or r.proposal_id
        print(f"{name}: {r.score}/100 [{r.recommendation}]")
        print(f"  {r.summary}")
    return 0


def cmd_compare(args, settings) -> int:
    rfp, proposals = load_cohort(args.cohort)
    verdict = CompareAgent(build_client(settings), settings.openai_model).compare(proposals, rfp)
    print(json.dumps(verdict.model_dump(), indent=2, ensure_ascii=False))
    return 0


def cmd_parse_rfp(args, settings) -> int:
    rfp = RfpAgent(build_client(settings), settings.openai_model).parse_rfp(args.prompt)
    print(json.dumps(rfp.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procureai",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_eval = sub.add_parser("evaluate", help="Score every proposal of one RFP")
    p_eval.add_argument("cohort", help="Path to the cohort JSON file")
    p_eval.add_argument("--max-workers", type=int, default=None, help="Concurrent model calls")
    p_eval.add_argument("--json", action="store_true", help="Print results as JSON")
    p_eval.set_defaults(func=cmd_evaluate)

    p_cmp = sub.add_parser("compare", help="Pick one vendor across the proposals")
    p_cmp.add_argument("cohort", help="Path to the cohort JSON file")
    p_cmp.set_defaults(func=cmd_compare)

    p_rfp = sub.add_parser("parse-rfp", help="Structure a free-text procurement request")
    p_rfp.add_argument("prompt", help="Free-text request")
    p_rfp.set_defaults(func=cmd_parse_rfp)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        return args.func(args, settings)
    except (EvaluationError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
