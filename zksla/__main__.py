"""
ZK-SLA command line.

  python -m zksla prove request.json     prove and verify, print the response
  python -m zksla verify proof.json      verify an SLAProof, exit 1 when invalid
  python -m zksla describe               print the service description
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from zksla.config import load_config
from zksla.primitives.proof import SLAProof
from zksla.systems.zk.errors import GenerationError
from zksla.systems.zk.service import SLAProofRequest, ZKSLAService
from zksla.telemetry.logging import setup_logging


def _read_json(path: str) -> object:
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


async def _prove(service: ZKSLAService, path: str) -> int:
    try:
        request = SLAProofRequest.model_validate(_read_json(path))
    except ValidationError as exc:
        print(f"Invalid request: {exc}", file=sys.stderr)
        return 2
    try:
        response = await service.prove_sla(request)
    except GenerationError as exc:
        print(f"Failed to generate ZK-SLA proof: {exc}", file=sys.stderr)
        return 1
    print(response.model_dump_json(by_alias=True, indent=2))
    return 0


async def _verify(service: ZKSLAService, path: str) -> int:
    try:
        proof = SLAProof.model_validate(_read_json(path))
    except ValidationError as exc:
        print(f"Invalid proof artifact: {exc}", file=sys.stderr)
        return 2
    result = await service.verify(proof)
    print(result.model_dump_json(by_alias=True, indent=2))
    return 0 if result.valid else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="zksla", description="ZK proofs of SLA compliance")
    parser.add_argument("--config", default="config/default.yaml", help="YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    prove = sub.add_parser("prove", help="generate and verify a proof for a request")
    prove.add_argument("request", help="request JSON file, or - for stdin")

    verify = sub.add_parser("verify", help="verify an SLAProof")
    verify.add_argument("proof", help="proof JSON file, or - for stdin")

    sub.add_parser("describe", help="print the service description")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.logging)
    service = ZKSLAService(config)

    if args.command == "prove":
        return asyncio.run(_prove(service, args.request))
    if args.command == "verify":
        return asyncio.run(_verify(service, args.proof))
    print(json.dumps(service.describe(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
