import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.services.sync_service import invoke
from app.workers.tasks import scheduled_request


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one HCM new-hire photo sync")
    parser.add_argument("--input", type=Path, help="JSON file with the invocation payload")
    parser.add_argument("--bucket")
    parser.add_argument("--namespace")
    parser.add_argument("--object")
    parser.add_argument("--hostname", help="Vault host for the secret bundle endpoint")
    parser.add_argument("--compartment-ocid")
    parser.add_argument("--secret-ocid")
    parser.add_argument("--hcm-hostname")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(logging.INFO)

    payload = scheduled_request(settings)
    if args.input:
        payload.update(json.loads(args.input.read_text(encoding="utf-8")))
    overrides = {
        "bucket": args.bucket,
        "namespace": args.namespace,
        "object": args.object,
        "hostname": args.hostname,
        "compartmentOcid": args.compartment_ocid,
        "secretOcid": args.secret_ocid,
        "hcmhostname": args.hcm_hostname,
    }
    payload.update({key: value for key, value in overrides.items() if value})

    result = asyncio.run(invoke(payload, settings=settings))
    print(result.describe())
    print(json.dumps(result.model_dump(mode="json", exclude_none=True), indent=2))
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
