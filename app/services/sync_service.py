import json
import uuid
from typing import Any

import httpx
from pydantic import ValidationError

from app.core.config import Settings, get_settings
from app.core.enums import HireStatus, SyncStatus
from app.core.errors import BlobStoreError, CheckpointFailed, ConfigInvalid, SyncError
from app.core.logging import get_logger, log_fields
from app.core.models import (
    Checkpoint,
    HireOutcome,
    SyncRequest,
    SyncResult,
    SyncSummary,
    dump_failures,
)
from app.services.blob_store import BlobStore, build_blob_store
from app.services.feed_parser import parse_feed
from app.services.hcm_client import HcmClient
from app.services.photo_transform import PhotoTransformer, build_photo_transformer
from app.services.secret_resolver import SecretResolver, build_secret_resolver
from app.workflow.context import SyncContext
from app.workflow.graph import build_workflow, run_hire_workflow

logger = get_logger(__name__)


def validate_request(payload: dict[str, Any] | SyncRequest) -> SyncRequest:
    if isinstance(payload, SyncRequest):
        return payload
    try:
        return SyncRequest.model_validate(payload or {})
    except ValidationError as exc:
        missing = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ConfigInvalid(
            "Object storage namespace, object, hostname, hcmhostname, compartmentOcid, "
            f"secretOcid and bucket are required parameters. Invalid: {', '.join(missing)}"
        ) from exc


def load_settings(settings: Settings | None = None) -> Settings:
    if settings is not None:
        return settings
    try:
        return get_settings()
    except ValidationError as exc:
        invalid = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ConfigInvalid(f"Invalid settings: {', '.join(invalid)}") from exc


def next_watermark(previous: str, latest_updated: str | None) -> str:
    # Fixed-width ISO-8601 timestamps order correctly as strings.
    if not latest_updated:
        return previous
    return max(previous, latest_updated)


async def load_checkpoint(blob_store: BlobStore, request: SyncRequest) -> Checkpoint:
    try:
        raw = await blob_store.read(request.namespace, request.bucket, request.object)
    except BlobStoreError as exc:
        raise CheckpointFailed(f"Unable to read checkpoint {request.object}: {exc}") from exc
    if raw is None:
        raise CheckpointFailed(f"Checkpoint object {request.object} does not exist")
    try:
        return Checkpoint.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigInvalid(f"Invalid HCM configuration in {request.object}: lastfeedtime is required") from exc


async def save_checkpoint(blob_store: BlobStore, request: SyncRequest, checkpoint: Checkpoint) -> None:
    data = checkpoint.model_dump_json().encode("utf-8")
    try:
        await blob_store.write(request.namespace, request.bucket, request.object, data)
    except BlobStoreError as exc:
        raise CheckpointFailed(f"Unable to write checkpoint {request.object}: {exc}") from exc


async def record_failures(ctx: SyncContext, summary: SyncSummary) -> None:
    name = f"{ctx.settings.dead_letter_prefix}{summary.run_id}.json"
    record = {
        "run_id": summary.run_id,
        "watermark": summary.watermark,
        "failed": dump_failures(summary.failed),
    }
    try:
        await ctx.blob_store.write(
            ctx.request.namespace,
            ctx.request.bucket,
            name,
            json.dumps(record, indent=2).encode("utf-8"),
        )
    except BlobStoreError as exc:
        logger.error(
            "Unable to record failed hires",
            extra=log_fields(run_id=summary.run_id, object_name=name, error=str(exc)),
        )


async def run_sync(
    request: SyncRequest,
    *,
    settings: Settings,
    blob_store: BlobStore,
    secret_resolver: SecretResolver,
    transformer: PhotoTransformer,
    transport: httpx.AsyncBaseTransport | None = None,
    run_id: str | None = None,
) -> SyncSummary:
    run_id = run_id or str(uuid.uuid4())
    checkpoint = await load_checkpoint(blob_store, request)
    previous = checkpoint.lastfeedtime

    credential = await secret_resolver.fetch_secret(
        request.secret_ocid, request.compartment_ocid, request.hostname
    )
    if not credential:
        raise ConfigInvalid("Invalid HCM configuration: credential is empty")

    async with HcmClient.from_settings(
        settings,
        hostname=request.hcm_hostname,
        credential=credential,
        transport=transport,
    ) as hcm:
        raw_feed = await hcm.fetch_feed_since(previous)
        parsed = parse_feed(raw_feed)
        logger.info(
            f"Number of newhires is: {len(parsed.new_hires)}",
            extra=log_fields(run_id=run_id, latest_updated=parsed.latest_updated),
        )

        ctx = SyncContext(
            run_id=run_id,
            request=request,
            settings=settings,
            blob_store=blob_store,
            hcm=hcm,
            transformer=transformer,
        )
        outcomes: list[HireOutcome] = []
        if parsed.new_hires:
            workflow = build_workflow(ctx)
            for hire in parsed.new_hires:
                outcomes.append(await run_hire_workflow(ctx, hire, workflow))
        else:
            logger.info("No new hires to process.", extra=log_fields(run_id=run_id))

    watermark = next_watermark(previous, parsed.latest_updated)
    checkpoint.lastfeedtime = watermark
    await save_checkpoint(blob_store, request, checkpoint)
    logger.info(
        "Wrote updated checkpoint",
        extra=log_fields(run_id=run_id, previous_watermark=previous, watermark=watermark),
    )

    summary = SyncSummary(
        run_id=run_id,
        status=SyncStatus.COMPLETED if parsed.new_hires else SyncStatus.NOTHING_TO_DO,
        previous_watermark=previous,
        watermark=watermark,
        total=len(outcomes),
        succeeded=[item.person_number for item in outcomes if item.status == HireStatus.SUCCEEDED],
        failed=[item for item in outcomes if item.status == HireStatus.FAILED],
    )
    if summary.failed:
        await record_failures(ctx, summary)
    return summary


async def invoke(
    payload: dict[str, Any] | SyncRequest,
    *,
    settings: Settings | None = None,
    blob_store: BlobStore | None = None,
    secret_resolver: SecretResolver | None = None,
    transformer: PhotoTransformer | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SyncResult:
    try:
        settings = load_settings(settings)
        request = validate_request(payload)
        try:
            blob_store = blob_store or build_blob_store(settings)
            transformer = transformer or build_photo_transformer(settings)
        except ValueError as exc:
            raise ConfigInvalid(str(exc)) from exc
        summary = await run_sync(
            request,
            settings=settings,
            blob_store=blob_store,
            secret_resolver=secret_resolver or build_secret_resolver(settings),
            transformer=transformer,
            transport=transport,
        )
    except SyncError as exc:
        logger.error(f"Error: {exc.message}", extra=log_fields(kind=exc.kind))
        return SyncResult.failure(exc.kind, exc.message)
    logger.info(
        "Sync completed",
        extra=log_fields(
            run_id=summary.run_id,
            status=summary.status.value,
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
        ),
    )
    return SyncResult.success(summary)
