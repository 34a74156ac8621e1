"""HTTP entrypoint that normalizes payloads and triggers clinic imports."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict

from flask import Flask, jsonify, request

from clinic_ingest.adapters.registry import UnknownProviderError, get_adapter, known_providers
from clinic_ingest.core.config import get_settings
from clinic_ingest.jobs.seed_clinics import run_seed_job
from clinic_ingest.models import ThirdPartySource

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App & executor ----------
app = Flask(__name__)
# One worker keeps imports sequential, so slug checks never race inside this process.
_executor = ThreadPoolExecutor(max_workers=1)

# ---------- Routes ----------


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return jsonify({"status": "ok", "worker_port_config": settings.worker_port}), 200


@app.post("/normalize/<provider>")
def normalize_payload(provider: str) -> Any:
    """
    Normalize one raw provider payload without persisting it.
    Query param ``detail=1`` selects the detail variant.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON object body is required"}), 400

    try:
        adapter = get_adapter(provider)
    except UnknownProviderError as exc:
        return jsonify({"error": str(exc)}), 400

    detail = request.args.get("detail", "").lower() in {"1", "true", "yes"}
    record = adapter.normalize_detail(payload) if detail else adapter.normalize(payload)
    return jsonify({"data": record.to_dict()}), 200


@app.post("/import")
def enqueue_import() -> Any:
    """
    Enqueue a provider import.
    Required JSON fields: source; location unless source is "sample".
    Optional: term (str), limit (int), details (bool), synthetic_reviews (bool)
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON object body is required"}), 400

    source = str(payload.get("source") or "").strip().lower()
    allowed = known_providers() + [ThirdPartySource.SAMPLE.value]
    if source not in allowed:
        return jsonify({"error": f"source must be one of: {', '.join(allowed)}"}), 400

    location = str(payload.get("location") or "").strip()
    if source != ThirdPartySource.SAMPLE.value and not location:
        return jsonify({"error": "missing fields: location"}), 400

    limit_raw = payload.get("limit")
    limit = None
    if limit_raw is not None:
        try:
            limit = int(limit_raw)
            if limit <= 0:
                return jsonify({"error": "limit must be positive"}), 400
        except (TypeError, ValueError, OverflowError):
            return jsonify({"error": "limit must be numeric"}), 400

    job_args = dict(
        source=source,
        term=str(payload.get("term") or "").strip(),
        location=location,
        limit=limit,
        with_details=bool(payload.get("details", False)),
        synthetic=bool(payload.get("synthetic_reviews", False)),
    )

    logger.info("Queueing import job: %s", job_args)
    _executor.submit(_run_job_safe, job_args)

    return jsonify({"data": {"status": "queued"}}), 202


# ---------- Internals ----------


def _run_job_safe(job_args: Dict[str, Any]) -> None:
    try:
        summary = run_seed_job(**job_args)
        logger.info("Import job finished: %s", summary)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Import job failed: %s", exc)


def main() -> None:
    port = int(os.getenv("PORT") or get_settings().worker_port)
    logger.info("Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
