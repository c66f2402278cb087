"""Whole-agency backup: export every collection plus settings to one
document, and restore such documents.

Import is additive by presence. A key missing from the document (or set to
null) leaves that collection alone; there is no wholesale clear. Saves are
issued one collection at a time and each is durable once written, so a
failure halfway through reports ``False`` without undoing earlier saves.
"""

import json
import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from repositories.agency_store import COLLECTIONS

logger = logging.getLogger(__name__)

DOCUMENT_KEYS = COLLECTIONS + ("settings",)


class BulkDocumentError(ValueError):
    """The input is not a usable bulk document."""


def _utc_timestamp():
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def export_agency_data(store, ctx):
    with ThreadPoolExecutor(max_workers=len(DOCUMENT_KEYS)) as pool:
        futures = {name: pool.submit(store.fetch, ctx, name) for name in COLLECTIONS}
        futures["settings"] = pool.submit(store.fetch_settings, ctx)
        # .result() re-raises the first failure; there is no partial export.
        document = {name: futures[name].result() for name in DOCUMENT_KEYS}
    document["exportedAt"] = _utc_timestamp()
    return document


def parse_bulk_document(raw):
    if isinstance(raw, Mapping):
        data = raw
    else:
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise BulkDocumentError(f"Document is not UTF-8: {exc}") from exc
        if not isinstance(raw, str):
            raise BulkDocumentError(f"Unsupported document type: {type(raw).__name__}")
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise BulkDocumentError(f"Document is not valid JSON: {exc}") from exc

    if not isinstance(data, Mapping):
        raise BulkDocumentError("Document must be a JSON object")

    for name in COLLECTIONS:
        value = data.get(name)
        if value is not None and not isinstance(value, list):
            raise BulkDocumentError(f"'{name}' must be a list")
    settings = data.get("settings")
    if settings is not None and not isinstance(settings, Mapping):
        raise BulkDocumentError("'settings' must be an object")
    return data


def import_agency_data(store, ctx, raw):
    try:
        data = parse_bulk_document(raw)
    except BulkDocumentError as exc:
        logger.error("[IMPORT] Import failed: %s", exc)
        return False

    try:
        for name in COLLECTIONS:
            if data.get(name) is not None:
                store.save(ctx, name, data[name])
        if data.get("settings") is not None:
            store.save_settings(ctx, data["settings"])
    except Exception as exc:
        logger.error("[IMPORT] Import failed while saving: %s", exc)
        return False
    return True
