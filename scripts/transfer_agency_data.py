#!/usr/bin/env python3
"""
Export or import one agency's local data as a single JSON document.

Usage:
  python3 scripts/transfer_agency_data.py export --agency-id mock-agency-id --output backup.json
  python3 scripts/transfer_agency_data.py import --agency-id mock-agency-id --input backup.json
"""

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app_settings import load_app_settings
from bulk_transfer import DOCUMENT_KEYS, export_agency_data, import_agency_data
from logger_config import setup_logger
from repositories.repo_factory import build_agency_store
from tenancy import TenantContext


def _context_for(agency_id):
    return TenantContext(principal={"id": agency_id, "agencyId": agency_id})


def export_to_file(store, agency_id, output_path):
    document = export_agency_data(store, _context_for(agency_id))
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return {
        "success": True,
        "action": "export",
        "agency_id": agency_id,
        "output": str(out),
        "counts": {name: len(document[name]) for name in DOCUMENT_KEYS if name != "settings"},
        "exportedAt": document["exportedAt"],
    }


def import_from_file(store, agency_id, input_path):
    src = Path(input_path)
    if not src.is_file():
        return {"success": False, "action": "import", "agency_id": agency_id, "error": f"Not found: {src}"}
    ok = import_agency_data(store, _context_for(agency_id), src.read_bytes())
    return {"success": ok, "action": "import", "agency_id": agency_id, "input": str(src)}


def main(argv=None, store=None):
    parser = argparse.ArgumentParser(description="Export/import agency data.")
    parser.add_argument("action", choices=["export", "import"])
    parser.add_argument("--agency-id", required=True, help="Agency whose data is transferred.")
    parser.add_argument("--output", default="agency_export.json", help="Export destination.")
    parser.add_argument("--input", default="", help="Import source.")
    parser.add_argument("--config", default=None, help="Config file (default: SAG_CONFIG_PATH or config.ini).")
    parser.add_argument("--logs-dir", default="logs", help="Folder for the session log.")
    args = parser.parse_args(argv)

    if args.action == "import" and not args.input:
        parser.error("--input is required for import")

    session_logger, _ = setup_logger(f"transfer_{uuid.uuid4().hex[:8]}", logs_dir=args.logs_dir, capture_all=True)
    try:
        if store is None:
            store = build_agency_store(load_app_settings(args.config))
        if args.action == "export":
            result = export_to_file(store, args.agency_id, args.output)
        else:
            result = import_from_file(store, args.agency_id, args.input)
        session_logger.info("%s for agency=%s success=%s", args.action, args.agency_id, result.get("success"))
    finally:
        for handler in list(session_logger.handlers):
            logging.getLogger().removeHandler(handler)
            session_logger.removeHandler(handler)
            handler.close()

    print(json.dumps(result, indent=2))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(main())
