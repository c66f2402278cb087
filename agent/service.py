from flask import Flask, jsonify, request
from flask_cors import CORS

from api_client import RemoteUnavailableError
from app_settings import load_app_settings
from auth_service import InvalidCredentialsError, SessionManager
from bulk_transfer import export_agency_data, import_agency_data
from repositories.agency_store import COLLECTIONS
from repositories.key_value_cache import CacheWriteError
from repositories.repo_factory import build_agency_store, build_api_client
from tenancy import NoTenantError

AGENT_VERSION = "0.1.0"


def create_agent_app(settings=None, store=None, session=None):
    app = Flask(__name__)
    CORS(app)

    if store is None or session is None:
        settings = settings or load_app_settings()
    if store is None:
        store = build_agency_store(settings)
    if session is None:
        api_client = store.api_client or build_api_client(settings)
        session = SessionManager(
            store.cache,
            store,
            api_client=api_client,
            allow_demo_login=settings.feature_flags.use_demo_login,
        )

    def _fail(message, status):
        return jsonify({"success": False, "message": message}), status

    def _json_body():
        return request.get_json(silent=True)

    @app.errorhandler(NoTenantError)
    def _no_tenant(exc):
        return _fail(str(exc), 401)

    @app.errorhandler(CacheWriteError)
    def _cache_write_failed(exc):
        app.logger.error("[AGENT] Cache write failed: %s", exc)
        return _fail(str(exc), 500)

    @app.route("/health", methods=["GET"])
    def health():
        ctx = session.context()
        return jsonify({
            "success": True,
            "status": "ok",
            "agent_version": AGENT_VERSION,
            "agency_id": ctx.agency_id,
            "remote_students": store.api_client is not None,
        })

    @app.route("/session/login", methods=["POST"])
    def session_login():
        payload = _json_body() or {}
        email = str(payload.get("email", "")).strip()
        password = str(payload.get("password", ""))
        if not email or not password:
            return _fail("email and password are required", 400)
        try:
            user = session.login(email, password)
        except InvalidCredentialsError as exc:
            return _fail(str(exc), 401)
        except RemoteUnavailableError as exc:
            return _fail(str(exc), 502)
        return jsonify({"success": True, "user": user})

    @app.route("/session/register", methods=["POST"])
    def session_register():
        payload = _json_body() or {}
        name = str(payload.get("name", "")).strip()
        email = str(payload.get("email", "")).strip()
        agency_name = str(payload.get("agency_name", "")).strip()
        if not name or not email or not agency_name:
            return _fail("name, email and agency_name are required", 400)
        user = session.register_agency(name, email, agency_name, payload.get("password") or None)
        return jsonify({"success": True, "user": user})

    @app.route("/session/logout", methods=["POST"])
    def session_logout():
        session.logout()
        return jsonify({"success": True, "message": "Signed out"})

    @app.route("/session/me", methods=["GET"])
    def session_me():
        return jsonify({"success": True, "user": session.restore_session()})

    @app.route("/data/<collection>", methods=["GET"])
    def data_get(collection):
        if collection not in COLLECTIONS:
            return _fail(f"Unknown collection: {collection}", 404)
        return jsonify({"success": True, "items": store.fetch(session.context(), collection)})

    @app.route("/data/<collection>", methods=["PUT"])
    def data_put(collection):
        if collection not in COLLECTIONS:
            return _fail(f"Unknown collection: {collection}", 404)
        payload = _json_body()
        items = payload.get("items") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            return _fail("Body must be a list of items or {\"items\": [...]}", 400)
        store.save(session.context(), collection, items)
        return jsonify({"success": True, "count": len(items)})

    @app.route("/settings", methods=["GET"])
    def settings_get():
        return jsonify({"success": True, "settings": store.fetch_settings(session.context())})

    @app.route("/settings", methods=["PUT"])
    def settings_put():
        payload = _json_body()
        if not isinstance(payload, dict):
            return _fail("Settings must be a JSON object", 400)
        store.save_settings(session.context(), payload)
        return jsonify({"success": True, "settings": payload})

    @app.route("/data/export", methods=["GET"])
    def data_export():
        return jsonify(export_agency_data(store, session.context()))

    @app.route("/data/import", methods=["POST"])
    def data_import():
        ctx = session.context()
        if not ctx.agency_id:
            return _fail("No Agency ID", 401)
        ok = import_agency_data(store, ctx, request.get_data())
        if not ok:
            return _fail("Import failed", 400)
        return jsonify({"success": True, "message": "Import complete"})

    @app.route("/data/clear", methods=["POST"])
    def data_clear():
        store.clear(session.context())
        return jsonify({"success": True, "message": "Local data cleared."})

    return app
