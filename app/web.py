# app/web.py
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import HTTPException
from app.service import CatalogService, QueryError, NotFoundError, InvalidRequestError
import logging

logger = logging.getLogger(__name__)

bp = Blueprint("main", __name__, url_prefix="")  # blueprint name = 'main'

def register_routes(app, service: CatalogService):
    """
    Register blueprint and ensure SERVICE is in app.config.
    Call this once during app creation (run.create_app does this).
    """
    if "SERVICE" not in app.config:
        app.config["SERVICE"] = service
    app.register_blueprint(bp)
    logger.debug("Registered blueprint 'main' and injected SERVICE")

def register_middleware(app):
    """Store-liveness gate and CORS headers for every route."""
    @app.before_request
    def require_store():
        if not current_service().is_available():
            logger.warning("Store unavailable, rejecting %s %s", request.method, request.path)
            return error("Service unavailable", 503)

    @app.after_request
    def allow_cors(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return resp

def register_error_handlers(app):
    """JSON bodies for anything the routes did not handle themselves."""
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        messages = {404: "Not found", 405: "Method not allowed"}
        return error(messages.get(e.code, e.name), e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error on %s", request.path)
        return error("Internal server error", 500)

# helper to get service instance
def current_service() -> CatalogService:
    return current_app.config["SERVICE"]

def error(message: str, status: int):
    return jsonify({"error": message}), status

def listing(items):
    data = [i.to_dict() for i in items]
    return jsonify({"length": len(data), "data": data})

# -----------------------
# Index
# -----------------------
@bp.route("/")
def index():
    routes = []
    for rule in current_app.url_map.iter_rules():
        if rule.endpoint == "static":
            continue
        methods = sorted(m for m in rule.methods if m not in ("HEAD", "OPTIONS"))
        routes.append({"path": rule.rule, "methods": methods})
    routes.sort(key=lambda r: r["path"])
    return jsonify(routes)

# -----------------------
# Titles
# -----------------------
@bp.route("/titles")
def titles():
    try:
        return listing(current_service().list_titles())
    except QueryError:
        return error("No results", 400)

@bp.route("/titles/year")
def titles_by_year():
    try:
        return listing(current_service().titles_by_year(request.args.get("year")))
    except QueryError:
        return error("No results", 400)

@bp.route("/titles/cast")
def titles_by_cast():
    try:
        return listing(current_service().titles_by_cast(request.args.get("name")))
    except QueryError:
        return error("No results", 400)

@bp.route("/titles/<title_id>")
def title_detail(title_id: str):
    try:
        t = current_service().get_title(title_id)
    except (NotFoundError, InvalidRequestError, QueryError) as e:
        logger.info("title %s: %s", title_id, e)
        return error("ID not found", 404)
    return jsonify({"data": t.to_dict()})

# -----------------------
# Directors
# -----------------------
@bp.route("/directors")
def directors():
    try:
        return listing(current_service().find_directors(request.args.get("director")))
    except QueryError:
        return error("Director not found", 400)

@bp.route("/directors/<director_id>")
def director_detail(director_id: str):
    svc = current_service()
    try:
        d = svc.get_director(director_id)
    except NotFoundError:
        logger.info("director %s not found", director_id)
        return error("Not found", 404)
    except (InvalidRequestError, QueryError) as e:
        logger.warning("director %s: %s", director_id, e)
        return error("Invalid request", 400)
    return jsonify({"data": d.to_dict()})

@bp.route("/directors/<director_id>/titles")
def director_titles(director_id: str):
    try:
        return listing(current_service().titles_for_director(director_id))
    except (NotFoundError, QueryError) as e:
        logger.info("titles for director %s: %s", director_id, e)
        return error("Director not found", 404)
