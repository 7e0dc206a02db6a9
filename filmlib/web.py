# filmlib/web.py
import functools
import logging

from flask import Blueprint, Response, current_app, jsonify, request

from filmlib.bulk_import import CSV_TEMPLATE, import_films
from filmlib.forms import NotFoundError, ValidationError, film_fields_from_payload, parse_tags
from filmlib.library import SORT_KEYS, LibraryStore
from filmlib.models import Film
from filmlib.session import SessionStore

logger = logging.getLogger(__name__)

bp = Blueprint("main", __name__, url_prefix="")  # blueprint name = 'main'

def register_routes(app, session_store: SessionStore, library: LibraryStore):
    """
    Register blueprint and put both stores in app.config.
    Call this once during app creation (run.create_app does this).
    """
    app.config.setdefault("SESSION_STORE", session_store)
    app.config.setdefault("LIBRARY_STORE", library)
    app.register_blueprint(bp)
    logger.debug("Registered blueprint 'main' and injected stores")

def register_error_handlers(app):
    """Centralized handlers for view-level exceptions."""
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        logger.warning("ValidationError: %s", e)
        return jsonify(error=str(e)), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        logger.info("NotFoundError: %s", e)
        return jsonify(error=str(e)), 404

# helpers to get store instances
def current_session() -> SessionStore:
    return current_app.config["SESSION_STORE"]

def current_library() -> LibraryStore:
    return current_app.config["LIBRARY_STORE"]

def login_required(view):
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        if not current_session().is_authenticated:
            return jsonify(error="login required"), 401
        return view(*args, **kwargs)
    return wrapped

def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data

def _get_film_or_404(film_id: str) -> Film:
    film = current_library().get_film_by_id(film_id)
    if film is None:
        raise NotFoundError("film not found")
    return film

# -----------------------
# Auth
# -----------------------
@bp.route("/signup", methods=["POST"])
def signup():
    data = _payload()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    if not username or not password:
        raise ValidationError("username and password required")
    result = current_session().signup(username, password)
    if not result:
        return jsonify(error="username already exists"), 409
    return jsonify(user=result.session.to_dict()), 201

@bp.route("/login", methods=["POST"])
def login():
    data = _payload()
    remember = str(data.get("remember", "")).lower() in ("1", "true", "on", "yes")
    result = current_session().login(data.get("username") or "", data.get("password") or "", remember)
    if not result:
        return jsonify(error="invalid username or password"), 401
    return jsonify(user=result.session.to_dict(), remember=remember)

@bp.route("/logout", methods=["POST"])
def logout():
    current_session().logout()
    return jsonify(ok=True)

@bp.route("/me")
def me():
    user = current_session().current_user()
    return jsonify(user=user.to_dict() if user else None, authenticated=user is not None)

# -----------------------
# Films
# -----------------------
@bp.route("/films")
@login_required
def films():
    lib = current_library()
    q = request.args.get("q", "")
    result = lib.search_films(q)
    category = request.args.get("category")
    if category:
        result = lib.filter_by_category(result, category, request.args.get("value"))
    else:
        filters = {
            "genre": request.args.get("genre"),
            "year": request.args.get("year"),
            "tags": parse_tags(request.args.get("tags")),
        }
        result = lib.filter_films(result, filters)
    result = lib.sort_films(result, request.args.get("sort", "title"))
    return jsonify(films=[f.to_dict() for f in result])

@bp.route("/films", methods=["POST"])
@login_required
def film_new():
    fields = film_fields_from_payload(_payload())
    film = current_library().add_film(**fields)
    return jsonify(film=film.to_dict()), 201

@bp.route("/films/<film_id>")
@login_required
def film_detail(film_id: str):
    return jsonify(film=_get_film_or_404(film_id).to_dict())

@bp.route("/films/<film_id>", methods=["PUT", "POST"])
@login_required
def film_edit(film_id: str):
    film = _get_film_or_404(film_id)
    fields = film_fields_from_payload(_payload())
    for attr, value in fields.items():
        setattr(film, attr, value)
    current_library().update_film(film)
    return jsonify(film=current_library().get_film_by_id(film_id).to_dict())

@bp.route("/films/<film_id>", methods=["DELETE"])
@login_required
def film_delete(film_id: str):
    current_library().delete_film(film_id)
    return jsonify(ok=True)

# -----------------------
# Bulk import
# -----------------------
@bp.route("/films/import", methods=["POST"])
@login_required
def film_import():
    data = request.get_json(silent=True)
    if data is None:
        text = request.get_data(as_text=True)
    elif isinstance(data, dict):
        text = data.get("csv", "")
    else:
        raise ValidationError("request body must be a JSON object")
    added, ids = import_films(current_library(), text)
    return jsonify(added=added, ids=ids), 201

@bp.route("/films/import/template")
def film_import_template():
    return Response(CSV_TEMPLATE, mimetype="text/csv",
                    headers={"Content-Disposition": "attachment; filename=film_import_template.csv"})

# -----------------------
# Search & stats
# -----------------------
@bp.route("/search")
@login_required
def search():
    lib = current_library()
    q = request.args.get("q", "")
    if not q.strip():
        return jsonify(query=q, films=[])
    results = lib.search_films(q)
    lib.add_search(q)
    return jsonify(query=q, films=[f.to_dict() for f in results])

@bp.route("/searches/recent")
@login_required
def recent_searches():
    return jsonify(searches=current_library().recent_searches)

@bp.route("/stats")
@login_required
def stats():
    lib = current_library()
    most = lib.get_most_added_genre()
    return jsonify(
        total_films=len(lib.films),
        storage_used_percentage=lib.get_storage_used_percentage(),
        most_added_genre={"genre": most.genre, "count": most.count},
        days_since_last_upload=lib.days_since_last_upload(),
        recent_films=[f.to_dict() for f in lib.recent_films()],
    )

@bp.route("/filters")
@login_required
def filter_options():
    lib = current_library()
    return jsonify(genres=lib.distinct_genres(), years=lib.distinct_years(), sort_keys=list(SORT_KEYS))
