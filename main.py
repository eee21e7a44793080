# main.py — albums API + gallery pages + guestbook
import logging
from pathlib import Path

import click
from flask import (
    Blueprint,
    Flask,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    send_from_directory,
    url_for,
)
from flask.cli import with_appcontext

from albums import validate_album_id
from config import BASE_DIR, Settings
from errors import ConfigError, GuestbookError, InvalidAlbumId, StoreError
from guestbook import Guestbook
from snapshot import generate_snapshot
from results import LoadResult
from stores import build_store, load_catalog, supabase_client
from sync import sync_to_store

STATIC_DIR = BASE_DIR / "static"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAX_ERROR_DETAILS = 200

site = Blueprint("site", __name__)


def configure_logging(level: str):
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level)


def error_response(message: str, status: int, details: str | None = None):
    body = {"error": message}
    if details:
        body["details"] = details[:MAX_ERROR_DETAILS]
    return jsonify(body), status


def album_store():
    return current_app.extensions["album_store"]


def guestbook() -> Guestbook | None:
    return current_app.extensions["guestbook"]


# ===== Albums API =====
@site.get("/albums")
def list_albums():
    try:
        summaries = album_store().list_album_summaries()
    except StoreError as exc:
        current_app.logger.exception("Listing albums failed")
        return error_response("Failed to load albums.", 500, str(exc))
    current_app.logger.info("Served %d album summaries", len(summaries))
    return jsonify(summaries)


@site.get("/albums/", defaults={"album_id": ""})
@site.get("/albums/<album_id>")
def get_album(album_id):
    try:
        name = validate_album_id(album_id)
        album = album_store().get_album(name)
    except InvalidAlbumId as exc:
        return error_response(str(exc), 400)
    except StoreError as exc:
        current_app.logger.exception("Loading album %r failed", album_id)
        return error_response("Failed to load album.", 500, str(exc))
    if album is None:
        return error_response(f"Album {name!r} not found.", 404)
    return jsonify({"images": list(album.images)})


# ===== Guestbook API =====
@site.get("/messages")
def list_messages():
    gb = guestbook()
    if gb is None:
        return error_response("Guestbook is not configured.", 503)
    try:
        return jsonify(gb.entries())
    except GuestbookError as exc:
        current_app.logger.exception("Listing messages failed")
        return error_response("Failed to load messages.", 500, str(exc))


@site.post("/messages")
def create_message():
    gb = guestbook()
    if gb is None:
        return error_response("Guestbook is not configured.", 503)
    payload = request.get_json(silent=True) or request.form
    try:
        gb.add_entry(payload.get("name", ""), payload.get("message", ""))
    except ValueError as exc:
        return error_response(str(exc), 400)
    except GuestbookError as exc:
        current_app.logger.exception("Saving message failed")
        return error_response("Failed to save message.", 500, str(exc))
    return jsonify({"status": "created"}), 201


# ===== Pages =====
def load_guestbook() -> LoadResult:
    gb = guestbook()
    if gb is None:
        return LoadResult(error="Guestbook is not configured.")
    return gb.load_entries()


@site.route("/")
def index():
    return render_template(
        "index.html", catalog=load_catalog(album_store()), guestbook=load_guestbook()
    )


@site.route("/gallery/<album_id>", endpoint="gallery")
def gallery(album_id):
    try:
        album = album_store().get_album(validate_album_id(album_id))
    except InvalidAlbumId:
        return render_template("album.html", name=album_id, album=None), 400
    except StoreError as exc:
        current_app.logger.exception("Loading album %r failed", album_id)
        return render_template("album.html", name=album_id, album=None, error=str(exc)), 500
    if album is None:
        return render_template("album.html", name=album_id, album=None), 404
    return render_template("album.html", name=album.name, album=album)


@site.route("/guest-list", endpoint="guest_list")
def guest_list():
    return render_template("guest_list.html", guestbook=load_guestbook())


@site.route("/guest/create", methods=["GET"], endpoint="guest_create")
def guest_create():
    return render_template("guest_create.html")


@site.route("/write", methods=["POST"])
def write():
    gb = guestbook()
    if gb is None:
        flash("The guestbook is not available right now.")
        return redirect(url_for("site.guest_list"))
    try:
        gb.add_entry(request.form.get("name", ""), request.form.get("message", ""))
    except ValueError:
        flash("Please fill in both your name and a message.")
        return redirect(url_for("site.guest_create"))
    except GuestbookError:
        current_app.logger.exception("Saving message failed")
        flash("Your message could not be saved. Please try again.")
        return redirect(url_for("site.guest_create"))
    return redirect(url_for("site.guest_list"))


@site.get("/ping")
def ping():
    return "ok", 200


# ===== Cache buster =====
@site.app_context_processor
def inject_versions():
    def ver_static(rel_path: str):
        p = STATIC_DIR / rel_path
        try:
            return int(p.stat().st_mtime)
        except OSError:
            return 0
    return {"ver_static": ver_static}


# ===== No caching (changes show up immediately) =====
@site.after_app_request
def add_no_cache_headers(resp):
    resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"
    return resp


# ===== Batch jobs =====
@click.command("generate-snapshot")
@click.option("--image-root", type=click.Path(path_type=Path), help="Album folders to scan.")
@click.option("--output", type=click.Path(path_type=Path), help="Where to write albums.json.")
@with_appcontext
def generate_snapshot_command(image_root, output):
    """Write the albums.json snapshot from the image folders."""
    settings = current_app.config["SETTINGS"]
    try:
        document = generate_snapshot(
            image_root or settings.image_root,
            output or settings.snapshot_path,
            settings.public_prefix,
            settings.placeholder_url,
        )
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Generated albums: {', '.join(document) or '(none)'}")


@click.command("sync-albums")
@click.option("--image-root", type=click.Path(path_type=Path), help="Album folders to scan.")
@with_appcontext
def sync_albums_command(image_root):
    """Upsert the image folders into the Supabase albums/images tables."""
    settings = current_app.config["SETTINGS"]
    try:
        client = current_app.extensions.get("supabase") or supabase_client(settings)
        report = sync_to_store(
            image_root or settings.image_root,
            client,
            settings.public_prefix,
            settings.placeholder_url,
        )
    except (ConfigError, StoreError) as exc:
        raise click.ClickException(str(exc)) from exc
    if not report.ok:
        raise click.ClickException(f"Failed to sync albums: {', '.join(report.failed)}")
    click.echo(
        f"Synced {len(report.inserted) + len(report.updated)} albums ({report.images} images)"
    )


# ===== App factory =====
def create_app(settings: Settings | None = None, store=None, guestbook=None, client=None):
    """
    Build the Flask app. Configuration is validated here, so a bad
    ALBUM_STORE or missing Supabase credentials fail at startup.
    """
    settings = (settings or Settings.from_env()).validate()
    configure_logging(settings.log_level)

    app = Flask(__name__, static_folder=str(STATIC_DIR), template_folder="templates")
    app.secret_key = settings.secret_key
    app.config["SETTINGS"] = settings
    # keep album order as the store returns it
    app.json.sort_keys = False

    if client is None and settings.has_supabase and (store is None or guestbook is None):
        client = supabase_client(settings)
    app.extensions["supabase"] = client
    app.extensions["album_store"] = store or build_store(settings, client)
    if guestbook is None and client is not None:
        guestbook = Guestbook(client, settings.guestbook_table, settings.display_timezone)
    app.extensions["guestbook"] = guestbook

    image_root = settings.image_root

    def album_image(filename):
        return send_from_directory(image_root, filename)

    app.add_url_rule(
        f"{settings.public_prefix.rstrip('/')}/<path:filename>", "album_image", album_image
    )
    app.register_blueprint(site)
    app.cli.add_command(generate_snapshot_command)
    app.cli.add_command(sync_albums_command)

    app.logger.info(
        "Album store: %s, guestbook: %s",
        settings.album_store, "on" if guestbook is not None else "off",
    )
    return app


# ===== Development =====
if __name__ == "__main__":
    create_app().run(debug=True, use_reloader=False)
