from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, render_template

from pastebin.api.pastes import paste_service, request_now, storage_failure
from pastebin.repositories.paste_store import StorageError
from pastebin.services.paste_service import PasteNotFoundError

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/", methods=["GET"])
def index() -> str:
    return render_template("index.html")


@pages_bp.route("/p/<paste_id>", methods=["GET"])
def show_paste(paste_id: str):
    """Render a paste. Counts as a view, exactly like the JSON endpoint."""
    try:
        paste = paste_service().retrieve_paste(paste_id, now=request_now())
    except PasteNotFoundError:
        return render_template("not_found.html"), HTTPStatus.NOT_FOUND
    except StorageError as exc:
        storage_failure(exc, "render")
        return render_template("error.html"), HTTPStatus.INTERNAL_SERVER_ERROR

    return render_template("paste.html", paste_id=paste_id, paste=paste)
