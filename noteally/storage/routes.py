from flask import Blueprint, current_app, send_from_directory

from noteally.common.errors import ApiError
from noteally.storage.backends import LocalStorage

bp = Blueprint("files", __name__)


@bp.get("/files/<path:key>")
def download(key):
    storage = current_app.extensions["storage"]
    if not isinstance(storage, LocalStorage):
        raise ApiError("Not found.", 404, "not_found")
    # send_from_directory refuse les chemins hors du dossier racine
    return send_from_directory(storage.root, key, mimetype="application/pdf")
