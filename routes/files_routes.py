import mimetypes
import posixpath

from flask import Blueprint, request, send_file
from flask_login import login_required

from services.storage import get_file_url, get_object_store
from utils.decorators import current_principal
from utils.errors import ServiceError
from utils.responses import respond, error, STATUS_BY_KIND

files_bp = Blueprint("files", __name__, url_prefix="/files")


@files_bp.route("/url")
@login_required
def file_url():
    bucket = request.args.get("bucket")
    path = request.args.get("path")
    if not bucket or not path:
        return error("bucket and path are required", 400)
    return respond(get_file_url(current_principal(), bucket, path))


# The token is the credential; no session needed
@files_bp.route("/download")
def download():
    token = request.args.get("token")
    if not token:
        return error("token is required", 400)

    store = get_object_store()
    try:
        bucket, path = store.verify(token)
        stream = store.open(bucket, path)
    except ServiceError as exc:
        return error(exc.message, STATUS_BY_KIND.get(exc.kind, 500))

    name = posixpath.basename(path)
    return send_file(
        stream,
        as_attachment=True,
        download_name=name,
        mimetype=mimetypes.guess_type(name)[0] or "application/octet-stream"
    )
