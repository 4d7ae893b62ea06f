# timeline/uploads.py
# Message images on disk under UPLOAD_FOLDER.

from flask import current_app
from werkzeug.utils import secure_filename
import os
import uuid

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def allowed_file(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def save_upload(file) -> str:
    """Store an uploaded image under a random name and return that name."""
    ext = file.filename.rsplit(".", 1)[1].lower()
    filename = secure_filename(f"{uuid.uuid4().hex}.{ext}")
    file.save(os.path.join(current_app.config["UPLOAD_FOLDER"], filename))
    return filename


def remove_upload(filename: str):
    path = os.path.join(current_app.config["UPLOAD_FOLDER"], secure_filename(filename))
    try:
        os.remove(path)
    except FileNotFoundError:
        current_app.logger.warning("Image %s was already gone", filename)
    except OSError:
        current_app.logger.exception("Could not remove image %s", filename)
