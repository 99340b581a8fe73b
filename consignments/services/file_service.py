from PIL import Image, UnidentifiedImageError
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from consignments.errors import AppError
from consignments.extensions import db
from consignments.integrations.storage import StorageError, get_storage
from consignments.models import Document
from consignments.models.document import DOCUMENT_TYPES
from consignments.services.common import epoch_ms, parse_int, random_suffix

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "webp"}


def _extension(filename):
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


class FileService:
    @staticmethod
    def document_key(document_type, filename):
        ext = _extension(filename) or "bin"
        return f"{document_type}/{epoch_ms()}_{random_suffix()}.{ext}"

    @staticmethod
    def key_from_url(file_url, bucket):
        """Recover the storage key from a public URL (the part after ``<bucket>/``)."""
        marker = f"{bucket}/"
        if not file_url or marker not in file_url:
            return None
        return file_url.split(marker, 1)[1]

    @staticmethod
    def upload_document(storage: FileStorage, form, uploaded_by=None):
        if not storage or not storage.filename:
            raise AppError("File is required", 400)
        document_type = (form.get("document_type") or "").strip()
        title = (form.get("title") or "").strip()
        if not document_type or not title:
            raise AppError("Document type and title are required", 400)
        if document_type not in DOCUMENT_TYPES:
            raise AppError("Invalid document type.", 400)

        bucket = current_app.config["DOCUMENTS_BUCKET"]
        key = FileService.document_key(document_type, storage.filename)
        backend = get_storage()

        data = storage.stream.read()
        storage.stream.seek(0)
        try:
            file_url = backend.save(bucket, key, storage.stream, content_type=storage.mimetype)
        except StorageError as exc:
            current_app.logger.error("Document upload failed for %s: %s", key, exc)
            raise AppError("Failed to upload file", 500) from exc

        document = Document(
            document_type=document_type,
            title=title,
            description=form.get("description"),
            file_name=storage.filename,
            file_url=file_url,
            storage_key=key,
            file_size=len(data),
            mime_type=storage.mimetype,
            asset_id=parse_int(form.get("asset_id"), "asset_id"),
            owner_id=parse_int(form.get("owner_id"), "owner_id"),
            booking_id=parse_int(form.get("booking_id"), "booking_id"),
            renter_id=parse_int(form.get("renter_id"), "renter_id"),
            expense_id=parse_int(form.get("expense_id"), "expense_id"),
            uploaded_by=parse_int(form.get("uploaded_by"), "uploaded_by", uploaded_by),
            status="active",
        )
        try:
            db.session.add(document)
            db.session.commit()
        except Exception:
            db.session.rollback()
            backend.remove(bucket, key)
            current_app.logger.error("Document row insert failed; removed stored file %s", key)
            raise
        return document

    @staticmethod
    def list_documents(document_type=None, asset_id=None, owner_id=None, renter_id=None):
        query = Document.query.order_by(Document.created_at.desc(), Document.id.desc())
        if document_type:
            query = query.filter(Document.document_type == document_type)
        if asset_id:
            query = query.filter(Document.asset_id == asset_id)
        if owner_id:
            query = query.filter(Document.owner_id == owner_id)
        if renter_id:
            query = query.filter(Document.renter_id == renter_id)
        return query.all()

    @staticmethod
    def delete_document(document_id):
        document = db.session.get(Document, document_id)
        if document is None:
            return False
        bucket = current_app.config["DOCUMENTS_BUCKET"]
        key = document.storage_key or FileService.key_from_url(document.file_url, bucket)
        if key:
            get_storage().remove(bucket, key)
        db.session.delete(document)
        db.session.commit()
        return True

    @staticmethod
    def save_asset_image(storage: FileStorage, asset_id):
        if not storage or not storage.filename:
            raise AppError("Image is required", 400)

        filename = secure_filename(storage.filename)
        extension = _extension(filename)
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise AppError("Unsupported image format.", 400)

        try:
            img = Image.open(storage.stream)
            img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise AppError("Invalid image file.", 400) from exc
        storage.stream.seek(0)

        key = f"{asset_id}/{epoch_ms()}_{random_suffix()}.{extension}"
        try:
            return get_storage().save(
                current_app.config["ASSET_IMAGES_BUCKET"], key, storage.stream, content_type=storage.mimetype
            )
        except StorageError as exc:
            raise AppError("Failed to upload image", 500) from exc
