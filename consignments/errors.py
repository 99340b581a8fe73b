from flask import jsonify, render_template, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from consignments.extensions import db


class AppError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


def _wants_json():
    return request.path.startswith("/api/")


def _database_message(err):
    return str(getattr(err, "orig", None) or err)


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        if _wants_json():
            return jsonify({"error": err.message}), err.status_code
        return render_template("error.html", message=err.message), err.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err):
        db.session.rollback()
        app.logger.warning("Database integrity error: %s", _database_message(err))
        if _wants_json():
            return jsonify({"error": "Conflict. Resource already exists."}), 409
        return render_template("error.html", message="Conflict. Resource already exists."), 409

    # Data-store failures surface the driver message to API callers.
    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(err):
        db.session.rollback()
        message = _database_message(err)
        app.logger.error("Database error on %s %s: %s", request.method, request.path, message)
        if _wants_json():
            return jsonify({"error": message}), 500
        return render_template("error.html", message="Something went wrong."), 500

    @app.errorhandler(400)
    def bad_request(_err):
        if _wants_json():
            return jsonify({"error": "Bad request"}), 400
        return render_template("error.html", message="Bad request"), 400

    @app.errorhandler(401)
    def unauthorized(_err):
        if _wants_json():
            return jsonify({"error": "Unauthorized"}), 401
        return render_template("error.html", message="Unauthorized"), 401

    @app.errorhandler(403)
    def forbidden(_err):
        if _wants_json():
            return jsonify({"error": "Forbidden"}), 403
        return render_template("error.html", message="Forbidden"), 403

    @app.errorhandler(404)
    def not_found(_err):
        if _wants_json():
            return jsonify({"error": "Not found"}), 404
        return render_template("error.html", message="Page not found"), 404

    @app.errorhandler(405)
    def method_not_allowed(_err):
        if _wants_json():
            return jsonify({"error": "Method not allowed"}), 405
        return render_template("error.html", message="Method not allowed"), 405

    @app.errorhandler(413)
    def payload_too_large(_err):
        if _wants_json():
            return jsonify({"error": "Upload too large"}), 413
        return render_template("error.html", message="Upload too large"), 413

    @app.errorhandler(500)
    def server_error(_err):
        app.logger.exception("Internal server error")
        if _wants_json():
            return jsonify({"error": "Internal server error"}), 500
        return render_template("error.html", message="Something went wrong."), 500
