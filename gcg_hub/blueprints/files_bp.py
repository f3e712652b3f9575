"""
Files Blueprint — supporting document uploads.

  GET    /api/files                  — list (?year=, ?checklist_item_id=, ?uploaded_by=, ?search=)
  GET    /api/files/stats/summary    — count, sizes, by type / month (?year=)
  GET    /api/files/<id>             — one record
  GET    /api/files/<id>/download    — stored content as an attachment
  POST   /api/files/upload           — multipart: file, checklist_item_id, year
  DELETE /api/files/<id>             — owner or admin
"""

from flask import Blueprint, g, jsonify, request, send_file

from gcg_hub.middleware.jwt_auth import require_auth
from gcg_hub.services import file_service, statistics_service
from gcg_hub.services.file_service import FileFilter
from gcg_hub.utils.helpers import filter_int

files_bp = Blueprint("files", __name__, url_prefix="/api/files")


@files_bp.route("", methods=["GET"])
@require_auth
def list_files():
    records = file_service.list_files(FileFilter.from_args(request.args))
    return jsonify({"items": [r.to_dict() for r in records], "total": len(records)}), 200


@files_bp.route("/stats/summary", methods=["GET"])
@require_auth
def file_stats():
    year = filter_int(request.args.get("year"), "year")
    return jsonify(statistics_service.file_summary(year)), 200


@files_bp.route("/<int:file_id>", methods=["GET"])
@require_auth
def get_file(file_id):
    return jsonify(file_service.get_file(file_id).to_dict()), 200


@files_bp.route("/<int:file_id>/download", methods=["GET"])
@require_auth
def download_file(file_id):
    record, path = file_service.download_path(file_id)
    return send_file(
        path,
        mimetype=record.mime_type,
        as_attachment=True,
        download_name=record.original_name,
    )


@files_bp.route("/upload", methods=["POST"])
@require_auth
def upload_file():
    record = file_service.upload_file(g.identity, request.files.get("file"), request.form)
    return jsonify(record.to_dict()), 201


@files_bp.route("/<int:file_id>", methods=["DELETE"])
@require_auth
def delete_file(file_id):
    file_service.delete_file(g.identity, file_id)
    return jsonify({"message": "File deleted successfully"}), 200
