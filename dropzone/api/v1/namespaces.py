"""
API Namespaces - Organized endpoint groups
"""

import mimetypes
import posixpath
from io import BytesIO

from flask import current_app, redirect, request, send_file
from flask_restx import Namespace, Resource
from werkzeug.datastructures import FileStorage

from dropzone.api.v1.models import (
    delete_file_response,
    delete_keyword_response,
    download_url_response,
    error_response,
    file_list_response,
    maintenance_response,
    upload_response,
)
from dropzone.application.file_service import FileService, UploadedFile
from dropzone.domain.errors import (
    DomainError,
    ErrorCategory,
    HTTP_STATUS_CODES,
    StorageUnavailableError,
    create_error_response,
)
from dropzone.domain.file_storage import (
    MAX_FILE_SIZE,
    IBlobStorageRepository,
    Keyword,
    SignedUrlService,
)


def _resolve(interface):
    """Resolve a service from the app container."""
    container = getattr(current_app, "container", None)
    if container is None:
        raise StorageUnavailableError("Application services not initialized")
    return container.resolve(interface)


def _domain_error_response(error: DomainError):
    return create_error_response(error.category, str(error))


def _unexpected_error_response(context: str, error: Exception):
    current_app.logger.exception(f"Unexpected error in {context}: {error}")
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR, f"Unexpected error: {error}", status_code=500
    )


# =============================================================================
# Files Namespace - Uploads
# =============================================================================

files_ns = Namespace("files", description="File upload operations")

upload_parser = files_ns.parser()
upload_parser.add_argument(
    "keyword", location="form", required=True, help="Sharing keyword"
)
upload_parser.add_argument(
    "file",
    location="files",
    type=FileStorage,
    required=True,
    action="append",
    help="One or more files (10 MB each at most)",
)


@files_ns.route("")
class FileUpload(Resource):
    """Upload files under a keyword"""

    @files_ns.doc("upload_files")
    @files_ns.expect(upload_parser)
    @files_ns.response(201, "All files stored", upload_response)
    @files_ns.response(207, "Some files rejected", upload_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(409, "File Already Exists", error_response)
    @files_ns.response(413, "File Too Large", error_response)
    @files_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Upload one or more files

        Files are kept for 24 hours. In a batch each file is stored
        independently and reported separately.
        """
        keyword = request.form.get("keyword", "")
        storages = [s for s in request.files.getlist("file") if s and s.filename]

        if not storages:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST, "No file provided", status_code=400
            )

        try:
            # Read one byte past the cap so oversized files are rejected
            # without buffering them whole
            files = [
                UploadedFile(
                    file_name=storage.filename,
                    content_type=storage.mimetype or None,
                    data=storage.read(MAX_FILE_SIZE + 1),
                )
                for storage in storages
            ]

            file_service = _resolve(FileService)
            report = file_service.upload_files(keyword, files)

        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("file upload", e)

        if report.all_succeeded:
            return report.to_dict(), 201

        if len(report.results) == 1:
            failure = report.results[0]
            category = ErrorCategory(failure.error)
            return create_error_response(
                category, failure.message, status_code=HTTP_STATUS_CODES[category]
            )

        return report.to_dict(), 207


# =============================================================================
# Keywords Namespace - Listing, deletion, download links, archives
# =============================================================================

keywords_ns = Namespace("keywords", description="Keyword file operations")


@keywords_ns.route("/<string:keyword>")
@keywords_ns.param("keyword", "The sharing keyword")
class KeywordResource(Resource):
    """Operations on every file of a keyword"""

    @keywords_ns.doc("delete_keyword")
    @keywords_ns.response(200, "Success", delete_keyword_response)
    @keywords_ns.response(400, "Invalid Keyword", error_response)
    @keywords_ns.response(503, "Service Unavailable", error_response)
    def delete(self, keyword):
        """
        Delete every file of a keyword

        Idempotent: returns a count of 0 when nothing is stored.
        """
        try:
            file_service = _resolve(FileService)
            return file_service.delete_keyword(keyword), 200
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("keyword delete", e)


@keywords_ns.route("/<string:keyword>/files")
@keywords_ns.param("keyword", "The sharing keyword")
class KeywordFiles(Resource):
    """List files of a keyword"""

    @keywords_ns.doc("list_files")
    @keywords_ns.response(200, "Success", file_list_response)
    @keywords_ns.response(400, "Invalid Keyword", error_response)
    @keywords_ns.response(503, "Service Unavailable", error_response)
    def get(self, keyword):
        """
        List live files, newest first

        Unknown keywords return an empty list.
        """
        try:
            file_service = _resolve(FileService)
            return file_service.list_files(keyword), 200
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("file listing", e)


@keywords_ns.route("/<string:keyword>/files/<string:file_name>")
@keywords_ns.param("keyword", "The sharing keyword")
@keywords_ns.param("file_name", "The file name")
class KeywordFile(Resource):
    """Operations on a single file"""

    @keywords_ns.doc("delete_file")
    @keywords_ns.response(200, "Success", delete_file_response)
    @keywords_ns.response(400, "Bad Request", error_response)
    @keywords_ns.response(404, "File Not Found", error_response)
    @keywords_ns.response(503, "Service Unavailable", error_response)
    def delete(self, keyword, file_name):
        """Delete one file"""
        try:
            file_service = _resolve(FileService)
            return file_service.delete_file(keyword, file_name), 200
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("file delete", e)


@keywords_ns.route("/<string:keyword>/files/<string:file_name>/download")
@keywords_ns.param("keyword", "The sharing keyword")
@keywords_ns.param("file_name", "The file name")
@keywords_ns.param("redirect", "Set to 'false' to get the URL as JSON", _in="query")
class KeywordFileDownload(Resource):
    """Short-lived download link for a file"""

    @keywords_ns.doc("download_file")
    @keywords_ns.response(200, "Signed URL", download_url_response)
    @keywords_ns.response(302, "Redirect to signed URL")
    @keywords_ns.response(404, "File Not Found", error_response)
    @keywords_ns.response(503, "Service Unavailable", error_response)
    def get(self, keyword, file_name):
        """
        Get a signed download URL

        Redirects to the URL by default. The URL stays valid for its own
        lifetime even if the file is deleted meanwhile.
        """
        try:
            file_service = _resolve(FileService)
            result = file_service.get_download_url(keyword, file_name)
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("download link", e)

        if request.args.get("redirect", "true").lower() == "false":
            return result, 200
        return redirect(result["download_url"], code=302)


@keywords_ns.route("/<string:keyword>/archive")
@keywords_ns.param("keyword", "The sharing keyword")
class KeywordArchive(Resource):
    """ZIP archive of a keyword"""

    @keywords_ns.doc("download_archive")
    @keywords_ns.produces(["application/zip"])
    @keywords_ns.response(200, "ZIP archive")
    @keywords_ns.response(400, "Invalid Keyword", error_response)
    @keywords_ns.response(404, "No Files", error_response)
    @keywords_ns.response(503, "Service Unavailable", error_response)
    def get(self, keyword):
        """Download every live file of a keyword as one ZIP"""
        try:
            file_service = _resolve(FileService)
            archive = file_service.build_archive(keyword)
            download_name = f"{Keyword(keyword).value}.zip"
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("archive", e)

        return send_file(
            BytesIO(archive),
            mimetype="application/zip",
            as_attachment=True,
            download_name=download_name,
        )


# =============================================================================
# Blobs Namespace - Signed downloads served by the local backend
# =============================================================================

blobs_ns = Namespace("blobs", description="Signed blob downloads")


@blobs_ns.route("/<path:blob_path>")
@blobs_ns.param("blob_path", "Blob path (keyword/file_name)")
@blobs_ns.param("expires", "Expiry as unix timestamp", _in="query")
@blobs_ns.param("signature", "HMAC signature", _in="query")
class BlobDownload(Resource):
    """Serve a blob through a signed URL"""

    @blobs_ns.doc("download_blob")
    @blobs_ns.response(200, "File content")
    @blobs_ns.response(403, "Invalid Signature", error_response)
    @blobs_ns.response(404, "File Not Found", error_response)
    @blobs_ns.response(410, "Link Expired", error_response)
    @blobs_ns.response(503, "Service Unavailable", error_response)
    def get(self, blob_path):
        """Download a blob using a signed URL"""
        signature = request.args.get("signature", "")
        try:
            expires = int(request.args.get("expires", ""))
        except ValueError:
            return create_error_response(
                ErrorCategory.FORBIDDEN, "Missing or malformed expiry"
            )

        try:
            signed_url_service = _resolve(SignedUrlService)
            if not signed_url_service.validate_signature(blob_path, expires, signature):
                current_app.logger.warning(f"Invalid signature for blob {blob_path}")
                return create_error_response(
                    ErrorCategory.FORBIDDEN, "Invalid signature"
                )
            if signed_url_service.is_expired(expires):
                return create_error_response(
                    ErrorCategory.FILE_EXPIRED, "Download link has expired"
                )

            storage = _resolve(IBlobStorageRepository)
            content = storage.get(blob_path)
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("blob download", e)

        if content is None:
            return create_error_response(
                ErrorCategory.FILE_NOT_FOUND, f"Blob not found: {blob_path}"
            )

        download_name = posixpath.basename(blob_path)
        mimetype = mimetypes.guess_type(download_name)[0] or "application/octet-stream"
        current_app.logger.info(f"Serving blob {blob_path}")
        return send_file(
            content,
            mimetype=mimetype,
            as_attachment=True,
            download_name=download_name,
        )


# =============================================================================
# Maintenance Namespace - Sweeps
# =============================================================================

maintenance_ns = Namespace("maintenance", description="Maintenance operations")


@maintenance_ns.route("/sweep")
class MaintenanceSweep(Resource):
    """Run the expire sweep and orphan reclamation now"""

    def _run(self):
        try:
            file_service = _resolve(FileService)
            stats = file_service.run_maintenance()
        except DomainError as e:
            return _domain_error_response(e)
        except Exception as e:
            return _unexpected_error_response("maintenance sweep", e)

        return stats, (503 if stats["errors"] else 200)

    @maintenance_ns.doc("run_sweep")
    @maintenance_ns.response(200, "Success", maintenance_response)
    @maintenance_ns.response(503, "A step failed", maintenance_response)
    def post(self):
        """Run the expire sweep"""
        return self._run()

    @maintenance_ns.doc("run_sweep_get")
    @maintenance_ns.response(200, "Success", maintenance_response)
    @maintenance_ns.response(503, "A step failed", maintenance_response)
    def get(self):
        """Run the expire sweep (for cron callers that only issue GET)"""
        return self._run()
