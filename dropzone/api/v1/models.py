"""
API Models for response documentation in Swagger
"""

from flask_restx import fields

from dropzone.api.v1 import api

# =============================================================================
# Response Models
# =============================================================================

file_model = api.model(
    "File",
    {
        "id": fields.String(description="File record identifier"),
        "keyword": fields.String(description="Normalized keyword", example="team-q1"),
        "file_name": fields.String(description="File name", example="report.pdf"),
        "content_type": fields.String(
            description="MIME type reported at upload", example="application/pdf"
        ),
        "size": fields.Integer(description="Size in bytes", min=0),
        "uploaded_at": fields.String(description="Upload time (ISO timestamp)"),
        "expires_at": fields.String(description="Expiry time (ISO timestamp)"),
        "expires_in": fields.Integer(description="Seconds until the file expires"),
    },
)

upload_item = api.model(
    "UploadItem",
    {
        "file_name": fields.String(description="File name as submitted"),
        "success": fields.Boolean(description="Whether the file was stored"),
        "file": fields.Nested(file_model, allow_null=True),
        "error": fields.String(description="Error category if failed", allow_null=True),
        "message": fields.String(description="Error message if failed", allow_null=True),
    },
)

upload_response = api.model(
    "UploadResponse",
    {
        "keyword": fields.String(description="Normalized keyword"),
        "uploaded_count": fields.Integer(description="Files stored"),
        "failed_count": fields.Integer(description="Files rejected"),
        "results": fields.List(fields.Nested(upload_item)),
    },
)

file_list_response = api.model(
    "FileListResponse",
    {
        "keyword": fields.String(description="Normalized keyword"),
        "count": fields.Integer(description="Number of live files"),
        "files": fields.List(fields.Nested(file_model), description="Newest first"),
    },
)

delete_file_response = api.model(
    "DeleteFileResponse",
    {
        "keyword": fields.String(description="Normalized keyword"),
        "file_name": fields.String(description="Deleted file name"),
        "deleted": fields.Boolean(),
        "remaining_files": fields.Integer(description="Live files left under keyword"),
    },
)

delete_keyword_response = api.model(
    "DeleteKeywordResponse",
    {
        "keyword": fields.String(description="Normalized keyword"),
        "deleted_count": fields.Integer(description="File records removed"),
    },
)

download_url_response = api.model(
    "DownloadUrlResponse",
    {
        "keyword": fields.String(description="Normalized keyword"),
        "file_name": fields.String(description="File name"),
        "download_url": fields.String(description="Short-lived signed URL"),
        "expires_in": fields.Integer(description="Seconds until the URL expires"),
    },
)

maintenance_response = api.model(
    "MaintenanceResponse",
    {
        "expired_files_removed": fields.Integer(),
        "orphaned_blobs_reclaimed": fields.Integer(),
        "errors": fields.List(fields.String),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing message"),
        "action": fields.String(description="Suggested action"),
        "detail": fields.String(description="Technical detail", allow_null=True),
    },
)
