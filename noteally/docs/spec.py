# noteally/docs/spec.py
from apispec import APISpec
from apispec.ext.marshmallow import MarshmallowPlugin
from marshmallow import Schema, fields

from noteally.auth.schemas import RegisterIn, LoginIn, TokenPairOut, MeOut
from noteally.notes.schemas import NoteOut, StatsOut
from noteally.ai.schemas import ProcessPdfIn, SummaryOut


class MessageSchema(Schema):
    status = fields.String()
    message = fields.String()


class ErrorSchema(Schema):
    code = fields.String()
    message = fields.String()
    details = fields.Dict()


def _ref(name: str):
    return {"$ref": f"#/components/schemas/{name}"}


def _json(name: str, description: str = "OK"):
    return {"description": description, "content": {"application/json": {"schema": _ref(name)}}}


_NOTE_ID = {"in": "path", "name": "id", "required": True, "schema": {"type": "string", "format": "uuid"}}
_BEARER = [{"bearerAuth": []}]
_PDF_FORM = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "subject": {"type": "string"},
        "summarize": {"type": "boolean"},
        "file": {"type": "string", "format": "binary"},
    },
    "required": ["title", "subject", "file"],
}


def build_spec():
    spec = APISpec(
        title="Noteally API",
        version="1.0.0",
        openapi_version="3.0.3",
        info={"description": "Partage de notes PDF entre étudiants + résumés IA — OpenAPI spec"},
        plugins=[MarshmallowPlugin()],
    )

    # Sécurité JWT Bearer
    spec.components.security_scheme(
        "bearerAuth",
        {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
    )

    # Composants
    spec.components.schema("Register", schema=RegisterIn)
    spec.components.schema("Login", schema=LoginIn)
    spec.components.schema("TokenPair", schema=TokenPairOut)
    spec.components.schema("Me", schema=MeOut)
    spec.components.schema("NoteOut", schema=NoteOut)
    spec.components.schema("Stats", schema=StatsOut)
    spec.components.schema("ProcessPdf", schema=ProcessPdfIn)
    spec.components.schema("Summary", schema=SummaryOut)
    spec.components.schema("Message", schema=MessageSchema)
    spec.components.schema("Error", schema=ErrorSchema)

    # ---- AUTH ----
    spec.path(
        path="/api/v1/auth/register",
        operations={
            "post": {
                "summary": "Register",
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("Register")}}},
                "responses": {"201": _json("TokenPair", "Created"), "409": _json("Error", "Already exists")},
            }
        },
    )
    spec.path(
        path="/api/v1/auth/login",
        operations={
            "post": {
                "summary": "Login",
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("Login")}}},
                "responses": {"200": _json("TokenPair"), "401": _json("Error", "Invalid credentials")},
            }
        },
    )
    spec.path(
        path="/api/v1/auth/me",
        operations={
            "get": {
                "summary": "Get current user",
                "security": _BEARER,
                "responses": {"200": _json("Me"), "401": {"description": "Unauthorized"}},
            }
        },
    )
    spec.path(
        path="/api/v1/auth/refresh",
        operations={
            "post": {
                "summary": "Rotate refresh token",
                "security": _BEARER,
                "responses": {"200": _json("TokenPair")},
            }
        },
    )
    spec.path(
        path="/api/v1/auth/logout",
        operations={
            "post": {
                "summary": "Revoke current token",
                "security": _BEARER,
                "responses": {"200": _json("Message")},
            }
        },
    )

    # ---- AI ----
    spec.path(
        path="/api/v1/ai/process-pdf",
        operations={
            "post": {
                "summary": "Summarize a PDF by URL",
                "security": _BEARER,
                "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("ProcessPdf")}}},
                "responses": {
                    "200": _json("Summary"),
                    "400": _json("Error", "Invalid input or download failed"),
                    "422": _json("Error", "Unreadable PDF or not enough text"),
                    "502": _json("Error", "AI provider failed"),
                },
            }
        },
    )
    spec.path(
        path="/api/v1/ai/short-summary",
        operations={
            "post": {
                "summary": "Summarize an uploaded PDF",
                "security": _BEARER,
                "requestBody": {"required": True, "content": {"multipart/form-data": {"schema": {
                    "type": "object",
                    "properties": {"file": {"type": "string", "format": "binary"}},
                    "required": ["file"],
                }}}},
                "responses": {
                    "200": _json("Summary"),
                    "400": _json("Error", "Invalid input"),
                    "422": _json("Error", "Unreadable PDF or not enough text"),
                    "502": _json("Error", "AI provider failed"),
                },
            }
        },
    )

    # ---- NOTES ----
    spec.path(
        path="/api/v1/notes/",
        operations={
            "post": {
                "summary": "Upload a note (PDF)",
                "security": _BEARER,
                "requestBody": {"required": True, "content": {"multipart/form-data": {"schema": _PDF_FORM}}},
                "responses": {"201": _json("NoteOut", "Created"), "400": _json("Error", "Invalid input")},
            },
            "get": {
                "summary": "Shared notes feed (paginated, newest first)",
                "parameters": [
                    {"in": "query", "name": "q", "schema": {"type": "string"}},
                    {"in": "query", "name": "subject", "schema": {"type": "string"}},
                    {"in": "query", "name": "page", "schema": {"type": "integer"}},
                    {"in": "query", "name": "per_page", "schema": {"type": "integer"}},
                ],
                "responses": {"200": {"description": "Paged list"}},
            },
        },
    )
    spec.path(
        path="/api/v1/notes/subjects",
        operations={"get": {"summary": "Distinct subjects", "responses": {"200": {"description": "OK"}}}},
    )
    spec.path(
        path="/api/v1/notes/mine",
        operations={
            "get": {
                "summary": "My notes (paginated)",
                "security": _BEARER,
                "responses": {"200": {"description": "Paged list"}},
            }
        },
    )
    spec.path(
        path="/api/v1/notes/stats",
        operations={
            "get": {
                "summary": "My dashboard stats",
                "security": _BEARER,
                "responses": {"200": _json("Stats")},
            }
        },
    )
    spec.path(
        path="/api/v1/notes/{id}",
        operations={
            "get": {
                "summary": "Get note by id",
                "parameters": [_NOTE_ID],
                "responses": {"200": _json("NoteOut"), "404": _json("Error", "Not found")},
            },
            "delete": {
                "summary": "Delete my note",
                "security": _BEARER,
                "parameters": [_NOTE_ID],
                "responses": {"204": {"description": "No content"}, "403": _json("Error", "Forbidden")},
            },
        },
    )
    spec.path(
        path="/api/v1/notes/{id}/like",
        operations={
            "post": {
                "summary": "Toggle like",
                "security": _BEARER,
                "parameters": [_NOTE_ID],
                "responses": {"200": {"description": "{liked, note}"}, "404": _json("Error", "Not found")},
            }
        },
    )
    spec.path(
        path="/api/v1/notes/{id}/view",
        operations={
            "post": {
                "summary": "Count a download / view",
                "parameters": [_NOTE_ID],
                "responses": {"200": {"description": "{id, views}"}, "404": _json("Error", "Not found")},
            }
        },
    )
    spec.path(
        path="/api/v1/notes/{id}/summary",
        operations={
            "post": {
                "summary": "Start AI summary generation for a note",
                "security": _BEARER,
                "parameters": [_NOTE_ID],
                "responses": {"202": _json("NoteOut", "Accepted"), "409": _json("Error", "Already pending")},
            }
        },
    )

    return spec.to_dict()
