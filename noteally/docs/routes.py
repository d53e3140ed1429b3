# noteally/docs/routes.py
from flask import Blueprint, jsonify, make_response
from .spec import build_spec

bp = Blueprint("docs", __name__)

SWAGGER_UI_CDN = "https://unpkg.com/swagger-ui-dist@5"

@bp.get("/openapi.json")
def openapi_json():
    return jsonify(build_spec())

@bp.get("/docs")
def swagger_ui():
    html = f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8"/>
    <title>Noteally API — Docs</title>
    <link rel="stylesheet" href="{SWAGGER_UI_CDN}/swagger-ui.css" />
  </head>
  <body>
    <div id="swagger"></div>
    <script src="{SWAGGER_UI_CDN}/swagger-ui-bundle.js"></script>
    <!-- init externalisé (CSP: pas de script inline) -->
    <script src="/static/swagger/docs.js"></script>
    <noscript>Enable JavaScript to view the API docs.</noscript>
  </body>
</html>"""
    return make_response(html, 200)
