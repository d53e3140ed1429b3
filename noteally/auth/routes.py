from flask import Blueprint, request, jsonify
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity, get_jwt
)
import uuid

from noteally.extensions import db
from noteally.users.models import User
from noteally.auth.models import TokenBlocklist
from noteally.auth.schemas import RegisterIn, LoginIn, TokenPairOut, MeOut
from noteally.auth.service import create_user, authenticate_user
from noteally.common.errors import ApiError

bp = Blueprint("auth", __name__)

register_in = RegisterIn()
login_in = LoginIn()
tokens_out = TokenPairOut()
me_out = MeOut()


def _issue_tokens(user: User, fresh: bool = True) -> dict:
    """Émet un couple {access, refresh} avec des claims homogènes."""
    identity = str(user.id)
    claims = {"email": user.email}
    access_token = create_access_token(identity=identity, additional_claims=claims, fresh=fresh)
    refresh_token = create_refresh_token(identity=identity, additional_claims=claims)
    return {"access_token": access_token, "refresh_token": refresh_token}


def _user_from_identity(identity: str) -> User:
    """Convertit sub->UUID, charge l'utilisateur, vérifie activité.
       Lève ApiError en cas de problème.
    """
    try:
        uid = uuid.UUID(identity)
    except (TypeError, ValueError):
        raise ApiError("Invalid token subject.", 422, "token_invalid_sub")

    user = db.session.get(User, uid)
    if not user:
        raise ApiError("User not found.", 404, "not_found")
    if not user.is_active:
        raise ApiError("User not found or inactive.", 403, "user_inactive")
    return user


@bp.post("/register")
def register():
    payload = request.get_json(silent=True) or {}
    data = register_in.load(payload)

    user = create_user(data["email"], data["password"], data.get("display_name"))

    toks = _issue_tokens(user, fresh=True)
    return jsonify(tokens_out.dump(toks)), 201


@bp.post("/login")
def login():
    payload = request.get_json(silent=True) or {}
    data = login_in.load(payload)

    user = authenticate_user(data["email"], data["password"])

    toks = _issue_tokens(user, fresh=True)
    return jsonify(tokens_out.dump(toks)), 200


@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    """Rotation stricte du refresh:
    - révoque le refresh courant (jti),
    - renvoie un NOUVEAU couple {access, refresh}.
    """
    j = get_jwt()
    user = _user_from_identity(j["sub"])

    # révoquer l'ancien refresh (idempotent)
    TokenBlocklist.revoke(j)

    toks = _issue_tokens(user, fresh=False)
    return jsonify(tokens_out.dump(toks)), 200


@bp.get("/me")
@jwt_required()
def me():
    user = _user_from_identity(get_jwt_identity())
    return jsonify(me_out.dump(user)), 200


@bp.post("/logout")
@jwt_required(verify_type=False)  # accepte access ou refresh
def logout():
    j = get_jwt()
    ttype = j["type"]  # "access" | "refresh"

    # idempotent
    TokenBlocklist.revoke(j)

    return jsonify({"status": "success", "message": f"{ttype} token revoked"}), 200
