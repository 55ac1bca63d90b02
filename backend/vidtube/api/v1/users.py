"""User account, session and channel endpoints."""

from __future__ import annotations

from contextlib import ExitStack

from flask import Blueprint, current_app, request

from vidtube.api.deps import account_service, api_response, channel_service, media_settings, timing
from vidtube.api.session import (
    clear_refresh_cookie,
    clear_session_cookies,
    current_identity,
    require_auth,
    set_identity,
    set_session_cookies,
)
from vidtube.infra.media import stage_upload
from vidtube.schemas import (
    ChangePasswordSchema,
    ChannelProfileSchema,
    LoginResultSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UpdateAccountSchema,
    UserSchema,
    WatchedVideoSchema,
)
from vidtube.services.accounts.dto import (
    ChangePasswordIn,
    LoginIn,
    RegisterIn,
    UpdateProfileIn,
)

bp = Blueprint("users", __name__)

user_schema = UserSchema()
register_schema = RegisterSchema()
login_schema = LoginSchema()
login_result_schema = LoginResultSchema()
refresh_schema = RefreshTokenSchema()
token_pair_schema = TokenPairSchema()
change_password_schema = ChangePasswordSchema()
update_account_schema = UpdateAccountSchema()
channel_profile_schema = ChannelProfileSchema()
watched_video_list_schema = WatchedVideoSchema(many=True)


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


# ------------------------------------------------------------------------- #
# Registration & session
# ------------------------------------------------------------------------- #


@bp.post("/register")
@timing
def register():
    """Create an account from a multipart form with ``avatar`` and optional ``coverImage``."""

    form = register_schema.load(request.form.to_dict())
    tmp_dir = media_settings().upload_tmp_dir
    with ExitStack() as stack:
        avatar = stack.enter_context(stage_upload(request.files.get("avatar"), tmp_dir))
        cover = stack.enter_context(stage_upload(request.files.get("coverImage"), tmp_dir))
        user = account_service().register(
            RegisterIn(
                full_name=form["full_name"],
                email=form["email"],
                username=form["username"],
                password=form["password"],
                avatar_path=avatar,
                cover_image_path=cover,
            )
        )
    return api_response(user_schema.dump(user), "User registered successfully", status=201)


@bp.post("/login")
@timing
def login():
    payload = login_schema.load(_json_body())
    result = account_service().login(
        LoginIn(
            email=payload["email"],
            username=payload["username"],
            password=payload["password"],
        )
    )
    response = api_response(login_result_schema.dump(result), "User logged in successfully")
    return set_session_cookies(
        response, access_token=result.access_token, refresh_token=result.refresh_token
    )


@bp.post("/logout")
@require_auth
@timing
def logout():
    identity = current_identity()
    account_service(identity.id).logout(identity.id)
    response = api_response({}, "User logged out successfully")
    return clear_session_cookies(response)


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token taken from the cookie, or from the JSON body."""

    cookie_name = current_app.config.get("JWT_REFRESH_COOKIE_NAME", "refreshToken")
    token = request.cookies.get(cookie_name) or refresh_schema.load(_json_body())["refresh_token"]
    pair = account_service().refresh_session(token)
    response = api_response(token_pair_schema.dump(pair), "Access token refreshed")
    return set_session_cookies(
        response, access_token=pair.access_token, refresh_token=pair.refresh_token
    )


# ------------------------------------------------------------------------- #
# Account
# ------------------------------------------------------------------------- #


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Change the password; the stored refresh token is revoked as well."""

    identity = current_identity()
    payload = change_password_schema.load(_json_body())
    account_service(identity.id).change_password(
        ChangePasswordIn(
            user_id=identity.id,
            old_password=payload["old_password"],
            new_password=payload["new_password"],
        )
    )
    response = api_response({}, "Password changed successfully")
    return clear_refresh_cookie(response)


@bp.get("/current-user")
@require_auth
@timing
def current_user():
    return api_response(user_schema.dump(current_identity()), "Current user fetched successfully")


@bp.patch("/update-account-details")
@require_auth
@timing
def update_account_details():
    identity = current_identity()
    payload = update_account_schema.load(_json_body())
    user = account_service(identity.id).update_profile(
        UpdateProfileIn(
            user_id=identity.id,
            full_name=payload["full_name"],
            email=payload["email"],
            username=payload["username"],
        )
    )
    set_identity(user)
    return api_response(user_schema.dump(user), "Account details updated successfully")


@bp.patch("/avatar")
@require_auth
@timing
def update_avatar():
    identity = current_identity()
    with stage_upload(request.files.get("avatar"), media_settings().upload_tmp_dir) as path:
        user = account_service(identity.id).update_avatar(identity.id, path)
    set_identity(user)
    return api_response(user_schema.dump(user), "Avatar updated successfully")


@bp.patch("/cover-image")
@require_auth
@timing
def update_cover_image():
    identity = current_identity()
    with stage_upload(request.files.get("coverImage"), media_settings().upload_tmp_dir) as path:
        user = account_service(identity.id).update_cover_image(identity.id, path)
    set_identity(user)
    return api_response(user_schema.dump(user), "Cover image updated successfully")


# ------------------------------------------------------------------------- #
# Channels
# ------------------------------------------------------------------------- #


@bp.get("/channel/<username>")
@require_auth
@timing
def channel_profile(username: str):
    identity = current_identity()
    profile = channel_service(identity.id).get_channel_profile(username, identity.id)
    return api_response(channel_profile_schema.dump(profile), "Channel profile fetched successfully")


@bp.get("/watch-history")
@require_auth
@timing
def watch_history():
    identity = current_identity()
    videos = channel_service(identity.id).get_watch_history(identity.id)
    return api_response(
        watched_video_list_schema.dump(videos), "Watch history fetched successfully"
    )
