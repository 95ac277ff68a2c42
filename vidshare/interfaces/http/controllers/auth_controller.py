# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from pathlib import Path

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from vidshare.application.services.tokens import TokenPair
from vidshare.application.use_cases.accounts.change_password import ChangePasswordUseCase
from vidshare.application.use_cases.accounts.get_current_account import (
    GetCurrentAccountUseCase,
)
from vidshare.application.use_cases.accounts.login_account import LoginAccountUseCase
from vidshare.application.use_cases.accounts.logout_account import LogoutAccountUseCase
from vidshare.application.use_cases.accounts.refresh_session import RefreshSessionUseCase
from vidshare.application.use_cases.accounts.register_account import (
    RegisterAccountUseCase,
    RegistrationData,
)
from vidshare.application.use_cases.accounts.resend_verification_code import (
    ResendVerificationCodeUseCase,
)
from vidshare.application.use_cases.accounts.verify_email import VerifyEmailUseCase
from vidshare.domain.accounts.exceptions import ReuseDetectedError
from vidshare.infrastructure.audit import AuditAction, audit_log
from vidshare.interfaces.http.auth_gate import ACCESS_COOKIE, AuthGate, current_account
from vidshare.interfaces.http.dto.accounts import (
    AccountProfileDTO,
    ApiResponseDTO,
    ChangePasswordRequestDTO,
    LoginRequestDTO,
    RefreshRequestDTO,
    RegisterRequestDTO,
    ResendCodeRequestDTO,
    VerifyEmailRequestDTO,
)
from vidshare.shared.config import AppConfig
from vidshare.shared.errors import AppError
from vidshare.shared.errors import ValidationError as RequestValidationError
from vidshare.shared.errors.validation import raise_validation_error
from vidshare.shared.logging import logger, mask_identifier
from vidshare.shared.middleware.rate_limit import client_address, rate_limit

REFRESH_COOKIE = "refreshToken"


def _respond(status: int, data: object, message: str) -> tuple[Response, int]:
    payload = ApiResponseDTO(status_code=status, data=data, message=message).to_payload()
    return jsonify(payload), status


class AuthController:
    def __init__(
        self,
        *,
        config: AppConfig,
        gate: AuthGate,
        register_use_case: RegisterAccountUseCase,
        verify_email_use_case: VerifyEmailUseCase,
        resend_code_use_case: ResendVerificationCodeUseCase,
        login_use_case: LoginAccountUseCase,
        logout_use_case: LogoutAccountUseCase,
        refresh_use_case: RefreshSessionUseCase,
        change_password_use_case: ChangePasswordUseCase,
        current_account_use_case: GetCurrentAccountUseCase,
    ) -> None:
        self._config = config
        self._gate = gate
        self._register_use_case = register_use_case
        self._verify_email_use_case = verify_email_use_case
        self._resend_code_use_case = resend_code_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._refresh_use_case = refresh_use_case
        self._change_password_use_case = change_password_use_case
        self._current_account_use_case = current_account_use_case

    # Cookies

    def _cookie_options(self) -> dict[str, object]:
        return {
            "httponly": True,
            "secure": self._config.security.cookie_secure,
            "samesite": self._config.security.cookie_samesite,
        }

    def _set_session_cookies(self, response: Response, access: str, refresh: str | None) -> None:
        options = self._cookie_options()
        response.set_cookie(
            ACCESS_COOKIE, access, max_age=self._config.tokens.access_ttl_seconds, **options
        )
        if refresh is not None:
            response.set_cookie(
                REFRESH_COOKIE,
                refresh,
                max_age=self._config.tokens.refresh_ttl_seconds,
                **options,
            )

    def _clear_session_cookies(self, response: Response) -> None:
        options = self._cookie_options()
        response.delete_cookie(ACCESS_COOKIE, **options)
        response.delete_cookie(REFRESH_COOKIE, **options)

    # Uploads

    def _save_upload(self, field: str, label: str) -> Path:
        upload: FileStorage | None = request.files.get(field)
        if upload is None or not upload.filename:
            raise RequestValidationError(
                f"{label} is required",
                errors=[{"field": field, "type": "missing", "message": f"{label} is required"}],
            )
        temp_dir = Path(self._config.media.temp_dir)
        temp_dir.mkdir(parents=True, exist_ok=True)
        name = secure_filename(upload.filename) or field
        path = temp_dir / f"{secrets.token_hex(8)}-{name}"
        upload.save(path)
        return path

    # Routes

    @rate_limit(limit=5, window_seconds=60.0)
    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(request.form.to_dict())
        except ValidationError as exc:
            raise_validation_error(exc)

        saved: list[Path] = []
        try:
            avatar_path = self._save_upload("avatar", "Avatar file")
            saved.append(avatar_path)
            cover_path = self._save_upload("coverImage", "Cover image")
            saved.append(cover_path)

            profile = self._register_use_case.execute(
                RegistrationData(
                    full_name=dto.full_name,
                    email=dto.email,
                    username=dto.username,
                    password=dto.password,
                    avatar_path=avatar_path,
                    cover_image_path=cover_path,
                )
            )
        finally:
            for path in saved:
                path.unlink(missing_ok=True)

        ip_address = client_address(request)
        audit_log(
            AuditAction.REGISTER,
            account_id=profile.id,
            ip_address=ip_address,
            details={"username": profile.username},
        )
        audit_log(AuditAction.VERIFICATION_CODE_SENT, account_id=profile.id, ip_address=ip_address)
        logger.info(f"auth.register: ok account_id={profile.id}")
        return _respond(
            201, AccountProfileDTO.from_profile(profile).to_payload(), "User registered successfully"
        )

    @rate_limit(limit=10, window_seconds=60.0)
    def verify_email(self) -> tuple[Response, int]:
        try:
            dto = VerifyEmailRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        session = self._verify_email_use_case.execute(dto.email, dto.code)
        audit_log(
            AuditAction.EMAIL_VERIFIED,
            account_id=session.account.id,
            ip_address=client_address(request),
        )

        response, status = _respond(
            201,
            {"user": AccountProfileDTO.from_profile(session.account).to_payload()},
            "User email verification completed",
        )
        self._set_session_cookies(response, session.access_token, session.refresh_token)
        logger.info(f"auth.verify_email: ok account_id={session.account.id}")
        return response, status

    @rate_limit(limit=3, window_seconds=60.0)
    def resend_verification_code(self) -> tuple[Response, int]:
        try:
            dto = ResendCodeRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        self._resend_code_use_case.execute(dto.email)
        audit_log(
            AuditAction.VERIFICATION_CODE_SENT,
            ip_address=client_address(request),
            details={"resend": True},
        )
        return _respond(200, {}, "New verification code sent successfully")

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = client_address(request)
        try:
            session = self._login_use_case.execute(dto.identifier, dto.password)
        except AppError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"identifier": mask_identifier(dto.identifier), "error": exc.code},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            account_id=session.account.id,
            ip_address=ip_address,
            details={"username": session.account.username},
        )

        response, status = _respond(
            200,
            {
                "user": AccountProfileDTO.from_profile(session.account).to_payload(),
                "accessToken": session.access_token,
                "refreshToken": session.refresh_token,
            },
            "Login successful",
        )
        self._set_session_cookies(response, session.access_token, session.refresh_token)
        logger.info(f"auth.login: ok account_id={session.account.id}")
        return response, status

    def logout(self) -> tuple[Response, int]:
        account = current_account()
        self._logout_use_case.execute(account.id)
        audit_log(
            AuditAction.LOGOUT, account_id=account.id, ip_address=client_address(request)
        )

        response, status = _respond(200, {}, "User logged out")
        self._clear_session_cookies(response)
        logger.info(f"auth.logout: ok account_id={account.id}")
        return response, status

    @rate_limit(limit=30, window_seconds=60.0)
    def refresh_token(self) -> tuple[Response, int]:
        presented = request.cookies.get(REFRESH_COOKIE)
        if not presented:
            try:
                dto = RefreshRequestDTO.model_validate(request.get_json(silent=True) or {})
            except ValidationError as exc:
                raise_validation_error(exc)
            presented = dto.refresh_token

        ip_address = client_address(request)
        try:
            pair: TokenPair = self._refresh_use_case.execute(presented)
        except ReuseDetectedError:
            audit_log(AuditAction.REFRESH_REUSE_DETECTED, ip_address=ip_address, success=False)
            raise

        audit_log(AuditAction.TOKEN_REFRESHED, ip_address=ip_address)
        data: dict[str, str] = {"accessToken": pair.access_token}
        if pair.refresh_token is not None:
            data["refreshToken"] = pair.refresh_token

        response, status = _respond(200, data, "Token refreshed")
        self._set_session_cookies(response, pair.access_token, pair.refresh_token)
        return response, status

    @rate_limit(limit=5, window_seconds=60.0)
    def change_password(self) -> tuple[Response, int]:
        try:
            dto = ChangePasswordRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        account = current_account()
        self._change_password_use_case.execute(account.id, dto.old_password, dto.new_password)
        audit_log(
            AuditAction.PASSWORD_CHANGED, account_id=account.id, ip_address=client_address(request)
        )
        return _respond(200, {}, "Password changed successfully")

    def current_user(self) -> tuple[Response, int]:
        profile = self._current_account_use_case.execute(current_account().id)
        return _respond(200, AccountProfileDTO.from_profile(profile).to_payload(), "User fetched")

    def as_blueprint(self) -> Blueprint:
        gated = self._gate.auth_required
        bp = Blueprint("users", __name__, url_prefix="/api/v1/users")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/verify_email", view_func=self.verify_email, methods=["POST"])
        bp.add_url_rule(
            "/resend_verification_code",
            view_func=self.resend_verification_code,
            methods=["POST"],
        )
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=gated(self.logout), methods=["POST"])
        bp.add_url_rule("/refresh_token", view_func=self.refresh_token, methods=["POST"])
        bp.add_url_rule(
            "/change_password", view_func=gated(self.change_password), methods=["POST"]
        )
        bp.add_url_rule("/current_user", view_func=gated(self.current_user), methods=["GET"])
        return bp
