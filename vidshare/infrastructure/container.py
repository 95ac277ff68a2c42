# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from vidshare.application.services.password_hashing import (
    BcryptCodeHasher,
    WerkzeugPasswordHasher,
)
from vidshare.application.services.sessions import SessionIssuer
from vidshare.application.services.tokens import TokenService
from vidshare.application.services.verification import VerificationService
from vidshare.application.use_cases.accounts.change_password import ChangePasswordUseCase
from vidshare.application.use_cases.accounts.get_current_account import \
    GetCurrentAccountUseCase
from vidshare.application.use_cases.accounts.login_account import LoginAccountUseCase
from vidshare.application.use_cases.accounts.logout_account import LogoutAccountUseCase
from vidshare.application.use_cases.accounts.refresh_session import RefreshSessionUseCase
from vidshare.application.use_cases.accounts.register_account import \
    RegisterAccountUseCase
from vidshare.application.use_cases.accounts.resend_verification_code import \
    ResendVerificationCodeUseCase
from vidshare.application.use_cases.accounts.verify_email import VerifyEmailUseCase
from vidshare.domain.accounts.repositories import AccountRepository, Mailer, MediaStorage
from vidshare.infrastructure.db import SessionLocal
from vidshare.infrastructure.mail import build_mailer
from vidshare.infrastructure.media_storage import ImageKitMediaStorage
from vidshare.infrastructure.repositories.accounts.sqlalchemy_account_repository import \
    SqlAlchemyAccountRepository
from vidshare.interfaces.http.auth_gate import AuthGate
from vidshare.interfaces.http.controllers.auth_controller import AuthController
from vidshare.interfaces.http.controllers.misc_controller import MiscController
from vidshare.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()

    # Collaborators

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def code_hasher(self) -> BcryptCodeHasher:
        return BcryptCodeHasher(rounds=self.config.auth.verification_code_rounds)

    @cached_property
    def account_repository(self) -> AccountRepository:
        return SqlAlchemyAccountRepository(SessionLocal)

    @cached_property
    def mailer(self) -> Mailer:
        return build_mailer(self.config.mail)

    @cached_property
    def media_storage(self) -> MediaStorage:
        return ImageKitMediaStorage(self.config.media)

    # Services

    @cached_property
    def token_service(self) -> TokenService:
        return TokenService(self.config.tokens)

    @cached_property
    def verification_service(self) -> VerificationService:
        return VerificationService(
            accounts=self.account_repository,
            code_hasher=self.code_hasher,
            mailer=self.mailer,
            code_ttl=timedelta(minutes=self.config.auth.verification_code_ttl_minutes),
        )

    @cached_property
    def session_issuer(self) -> SessionIssuer:
        return SessionIssuer(accounts=self.account_repository, tokens=self.token_service)

    @cached_property
    def auth_gate(self) -> AuthGate:
        return AuthGate(tokens=self.token_service, accounts=self.account_repository)

    # Use cases

    @cached_property
    def register_account_use_case(self) -> RegisterAccountUseCase:
        return RegisterAccountUseCase(
            accounts=self.account_repository,
            password_hasher=self.password_hasher,
            media=self.media_storage,
            verification=self.verification_service,
        )

    @cached_property
    def verify_email_use_case(self) -> VerifyEmailUseCase:
        return VerifyEmailUseCase(
            accounts=self.account_repository,
            verification=self.verification_service,
            sessions=self.session_issuer,
        )

    @cached_property
    def resend_verification_code_use_case(self) -> ResendVerificationCodeUseCase:
        return ResendVerificationCodeUseCase(
            accounts=self.account_repository, verification=self.verification_service
        )

    @cached_property
    def login_account_use_case(self) -> LoginAccountUseCase:
        return LoginAccountUseCase(
            accounts=self.account_repository,
            password_hasher=self.password_hasher,
            sessions=self.session_issuer,
            require_verified_email=self.config.auth.require_verified_email,
        )

    @cached_property
    def logout_account_use_case(self) -> LogoutAccountUseCase:
        return LogoutAccountUseCase(accounts=self.account_repository)

    @cached_property
    def refresh_session_use_case(self) -> RefreshSessionUseCase:
        return RefreshSessionUseCase(
            accounts=self.account_repository,
            tokens=self.token_service,
            rotate_refresh_tokens=self.config.auth.rotate_refresh_tokens,
        )

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            accounts=self.account_repository, password_hasher=self.password_hasher
        )

    @cached_property
    def get_current_account_use_case(self) -> GetCurrentAccountUseCase:
        return GetCurrentAccountUseCase(accounts=self.account_repository)

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            config=self.config,
            gate=self.auth_gate,
            register_use_case=self.register_account_use_case,
            verify_email_use_case=self.verify_email_use_case,
            resend_code_use_case=self.resend_verification_code_use_case,
            login_use_case=self.login_account_use_case,
            logout_use_case=self.logout_account_use_case,
            refresh_use_case=self.refresh_session_use_case,
            change_password_use_case=self.change_password_use_case,
            current_account_use_case=self.get_current_account_use_case,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController()
