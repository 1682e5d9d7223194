# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from kharji.application.services.password_hashing import Pbkdf2PasswordHasher
from kharji.application.services.session_manager import SessionManager
from kharji.application.services.tokens import TokenService
from kharji.application.use_cases.users.current_user import (
    GetCurrentUserUseCase,
    UpdateProfileUseCase,
)
from kharji.application.use_cases.users.login_user import LoginUserUseCase
from kharji.application.use_cases.users.register_user import RegisterUserUseCase
from kharji.application.use_cases.users.request_password_reset import (
    RequestPasswordResetUseCase,
)
from kharji.application.use_cases.users.reset_password import ResetPasswordUseCase
from kharji.infrastructure.exchange_rate import ExchangeRateCache, NavasanRateFetcher
from kharji.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyPasswordResetTokenRepository,
    SqlAlchemyUserRepository,
)
from kharji.infrastructure.reset_delivery import LoggingResetTokenDelivery
from kharji.interfaces.http.controllers.auth_controller import AuthController
from kharji.interfaces.http.controllers.exchange_rate_controller import (
    ExchangeRateController,
)
from kharji.interfaces.http.controllers.user_controller import UserController
from kharji.shared.config import AppConfig, load_config
from kharji.shared.middleware.access_gate import AccessGate


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or load_config()

    @property
    def config(self) -> AppConfig:
        return self._config

    @cached_property
    def password_hasher(self) -> Pbkdf2PasswordHasher:
        return Pbkdf2PasswordHasher()

    @cached_property
    def token_service(self) -> TokenService:
        auth = self._config.auth
        return TokenService(
            secret=self._config.jwt_secret,
            issuer=auth.issuer,
            audience=auth.audience,
            lifetime=timedelta(days=auth.token_lifetime_days),
        )

    @cached_property
    def session_manager(self) -> SessionManager:
        return SessionManager(
            self.token_service,
            cookie_name=self._config.auth.cookie_name,
            max_age=self._config.auth.cookie_max_age,
            secure=self._config.is_production(),
        )

    @cached_property
    def access_gate(self) -> AccessGate:
        return AccessGate(
            self.token_service.verify,
            landing_path=self._config.auth.landing_path,
            login_path=self._config.auth.login_path,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def reset_token_repository(self) -> SqlAlchemyPasswordResetTokenRepository:
        return SqlAlchemyPasswordResetTokenRepository()

    @cached_property
    def reset_token_delivery(self) -> LoggingResetTokenDelivery:
        return LoggingResetTokenDelivery()

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.user_repository)

    @cached_property
    def update_profile_use_case(self) -> UpdateProfileUseCase:
        return UpdateProfileUseCase(users=self.user_repository)

    @cached_property
    def request_reset_use_case(self) -> RequestPasswordResetUseCase:
        return RequestPasswordResetUseCase(
            users=self.user_repository,
            reset_tokens=self.reset_token_repository,
            tokens=self.token_service,
            delivery=self.reset_token_delivery,
            ttl=timedelta(seconds=self._config.auth.reset_token_ttl),
        )

    @cached_property
    def reset_password_use_case(self) -> ResetPasswordUseCase:
        return ResetPasswordUseCase(
            reset_tokens=self.reset_token_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def exchange_rate_cache(self) -> ExchangeRateCache:
        rates = self._config.exchange_rate
        fetcher = NavasanRateFetcher(
            api_base=rates.api_base,
            api_key=rates.api_key,
            timeout=rates.timeout,
        )
        return ExchangeRateCache(fetcher, ttl_seconds=rates.ttl_seconds)

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            sessions=self.session_manager,
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            current_user_use_case=self.current_user_use_case,
            request_reset_use_case=self.request_reset_use_case,
            reset_password_use_case=self.reset_password_use_case,
        )

    @cached_property
    def user_controller(self) -> UserController:
        return UserController(
            sessions=self.session_manager,
            update_profile_use_case=self.update_profile_use_case,
        )

    @cached_property
    def exchange_rate_controller(self) -> ExchangeRateController:
        return ExchangeRateController(cache=self.exchange_rate_cache)


container = Container()
