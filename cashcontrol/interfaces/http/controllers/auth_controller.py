# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from cashcontrol.application.use_cases.users.login_with_telegram import LoginWithTelegramUseCase
from cashcontrol.interfaces.http.dto.auth import LoginResponseDTO, TelegramAuthRequestDTO
from cashcontrol.shared.errors.validation import raise_validation_error
from cashcontrol.shared.middleware.rate_limit import rate_limit


class AuthController:
    def __init__(self, *, telegram_login_use_case: LoginWithTelegramUseCase) -> None:
        self._telegram_login_use_case = telegram_login_use_case

    @rate_limit()
    def telegram_login(self) -> tuple[Response, int]:
        try:
            dto = TelegramAuthRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        result = self._telegram_login_use_case.execute(dto.init_data)

        payload = LoginResponseDTO.from_result(result).model_dump(mode="json", exclude_none=True)
        return jsonify(payload), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/telegram", view_func=self.telegram_login, methods=["POST"])
        return bp
