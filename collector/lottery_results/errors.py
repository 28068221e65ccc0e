"""チケット入力の検証エラー."""

from __future__ import annotations


class TicketValidationError(ValueError):
    """照合前に弾かれたチケット入力."""

    code = "invalid_ticket"

    def __init__(self, message: str, ticket: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.ticket = ticket


class TicketFormatError(TicketValidationError):
    """英字の位置・個数が不正、または数字が無い."""

    code = "invalid_format"


class TicketLengthError(TicketValidationError):
    """番号部の桁数が許容範囲外."""

    code = "invalid_length"
