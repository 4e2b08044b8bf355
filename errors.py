#!/usr/bin/env python3
"""
例外定義モジュール
要件定義支援ツールで使用される例外クラス
"""


class RequirementAssistantError(Exception):
    """要件定義支援ツールの基底例外"""


class InsufficientRowsError(RequirementAssistantError):
    """CSVの有効行数が不足している"""

    def __init__(self, line_count: int, required: int):
        self.line_count = line_count
        self.required = required
        super().__init__(
            f"CSVの有効行数が不足しています: {line_count}行 (最低{required}行必要)"
        )


class FileReadError(RequirementAssistantError):
    """入力ファイルの読み込みに失敗した"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class FileWriteError(RequirementAssistantError):
    """出力ファイルの保存に失敗した"""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(message)
