#!/usr/bin/env python3
"""
共通ユーティリティモジュール
要件定義支援ツールで使用される共通機能
"""

import os
import re
import shutil
import logging
import tempfile
from typing import List

from errors import FileReadError, FileWriteError

# 行区切り（\x1c〜\x1eなどの制御文字では区切らない）
LINE_BREAK_PATTERN = re.compile(r"\r\n|[\n\r\v\f\x85\u2028\u2029]")

# 新規作成するファイルの権限
NEW_FILE_MODE = 0o644


def split_nonempty_lines(text: str) -> List[str]:
    """テキストを改行で分割し、空行を除外する

    行のトリミングは行わない。空白のみの行は残る。

    Args:
        text: 分割するテキスト（改行コードは\\n, \\r\\n, \\rのいずれでも可）

    Returns:
        空でない行のリスト
    """
    return [line for line in LINE_BREAK_PATTERN.split(text) if line]


def clean_content(lines: List[str], separator: str) -> str:
    """各行からコードブロック記号(```)と前後の空白を除去して結合する

    Args:
        lines: 対象の行リスト
        separator: 結合に使う区切り文字列

    Returns:
        結合した文字列。有効な行がなければ空文字
    """
    cleaned = []
    for line in lines:
        text = line.replace("```", "").strip()
        if text:
            cleaned.append(text)
    return separator.join(cleaned).strip()


def read_text_file(path: str) -> str:
    """UTF-8テキストファイルを読み込む（BOM付きも可）

    Raises:
        FileReadError: ファイルが存在しない、権限がない、UTF-8でない場合
    """
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise FileReadError(path, f"UTF-8として読み込めません: {e}") from e
    except OSError as e:
        raise FileReadError(path, e.strerror or str(e)) from e


def write_text_file(path: str, content: str, error_label: str) -> str:
    """テキストをUTF-8でファイルに書き込む

    同じディレクトリに一意な名前の一時ファイルを作って書き込み、置き換える。
    失敗時に既存ファイルは壊れず、同じディレクトリの他のファイルにも触れない。

    Args:
        path: 保存先パス
        content: 書き込む内容
        error_label: エラーメッセージに使う種別名（例: 'Markdown'）

    Returns:
        保存したファイルの絶対パス

    Raises:
        FileWriteError: 書き込みに失敗した場合
    """
    abs_path = os.path.abspath(path)
    parent = os.path.dirname(abs_path)
    temp_path = None
    try:
        os.makedirs(parent, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=parent, prefix=f".{os.path.basename(abs_path)}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        # mkstempは0o600で作るため、既存ファイルの権限を引き継ぐ
        if os.path.exists(abs_path):
            shutil.copymode(abs_path, temp_path)
        else:
            os.chmod(temp_path, NEW_FILE_MODE)
        os.replace(temp_path, abs_path)
        temp_path = None
    except OSError as e:
        raise FileWriteError(
            abs_path,
            f"{error_label}ファイルの保存中にエラーが発生しました: {e.strerror or e}"
        ) from e
    finally:
        if temp_path is not None:
            try:
                os.remove(temp_path)
            except OSError:
                logging.debug(f"Failed to remove temp file: {temp_path}")
    return abs_path
