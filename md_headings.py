#!/usr/bin/env python3
"""
Markdown見出し抽出モジュール
生成済みMarkdownを再解析し、見出しタイトルとその本文行の対応表を作る

- "#" で始まる行を見出しとみなす（レベルは区別しない）
- 見出しタイトルは "#" をすべて除去して前後の空白を取り除いたもの
- 同じタイトルの見出しが再登場した場合は後の内容で上書きする
- 最初の見出しより前の本文行は捨てる
"""

from typing import Dict, List

from utils import split_nonempty_lines

HeadingMap = Dict[str, List[str]]


# グローバルverboseフラグ
_VERBOSE = False

def set_verbose(verbose: bool):
    """verboseモードを設定"""
    global _VERBOSE
    _VERBOSE = verbose

def is_verbose() -> bool:
    """verboseモードかどうかを返す"""
    return _VERBOSE

def debug_print(*args, **kwargs):
    """verboseモード時のみ出力するデバッグ用print"""
    if _VERBOSE:
        print(*args, **kwargs)


def heading_title(line: str) -> str:
    """見出し行からタイトルを取り出す"""
    return line.replace("#", "").strip()


def extract_heading_map(markdown_text: str) -> HeadingMap:
    """Markdownテキストから見出し→本文行の対応表を作成

    Args:
        markdown_text: Markdown文書のプレーンテキスト

    Returns:
        見出しタイトルをキー、トリミング済みの本文行リストを値とする辞書
        （最初に登場した順）
    """
    heading_map: HeadingMap = {}
    current = None

    for line in split_nonempty_lines(markdown_text):
        if line.startswith("#"):
            current = heading_title(line)
            if current in heading_map:
                debug_print(f"[DEBUG] 見出しの重複により上書き: {current}")
            heading_map[current] = []
            continue

        body = line.strip()
        if current and body:
            heading_map[current].append(body)

    return heading_map
