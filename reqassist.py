#!/usr/bin/env python3
"""
要件定義支援ツール (reqassist)
要件定義書CSVをMarkdownに変換し、要約と改善ポイントを生成する統合ツール

処理の流れ:
- csv2md.CsvToMarkdownConverter: CSV（または.xlsx）→ 見出し付きMarkdown
- md_headings.extract_heading_map: Markdown → 見出し→本文の対応表
- summarizer.summarize: 対応表 → 要約文
- suggestions.generate_suggestions: 対応表＋要約文 → 改善ポイント

使用例:
    # 変換して ./output/ にMarkdownと要約を保存
    python reqassist.py input_files/requirements.csv

    # 出力ディレクトリを指定
    python reqassist.py input_files/requirements.csv -o custom_output

    # 保存せずに表示のみ（見出しを色付き表示）
    python reqassist.py input_files/requirements.csv --no-save --color

出力:
- デフォルトの出力ディレクトリ: ./output/
- Markdownファイル: ./output/[ファイル名].md
- 要約ファイル: ./output/[ファイル名]_要約.txt
  （ファイル名は2行目が「要件定義書,<名前>」なら「要件定義書_<名前>」、それ以外は「converted」）
"""

import os
import sys
import argparse
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

import csv2md
import md_headings
import summarizer
import suggestions
from csv2md import (
    CsvToMarkdownConverter, MarkdownDocument, convert_csv_text,
    DEFAULT_FILE_NAME,
)
from errors import InsufficientRowsError, FileReadError, FileWriteError
from md_headings import HeadingMap, extract_heading_map
from summarizer import NO_CONTENT_SUMMARY, extract_sections, summarize
from suggestions import generate_suggestions
from utils import split_nonempty_lines, write_text_file

INITIAL_SUMMARY = "要件内容を分析します"
INITIAL_SUGGESTIONS = "要件改善を提案します"
INSUFFICIENT_ROWS_MESSAGE = "CSV file must have at least 5 lines."

ANSI_RESET = "\033[0m"


# グローバルverboseフラグ
_VERBOSE = False

def set_verbose(verbose: bool):
    """verboseモードを設定"""
    global _VERBOSE
    _VERBOSE = verbose
    csv2md.set_verbose(verbose)
    md_headings.set_verbose(verbose)
    summarizer.set_verbose(verbose)
    suggestions.set_verbose(verbose)

def is_verbose() -> bool:
    """verboseモードかどうかを返す"""
    return _VERBOSE

def debug_print(*args, **kwargs):
    """verboseモード時のみ出力するデバッグ用print"""
    if _VERBOSE:
        print(*args, **kwargs)


@dataclass(frozen=True)
class Document:
    """1回の変換で得られる表示・保存対象一式"""
    markdown: MarkdownDocument = field(default_factory=MarkdownDocument)
    file_name: str = DEFAULT_FILE_NAME
    heading_map: HeadingMap = field(default_factory=dict)
    summary: str = INITIAL_SUMMARY
    suggestions: str = INITIAL_SUGGESTIONS
    error: Optional[str] = None

    @property
    def markdown_text(self) -> str:
        return self.markdown.text


def analyze(markdown: MarkdownDocument, file_name: str) -> Document:
    """Markdown文書から見出し対応表・要約・改善ポイントを導出"""
    text = markdown.text
    if not split_nonempty_lines(text):
        return Document(markdown, file_name, {}, NO_CONTENT_SUMMARY, INITIAL_SUGGESTIONS)

    heading_map = extract_heading_map(text)
    sections = extract_sections(heading_map)
    summary = summarize(heading_map, file_name, sections)
    suggestion_text = generate_suggestions(heading_map, summary, sections)
    debug_print(f"[DEBUG] 見出し数: {len(heading_map)}, 要約: {summary[:100]!r}")
    return Document(markdown, file_name, heading_map, summary, suggestion_text)


def default_markdown_name(file_name: str) -> str:
    return f"{file_name}.md"


def default_summary_name(file_name: str) -> str:
    return f"{file_name}_要約.txt"


class RequirementSession:
    """現在の変換結果を保持し、変換・編集・保存を直列に実行するセッション

    変換のたびにDocumentを丸ごと置き換え、購読者に通知する。
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: List[Callable[[Document], None]] = []
        self._document = Document()

    @property
    def document(self) -> Document:
        return self._document

    def subscribe(self, listener: Callable[[Document], None]) -> Callable[[], None]:
        """Document置き換え時の通知先を登録し、登録解除関数を返す"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, document: Document):
        self._document = document

    def _notify(self, document: Document):
        for listener in list(self._listeners):
            listener(document)

    def _failed(self, message: str) -> Document:
        # Markdown欄以外は前回の値を保持する
        previous = self._document
        return Document(
            MarkdownDocument.plain(message),
            file_name=previous.file_name,
            heading_map=previous.heading_map,
            summary=previous.summary,
            suggestions=previous.suggestions,
            error=message,
        )

    def load(self, path: str) -> Document:
        """ファイルを読み込んで変換し、現在のDocumentを置き換える

        読み込みエラーや行数不足は例外にせず、Markdown欄のメッセージとして表示する。
        """
        with self._lock:
            try:
                result = CsvToMarkdownConverter(path).convert()
            except InsufficientRowsError as e:
                print(f"[WARNING] {e}")
                document = self._failed(INSUFFICIENT_ROWS_MESSAGE)
            except FileReadError as e:
                print(f"[ERROR] ファイル読み込みエラー: {e}")
                document = self._failed(f"Error reading file: {e}")
            else:
                document = analyze(result.document, result.file_name)
            self._replace(document)
        self._notify(document)
        return document

    def load_text(self, csv_text: str) -> Document:
        """CSVテキストを変換し、現在のDocumentを置き換える"""
        with self._lock:
            try:
                result = convert_csv_text(csv_text)
            except InsufficientRowsError as e:
                print(f"[WARNING] {e}")
                document = self._failed(INSUFFICIENT_ROWS_MESSAGE)
            else:
                document = analyze(result.document, result.file_name)
            self._replace(document)
        self._notify(document)
        return document

    def edit_markdown(self, edited: Union[str, MarkdownDocument]) -> Document:
        """表示欄でMarkdownが編集されたときに要約と改善ポイントを再生成

        ファイル名は変換時の値を引き継ぐ。
        """
        if isinstance(edited, str):
            edited = MarkdownDocument.from_text(edited)
        with self._lock:
            document = analyze(edited, self._document.file_name)
            self._replace(document)
        self._notify(document)
        return document

    def default_markdown_name(self) -> str:
        return default_markdown_name(self._document.file_name)

    def default_summary_name(self) -> str:
        return default_summary_name(self._document.file_name)

    def save_markdown(self, path: str) -> str:
        """MarkdownをUTF-8プレーンテキストで保存（色情報は保存しない）

        Raises:
            FileWriteError: 保存する内容がない、または書き込みに失敗した場合
        """
        with self._lock:
            content = self._document.markdown_text
            if not content:
                raise FileWriteError(path, "保存するMarkdownがありません。")
            saved = write_text_file(path, content, "Markdown")
        print(f"[SUCCESS] ファイルは以下の場所に保存されました：\n{saved}")
        return saved

    def save_summary(self, path: str) -> str:
        """要約をUTF-8プレーンテキストで保存

        Raises:
            FileWriteError: 要約が未生成、または書き込みに失敗した場合
        """
        with self._lock:
            content = self._document.summary
            if not content or content == INITIAL_SUMMARY:
                raise FileWriteError(path, "保存する要約がありません。")
            saved = write_text_file(path, content, "要約")
        print(f"[SUCCESS] ファイルは以下の場所に保存されました：\n{saved}")
        return saved


def _ansi_color(hex_color: str) -> str:
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
    return f"\033[38;2;{r};{g};{b}m"


def render_spans_ansi(markdown: MarkdownDocument, color: bool = True) -> str:
    """スパンの役割に応じた色を付けて端末表示用の文字列にする"""
    if not color:
        return markdown.text
    rendered = []
    for span in markdown.spans:
        if span.color:
            rendered.append(f"{_ansi_color(span.color)}{span.text}{ANSI_RESET}")
        else:
            rendered.append(span.text)
    return "".join(rendered)


def _print_panel(title: str, body: str):
    print("\n" + "=" * 50)
    print(title)
    print("=" * 50)
    print(body)


def main():
    """メイン関数"""
    parser = argparse.ArgumentParser(
        description='要件定義書CSVをMarkdownに変換し、要約と改善ポイントを生成',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
対応ファイル形式:
  CSV:   .csv（UTF-8、カンマ区切り、引用符なし）
  Excel: .xlsx（最初のシートをCSVと同じ形式で読み込み）

使用例:
  python reqassist.py requirements.csv
  python reqassist.py requirements.csv -o custom_output
  python reqassist.py requirements.csv --no-save --color
        """
    )

    parser.add_argument('file', help='変換する要件定義書ファイル')
    parser.add_argument('-o', '--output-dir', type=str,
                       help='出力ディレクトリを指定（デフォルト: ./output）')
    parser.add_argument('--no-save', action='store_true',
                       help='ファイルを保存せずに結果を表示のみ行う')
    parser.add_argument('--color', action='store_true',
                       help='見出しを色付きで表示')
    parser.add_argument('-v', '--verbose', action='store_true',
                       help='デバッグ情報を出力')

    args = parser.parse_args()

    set_verbose(args.verbose)

    session = RequirementSession()
    document = session.load(args.file)

    _print_panel("要件定義データ", render_spans_ansi(document.markdown, color=args.color))
    if document.error:
        print(f"エラー: {document.error}")
        sys.exit(1)

    _print_panel("要件内容の要約", document.summary)
    _print_panel("改善ポイント", document.suggestions)

    if args.no_save:
        return

    output_dir = args.output_dir or os.path.join(os.getcwd(), "output")
    try:
        md_file = session.save_markdown(
            os.path.join(output_dir, session.default_markdown_name()))
        summary_file = session.save_summary(
            os.path.join(output_dir, session.default_summary_name()))
    except FileWriteError as e:
        print(f"保存エラー: {e}")
        sys.exit(1)

    print("\n" + "=" * 50)
    print("変換完了!")
    print(f"Markdownファイル: {md_file}")
    print(f"要約ファイル: {summary_file}")
    print("=" * 50)


if __name__ == "__main__":
    main()
