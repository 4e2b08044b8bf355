#!/usr/bin/env python3
"""
CSV to Markdown Converter
要件定義書CSVを見出し構造付きのMarkdownに変換するツール

特徴:
- 1列目〜3列目（大項目・中項目・小項目）を # / ## / ### の見出しに変換
- 4列目（詳細）を本文として出力
- "-" または空欄の項目は出力しない
- 2行目の「要件定義書」マーカーから保存用ファイル名を決定
- .xlsx の要件定義書は最初のシートをCSVと同じ形式で読み込む

CSV形式:
    0〜3行目: ヘッダ・メタデータ行（2行目の2列目が「要件定義書」、3列目がプロジェクト名）
    4行目以降: ,大項目,中項目,小項目,詳細
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from errors import InsufficientRowsError, FileReadError
from utils import split_nonempty_lines, read_text_file

try:
    from openpyxl import load_workbook
except ImportError as e:
    raise ImportError(
        "openpyxlライブラリが必要です: pip install openpyxl または uv sync を実行してください"
    ) from e

# 設定定数
MIN_LINES = 5
DATA_START_ROW = 4
MIN_COLUMNS = 5
ABSENT_MARKER = "-"

# ファイル名決定
REQUIREMENT_MARKER = "要件定義書"
FILE_NAME_PREFIX = "要件定義書_"
DEFAULT_FILE_NAME = "converted"

# スパンの役割
ROLE_HEADING_1 = "heading-1"
ROLE_HEADING_2 = "heading-2"
ROLE_HEADING_3 = "heading-3"
ROLE_BODY = "body"

HEADING_ROLES = (ROLE_HEADING_1, ROLE_HEADING_2, ROLE_HEADING_3)

# 表示色（見出しはアクセントカラー、本文はデフォルト色）
HEADING_COLOR = "#0080FF"
ROLE_COLORS = {
    ROLE_HEADING_1: HEADING_COLOR,
    ROLE_HEADING_2: HEADING_COLOR,
    ROLE_HEADING_3: HEADING_COLOR,
    ROLE_BODY: None,
}


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


@dataclass(frozen=True)
class StyledSpan:
    """役割付きテキスト片"""
    text: str
    role: str = ROLE_BODY

    @property
    def color(self) -> Optional[str]:
        return ROLE_COLORS.get(self.role)


@dataclass(frozen=True)
class MarkdownDocument:
    """役割付きテキスト片の列として表したMarkdown文書"""
    spans: List[StyledSpan] = field(default_factory=list)

    @property
    def text(self) -> str:
        """プレーンテキスト表現（役割は失われる）"""
        return "".join(span.text for span in self.spans)

    def is_empty(self) -> bool:
        return not self.text

    @classmethod
    def plain(cls, text: str) -> "MarkdownDocument":
        """本文のみからなる文書を作成（プレースホルダや編集後テキスト用）"""
        if not text:
            return cls([])
        return cls([StyledSpan(text, ROLE_BODY)])

    @classmethod
    def from_text(cls, text: str) -> "MarkdownDocument":
        """編集後のMarkdownテキストから役割を付け直して文書を作成

        "#" で始まる行は "#" の数に応じた見出し（4個以上は小項目扱い）、
        それ以外は本文とする。
        """
        spans = []
        for line in text.splitlines(keepends=True):
            stripped = line.lstrip("#")
            level = len(line) - len(stripped)
            if level:
                spans.append(StyledSpan(line, HEADING_ROLES[min(level, 3) - 1]))
            else:
                spans.append(StyledSpan(line, ROLE_BODY))
        return cls(spans)


@dataclass(frozen=True)
class ConversionResult:
    """CSV変換結果"""
    document: MarkdownDocument
    file_name: str


def _is_present(value: str) -> bool:
    return bool(value) and value != ABSENT_MARKER


def extract_file_name(lines: List[str]) -> str:
    """2行目のメタデータから保存用ファイル名を決定

    2列目が「要件定義書」と完全一致する場合は「要件定義書_<3列目>」、
    それ以外は「converted」を返す。

    Args:
        lines: 空行除去済みのCSV行リスト

    Returns:
        ファイル名（拡張子なし）
    """
    if len(lines) < 2:
        return DEFAULT_FILE_NAME
    columns = lines[1].split(",")
    if len(columns) > 2 and columns[1] == REQUIREMENT_MARKER:
        return FILE_NAME_PREFIX + columns[2]
    return DEFAULT_FILE_NAME


def convert_row(columns: List[str]) -> List[StyledSpan]:
    """1行分の列データを見出し・本文のスパンに変換

    見出しは大・中・小項目それぞれの直前に空行を1行ずつ入れる。

    Args:
        columns: カンマ分割済みの列（5列以上）

    Returns:
        0〜4個のスパン
    """
    dai, chu, sho, shosai = (c.strip() for c in columns[1:5])
    spans = []

    if _is_present(dai):
        spans.append(StyledSpan(f"\n# {dai}\n", ROLE_HEADING_1))
    if _is_present(chu):
        spans.append(StyledSpan(f"\n## {chu}\n", ROLE_HEADING_2))
    if _is_present(sho):
        spans.append(StyledSpan(f"\n### {sho}\n", ROLE_HEADING_3))
    if _is_present(shosai):
        spans.append(StyledSpan(f"{shosai}\n", ROLE_BODY))

    return spans


def convert_rows(lines: List[str]) -> MarkdownDocument:
    """4行目以降のCSV行をMarkdown文書に変換

    列数が5未満の行は読み飛ばす。
    """
    spans = []
    for index in range(DATA_START_ROW, len(lines)):
        columns = lines[index].split(",")
        if len(columns) < MIN_COLUMNS:
            debug_print(f"[DEBUG] 列数不足のため行{index}をスキップ: {lines[index]!r}")
            continue
        row_spans = convert_row(columns)
        if row_spans:
            debug_print(f"[DEBUG] 行{index}: {len(row_spans)}個のスパンを出力")
        spans.extend(row_spans)
    return MarkdownDocument(spans)


def convert_csv_text(csv_text: str) -> ConversionResult:
    """CSVテキストをMarkdown文書に変換

    Args:
        csv_text: CSVファイルの内容

    Returns:
        ConversionResult（Markdown文書とファイル名）

    Raises:
        InsufficientRowsError: 空行を除いて5行未満の場合
    """
    lines = split_nonempty_lines(csv_text)
    if len(lines) < MIN_LINES:
        raise InsufficientRowsError(len(lines), MIN_LINES)

    file_name = extract_file_name(lines)
    debug_print(f"[DEBUG] ファイル名: {file_name}")

    document = convert_rows(lines)
    return ConversionResult(document, file_name)


def read_xlsx_as_csv_text(xlsx_path: str) -> str:
    """xlsxの最初のシートをCSVと同じ行形式のテキストに変換

    セル内の改行は空白に置き換える。全セルが空の行もCSV書き出しと同じく
    ",,,," の形で出力し、行位置をずらさない。

    Raises:
        FileReadError: ブックを開けない場合
    """
    try:
        workbook = load_workbook(xlsx_path, read_only=True, data_only=True)
    except Exception as e:
        raise FileReadError(xlsx_path, f"Excelファイルを開けません: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        debug_print(f"[DEBUG] シート読み込み: {sheet.title}")
        lines = []
        for row in sheet.iter_rows(values_only=True):
            cells = []
            for value in row:
                text = "" if value is None else str(value)
                cells.append(text.replace("\r\n", " ").replace("\n", " ").replace("\r", " "))
            lines.append(",".join(cells))
        return "\n".join(lines)
    finally:
        workbook.close()


class CsvToMarkdownConverter:
    def __init__(self, csv_file_path: str):
        """要件定義書ファイルをMarkdownに変換するコンバータ

        Args:
            csv_file_path: 変換するCSV（または.xlsx）ファイルのパス
        """
        self.csv_file = csv_file_path
        self.base_name = Path(csv_file_path).stem
        self.file_type = 'excel' if csv_file_path.lower().endswith('.xlsx') else 'csv'

    def read_text(self) -> str:
        """入力ファイルをCSVテキストとして読み込む"""
        if not os.path.exists(self.csv_file):
            raise FileReadError(self.csv_file, f"ファイルが見つかりません: {self.csv_file}")
        if self.file_type == 'excel':
            return read_xlsx_as_csv_text(self.csv_file)
        return read_text_file(self.csv_file)

    def convert(self) -> ConversionResult:
        """メイン変換処理"""
        print(f"[INFO] 要件定義書変換開始: {self.csv_file}")
        result = convert_csv_text(self.read_text())
        print(f"[SUCCESS] 変換完了: {len(result.document.spans)}個の要素 (ファイル名: {result.file_name})")
        return result


def main():
    """メイン関数"""
    import argparse

    parser = argparse.ArgumentParser(description='要件定義書CSVをMarkdownに変換')
    parser.add_argument('csv_file', help='変換するCSVファイル（.csv/.xlsx）')
    parser.add_argument('-v', '--verbose', action='store_true',
                       help='デバッグ情報を出力')

    args = parser.parse_args()

    set_verbose(args.verbose)

    try:
        result = CsvToMarkdownConverter(args.csv_file).convert()
    except (InsufficientRowsError, FileReadError) as e:
        print(f"エラー: {e}")
        sys.exit(1)

    print(result.document.text)


if __name__ == "__main__":
    main()
