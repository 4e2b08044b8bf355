#!/usr/bin/env python3
"""
要件定義要約モジュール
見出し→本文の対応表からキーワード規則で各項目を抽出し、要約文を組み立てる

抽出モード:
- first: キーワードの優先順に、最初に一致した見出しの内容（"。 "で結合）
- all:   一致したすべての見出しをタイトル順に「・見出し: 内容」で列挙
- raw:   最初に一致した見出しの内容を改行を保ったまま返す
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from md_headings import HeadingMap
from utils import clean_content

NO_ENTRY = "記載がありません"
NO_CONTENT_SUMMARY = "要約する内容がありません。"

MODE_FIRST = "first"
MODE_ALL = "all"
MODE_RAW = "raw"

FIRST_SEPARATOR = "。 "
ALL_SEPARATOR = ", "
RAW_SEPARATOR = "\n"


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
class SummaryRule:
    """要約項目の抽出規則"""
    slot: str
    keywords: Tuple[str, ...]
    mode: str
    excluding: Tuple[str, ...] = ()


# 抽出規則表（キーワードは優先順）
SUMMARY_RULES: Tuple[SummaryRule, ...] = (
    SummaryRule("purpose", ("目的",), MODE_FIRST),
    SummaryRule("people", ("関係者", "体制", "登場人物"), MODE_FIRST),
    SummaryRule("functional", ("機能",), MODE_ALL),
    SummaryRule("non_functional",
                ("非機能", "性能要求", "品質要求", "互換性要求", "保守性要求"), MODE_ALL),
    SummaryRule("tech_specs",
                ("技術仕様", "動作環境", "必要なソフトウェア", "スクリプトファイル仕様", "コマンド実行順序"),
                MODE_ALL),
    SummaryRule("constraints", ("制約", "前提条件", "技術的制約", "コンテンツ制約"), MODE_ALL),
    SummaryRule("deliverables", ("成果物", "納品物", "生成物"), MODE_ALL, excluding=("中間",)),
    SummaryRule("qa", ("テスト", "チェックポイント", "エラー処理"), MODE_ALL),
    SummaryRule("scalability", ("拡張", "展開", "将来的な拡張", "カスタマイズポイント"), MODE_ALL),
    SummaryRule("directory_structure", ("ディレクトリ構造",), MODE_RAW),
    SummaryRule("processing_flow", ("処理フロー",), MODE_FIRST),
)

# (項目, 項目名, 内容がある場合の前置き文)
SECTION_TEMPLATES = (
    ("tech_specs", "開発に必要な技術仕様", "開発に必要な技術仕様は以下の通りです。"),
    ("constraints", "制約事項", "制約事項として以下の内容が挙げられています。"),
    ("deliverables", "成果物", "成果物は以下の通りです。"),
    ("qa", "開発後の品質保証", "開発後の品質保証は、以下の方針で進められます。"),
    ("scalability", "将来的な拡張性", "将来的な拡張性として、以下の点が考慮されています。"),
)


@dataclass(frozen=True)
class SummarySections:
    """要約の各項目（該当なしはNO_ENTRY）"""
    purpose: str = NO_ENTRY
    people: str = NO_ENTRY
    functional: str = NO_ENTRY
    non_functional: str = NO_ENTRY
    tech_specs: str = NO_ENTRY
    constraints: str = NO_ENTRY
    deliverables: str = NO_ENTRY
    qa: str = NO_ENTRY
    scalability: str = NO_ENTRY
    directory_structure: str = NO_ENTRY
    processing_flow: str = NO_ENTRY


def _matching_headings(heading_map: HeadingMap, keyword: str) -> List[str]:
    return [heading for heading in heading_map if keyword in heading]


def _first_heading(heading_map: HeadingMap, keyword: str) -> Optional[str]:
    return next((heading for heading in heading_map if keyword in heading), None)


def first_match(heading_map: HeadingMap, keywords: Sequence[str]) -> str:
    """キーワード優先順に最初に一致した見出しの内容を返す

    一致した見出しの内容が空の場合は次のキーワードを試す。
    """
    for keyword in keywords:
        heading = _first_heading(heading_map, keyword)
        if heading is None:
            continue
        content = clean_content(heading_map[heading], FIRST_SEPARATOR)
        if content:
            return content
    return NO_ENTRY


def all_matches(heading_map: HeadingMap, keywords: Sequence[str],
                excluding: Sequence[str] = ()) -> str:
    """いずれかのキーワードに一致するすべての見出しの内容を列挙

    除外キーワードを含む見出しは対象外。見出しはタイトルの辞書順で並べる。
    """
    matched = set()
    for keyword in keywords:
        for heading in _matching_headings(heading_map, keyword):
            if not any(ex in heading for ex in excluding):
                matched.add(heading)

    result = ""
    for heading in sorted(matched):
        content = clean_content(heading_map[heading], ALL_SEPARATOR)
        if content:
            result += f"・{heading}: {content}\n"
    return result or NO_ENTRY


def raw_match(heading_map: HeadingMap, keywords: Sequence[str]) -> str:
    """最初に一致した見出しの内容を改行を保ったまま返す"""
    for keyword in keywords:
        heading = _first_heading(heading_map, keyword)
        if heading is not None:
            return clean_content(heading_map[heading], RAW_SEPARATOR) or NO_ENTRY
    return NO_ENTRY


def apply_rule(heading_map: HeadingMap, rule: SummaryRule) -> str:
    """抽出規則を1つ適用する"""
    if rule.mode == MODE_FIRST:
        return first_match(heading_map, rule.keywords)
    if rule.mode == MODE_ALL:
        return all_matches(heading_map, rule.keywords, rule.excluding)
    if rule.mode == MODE_RAW:
        return raw_match(heading_map, rule.keywords)
    raise ValueError(f"不明な抽出モードです: {rule.mode}")


def extract_sections(heading_map: HeadingMap,
                     rules: Sequence[SummaryRule] = SUMMARY_RULES) -> SummarySections:
    """規則表に従って要約の各項目を抽出"""
    values: Dict[str, str] = {}
    for rule in rules:
        values[rule.slot] = apply_rule(heading_map, rule)
        if values[rule.slot] == NO_ENTRY:
            debug_print(f"[DEBUG] 該当する見出しなし: {rule.slot} {rule.keywords}")
    return SummarySections(**values)


def project_name_from_file_name(file_name: str) -> str:
    """保存用ファイル名からプロジェクト名を取り出す"""
    return file_name.replace("要件定義書_", "")


def format_section(content: str, section_name: str, prefix: str) -> str:
    """要約セクションを整形（該当なしの場合は定型文）"""
    if content == NO_ENTRY:
        return f"{section_name}については、特に記載がありません。"
    return f"{prefix}\n{content}"


def format_system_configuration(sections: SummarySections) -> str:
    """ディレクトリ構造と処理フローからシステム構成セクションを整形"""
    directory = sections.directory_structure
    flow = sections.processing_flow
    if directory == NO_ENTRY and flow == NO_ENTRY:
        return "最終的なシステム構成については、特に記載がありません。"

    text = "最終的なシステム構成は以下の通りです。\n"
    if directory != NO_ENTRY:
        indented = "\n".join("    " + line for line in directory.split("\n"))
        text += f"・ディレクトリ構造:\n{indented}\n"
    if flow != NO_ENTRY:
        text += f"・処理フロー: {flow}\n"
    return text


def build_summary(sections: SummarySections, file_name: str) -> str:
    """抽出済みの項目から要約文を組み立てる"""
    project_name = project_name_from_file_name(file_name)

    parts = [
        f"この要件定義は「{project_name}」プロジェクトに関するもので、\n",
        f"目的は「{sections.purpose}」であり、\n",
        f"関わる人は「{sections.people}」です。\n\n",
        "機能要件は以下の通りです。\n",
        sections.functional,
        "\n非機能要件は以下の通りです。\n",
        sections.non_functional,
    ]

    templated = {
        slot: format_section(getattr(sections, slot), name, prefix)
        for slot, name, prefix in SECTION_TEMPLATES
    }
    parts.append("\n" + templated["tech_specs"])
    parts.append("\n" + templated["constraints"])
    parts.append("\n" + format_system_configuration(sections))
    parts.append("\n" + templated["deliverables"])
    parts.append("\n" + templated["qa"])
    parts.append("\n" + templated["scalability"])

    return "".join(parts)


def summarize(heading_map: HeadingMap, file_name: str,
              sections: Optional[SummarySections] = None) -> str:
    """見出し対応表とファイル名から要約文を生成

    Args:
        heading_map: 見出し→本文行の対応表
        file_name: 変換時に決定した保存用ファイル名
        sections: 抽出済みの項目（省略時はheading_mapから抽出）

    Returns:
        要約文
    """
    if sections is None:
        sections = extract_sections(heading_map)
    return build_summary(sections, file_name)
