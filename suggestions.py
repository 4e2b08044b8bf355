#!/usr/bin/env python3
"""
改善提案生成モジュール
要約文と見出し→本文の対応表から、要件定義書の改善ポイントを提案する

提案は重複を除いたうえで辞書順に並べるため、同じ入力には常に同じ出力を返す。
"""

from typing import Optional, Set

from md_headings import HeadingMap
from summarizer import NO_ENTRY, SummarySections, extract_sections

NO_SUGGESTIONS = "改善案はありません。"

# 内容が短いと判断する文字数
SHORT_CONTENT_THRESHOLD = 30
# 性能要求・セキュリティ要件で具体性が足りないと判断する文字数
DETAIL_CONTENT_THRESHOLD = 50


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

MISSING_SECTION_LABELS = (
    "目的", "関係者", "機能", "非機能", "技術仕様",
    "制約", "システム構成", "成果物", "品質", "拡張",
)

FUNCTIONAL_DETAIL = (
    "・主要な機能要件を具体的に記述しましょう。"
    "各機能の入出力、処理内容、エラー時の挙動を明確にすると良いでしょう。"
)
NON_FUNCTIONAL_DETAIL = (
    "・性能、品質、セキュリティ、可用性など、非機能要件の具体的な数値目標や基準を明確にしましょう。"
)

# (見出しキーワード, 提案文)
DETAIL_CHECKS = (
    ("性能要求",
     "・性能要求には、応答時間、スループット、同時接続数など、具体的な数値目標を記述しましょう。"),
    ("セキュリティ要件",
     "・セキュリティ要件には、認証、認可、データ暗号化、脆弱性対策など、具体的な対策を記述しましょう。"),
)

# (要約に含まれるべき語のいずれか, 含まれない場合の提案文)
BEST_PRACTICE_CHECKS = (
    (("スコープ",),
     "・プロジェクトのスコープ（対象範囲と対象外範囲）を明確に定義しましょう。"),
    (("テスト", "品質保証"),
     "・テスト計画や受け入れ基準、品質保証の方針について記述しましょう。"),
    (("運用", "保守"),
     "・システム運用・保守に関する要件（ログ、監視、バックアップ、エラー通知など）を考慮しましょう。"),
    (("ユーザー", "関係者"),
     "・システムを利用するユーザーの種類や役割、権限について明確にしましょう。"),
    (("データ", "情報"),
     "・扱うデータの種類、構造、保存期間、プライバシーに関する考慮事項などを記述しましょう。"),
)


def missing_section_suggestions(summary: str) -> Set[str]:
    """要約中で「記載がありません」となっている項目の追記を提案"""
    suggestions = set()
    for label in MISSING_SECTION_LABELS:
        if (f"{label}は「{NO_ENTRY}」" in summary
                or f"{label}については、特に{NO_ENTRY}。" in summary):
            suggestions.add(f"・'{label}'に関する詳細な情報を追記しましょう。")
    return suggestions


def short_content_suggestions(heading_map: HeadingMap) -> Set[str]:
    """内容が短すぎる見出しの具体化を提案"""
    suggestions = set()
    for heading, lines in heading_map.items():
        combined = " ".join(lines).strip()
        if combined and len(combined) < SHORT_CONTENT_THRESHOLD:
            suggestions.add(f"・'{heading}' の内容をより具体的に、詳細に記述しましょう。")
    return suggestions


def detail_suggestions(heading_map: HeadingMap, sections: SummarySections) -> Set[str]:
    """機能・非機能・性能・セキュリティ要件の深掘りを提案"""
    suggestions = set()
    if sections.functional == NO_ENTRY:
        suggestions.add(FUNCTIONAL_DETAIL)
    if sections.non_functional == NO_ENTRY:
        suggestions.add(NON_FUNCTIONAL_DETAIL)

    for keyword, text in DETAIL_CHECKS:
        heading = next((h for h in heading_map if keyword in h), None)
        if heading is None:
            continue
        content = "".join(heading_map[heading])
        if 0 < len(content) < DETAIL_CONTENT_THRESHOLD:
            suggestions.add(text)
    return suggestions


def best_practice_suggestions(summary: str) -> Set[str]:
    """要件定義の一般的な観点が要約に含まれていない場合に提案"""
    return {
        text for words, text in BEST_PRACTICE_CHECKS
        if not any(word in summary for word in words)
    }


def collect_suggestions(heading_map: HeadingMap, summary: str,
                        sections: Optional[SummarySections] = None) -> Set[str]:
    """すべての規則を評価して提案の集合を返す"""
    if sections is None:
        sections = extract_sections(heading_map)

    suggestions = set()
    suggestions |= missing_section_suggestions(summary)
    suggestions |= short_content_suggestions(heading_map)
    suggestions |= detail_suggestions(heading_map, sections)
    suggestions |= best_practice_suggestions(summary)
    return suggestions


def generate_suggestions(heading_map: HeadingMap, summary: str,
                         sections: Optional[SummarySections] = None) -> str:
    """改善提案を辞書順に並べて改行区切りの文字列で返す

    Args:
        heading_map: 見出し→本文行の対応表
        summary: summarizer.summarize() が生成した要約文
        sections: 抽出済みの要約項目（省略時はheading_mapから抽出）

    Returns:
        改善提案（提案がない場合は「改善案はありません。」）
    """
    suggestions = collect_suggestions(heading_map, summary, sections)
    debug_print(f"[DEBUG] 改善提案: {len(suggestions)}件")
    if not suggestions:
        return NO_SUGGESTIONS
    return "\n".join(sorted(suggestions))
