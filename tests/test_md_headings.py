"""md_headings.py (Markdown見出し抽出) のテストコード

このテストコードは以下の機能をテストします：
- 見出し行の判定とタイトル抽出
- 本文行の蓄積
- 同名見出しの上書き
"""

import sys
from pathlib import Path
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

import md_headings
from md_headings import extract_heading_map, heading_title


class TestHeadingTitle:
    """heading_title関数のテスト"""

    def test_strip_hashes(self):
        """"#" をすべて除去して前後の空白を取り除く"""
        assert heading_title("# 目的") == "目的"
        assert heading_title("###   機能要件  ") == "機能要件"

    def test_hashes_inside_title_removed(self):
        """タイトル中の "#" も除去される"""
        assert heading_title("## C#対応") == "C対応"


class TestExtractHeadingMap:
    """extract_heading_map関数のテスト"""

    def test_basic(self):
        """見出しごとに本文行をまとめる"""
        text = "\n# 目的\nテスト目的です\n\n## 機能\n機能A\n機能B\n"
        assert extract_heading_map(text) == {
            "目的": ["テスト目的です"],
            "機能": ["機能A", "機能B"],
        }

    def test_levels_are_not_distinguished(self):
        """見出しレベルは区別しない"""
        text = "# 大\n## 中\n### 小\n本文\n"
        heading_map = extract_heading_map(text)
        assert list(heading_map) == ["大", "中", "小"]
        assert heading_map["大"] == []
        assert heading_map["小"] == ["本文"]

    def test_last_wins(self):
        """同じタイトルの見出しは最後の出現の内容だけを保持"""
        text = "## 機能\n古い内容\n# 目的\n目的文\n## 機能\n新しい内容\n"
        heading_map = extract_heading_map(text)

        assert heading_map["機能"] == ["新しい内容"]
        assert heading_map["目的"] == ["目的文"]
        assert len(heading_map) == 2

    def test_lines_before_first_heading_discarded(self):
        """最初の見出しより前の本文は捨てる"""
        text = "前置き\nもう一行\n# 目的\n本文\n"
        assert extract_heading_map(text) == {"目的": ["本文"]}

    def test_body_lines_trimmed(self):
        """本文行はトリミングし、空白だけの行は無視する"""
        text = "# 目的\n   本文   \n    \n\t次の行\n"
        assert extract_heading_map(text) == {"目的": ["本文", "次の行"]}

    def test_indented_hash_is_body(self):
        """行頭が "#" でなければ見出しではない"""
        text = "# 目的\n  # 本文扱い\n"
        assert extract_heading_map(text) == {"目的": ["# 本文扱い"]}

    def test_empty_title_collects_nothing(self):
        """タイトルが空の見出しの後の本文は蓄積しない"""
        text = "#\n本文\n"
        assert extract_heading_map(text) == {"": []}

    def test_empty_text(self):
        """空のテキストは空の対応表"""
        assert extract_heading_map("") == {}

    def test_crlf(self):
        """CRLF改行にも対応"""
        assert extract_heading_map("# 目的\r\n本文\r\n") == {"目的": ["本文"]}


class TestVerbose:
    """verboseモードのテスト"""

    @pytest.fixture(autouse=True)
    def reset_verbose(self):
        yield
        md_headings.set_verbose(False)

    def test_duplicate_heading_reported(self, capsys):
        """見出しの重複はverbose時のみ表示"""
        assert not md_headings.is_verbose()
        extract_heading_map("# 目的\na\n# 目的\nb\n")
        assert capsys.readouterr().out == ""

        md_headings.set_verbose(True)
        assert md_headings.is_verbose()
        extract_heading_map("# 目的\na\n# 目的\nb\n")
        assert "[DEBUG] 見出しの重複により上書き: 目的" in capsys.readouterr().out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
