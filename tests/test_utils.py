"""utils.py (共通ユーティリティ) のテストコード

このテストコードは以下の機能をテストします：
- split_nonempty_lines(): 改行での分割と空行の除去
- clean_content(): コードブロック記号と空白の除去
- read_text_file() / write_text_file(): UTF-8ファイルの読み書き
"""

import os
import sys
import tempfile
import shutil
from pathlib import Path
import pytest
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from errors import FileReadError, FileWriteError
from utils import split_nonempty_lines, clean_content, read_text_file, write_text_file


class TestSplitNonemptyLines:
    """split_nonempty_lines関数のテスト"""

    def test_newline_variants(self):
        """LF/CRLF/CRのいずれでも分割"""
        assert split_nonempty_lines("a\nb\r\nc\rd") == ["a", "b", "c", "d"]

    def test_empty_lines_removed(self):
        """空行は除去"""
        assert split_nonempty_lines("\n\na\n\n\nb\n") == ["a", "b"]

    def test_whitespace_lines_kept(self):
        """空白だけの行はトリミングせずに残す"""
        assert split_nonempty_lines("a\n  \n b ") == ["a", "  ", " b "]

    def test_empty_text(self):
        assert split_nonempty_lines("") == []

    def test_separator_controls_not_split(self):
        """ファイル・グループ・レコード区切り文字では分割しない"""
        assert split_nonempty_lines("a\x1cb\x1dc\x1ed") == ["a\x1cb\x1dc\x1ed"]
        assert split_nonempty_lines("x,目的,,,本文\x1e続き") == ["x,目的,,,本文\x1e続き"]

    def test_unicode_line_breaks(self):
        """垂直タブ・改ページ・NEL・行区切り・段落区切りでは分割"""
        text = "a\vb\fc\x85d\u2028e\u2029f"
        assert split_nonempty_lines(text) == ["a", "b", "c", "d", "e", "f"]


class TestCleanContent:
    """clean_content関数のテスト"""

    def test_join(self):
        """区切り文字で結合"""
        assert clean_content(["a", "b"], ", ") == "a, b"

    def test_remove_code_fence(self):
        """```を除去し、空になった行は捨てる"""
        assert clean_content(["```", "code```", "```"], "\n") == "code"

    def test_strip_each_line(self):
        """各行の前後の空白を除去"""
        assert clean_content(["  a  ", "\tb\t"], "。 ") == "a。 b"

    def test_empty(self):
        assert clean_content([], ", ") == ""


class TestReadWriteTextFile:
    """ファイル読み書きのテスト"""

    @pytest.fixture
    def temp_dir(self):
        """一時ディレクトリを作成し、テスト後にクリーンアップする"""
        temp_dir = tempfile.mkdtemp()
        yield temp_dir
        shutil.rmtree(temp_dir, ignore_errors=True)

    def test_roundtrip_with_subdirectory(self, temp_dir):
        """存在しないサブディレクトリも作成して保存"""
        path = os.path.join(temp_dir, "sub", "要約.txt")
        saved = write_text_file(path, "要約\r\n本文", "要約")

        assert saved == os.path.abspath(path)
        assert read_text_file(path) == "要約\n本文"
        assert os.listdir(os.path.dirname(path)) == ["要約.txt"]

    def test_overwrite(self, temp_dir):
        """既存ファイルを上書き"""
        path = os.path.join(temp_dir, "a.md")
        write_text_file(path, "old", "Markdown")
        write_text_file(path, "new", "Markdown")
        assert read_text_file(path) == "new"

    def test_read_missing(self, temp_dir):
        """存在しないファイルはFileReadError"""
        with pytest.raises(FileReadError) as exc_info:
            read_text_file(os.path.join(temp_dir, "none.csv"))
        assert exc_info.value.path.endswith("none.csv")

    def test_read_invalid_utf8(self, temp_dir):
        """UTF-8でないファイルはFileReadError"""
        path = os.path.join(temp_dir, "bad.csv")
        with open(path, "wb") as f:
            f.write(b"\xff\xfe\xfa")
        with pytest.raises(FileReadError):
            read_text_file(path)

    def test_write_failure(self, temp_dir):
        """書き込み失敗はFileWriteError"""
        path = os.path.join(temp_dir, "a.md")
        with patch('os.replace', side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(FileWriteError) as exc_info:
                write_text_file(path, "text", "Markdown")

        assert str(exc_info.value) == (
            "Markdownファイルの保存中にエラーが発生しました: Permission denied"
        )
        assert not os.path.exists(path)
        assert os.listdir(temp_dir) == []

    def test_existing_tmp_file_untouched(self, temp_dir):
        """保存先と同名の.tmpファイルが既にあっても上書きしない"""
        path = os.path.join(temp_dir, "out.md")
        user_file = path + ".tmp"
        with open(user_file, "w", encoding="utf-8") as f:
            f.write("user data")

        write_text_file(path, "# 目的\n", "Markdown")

        assert read_text_file(path) == "# 目的\n"
        assert read_text_file(user_file) == "user data"
        assert sorted(os.listdir(temp_dir)) == ["out.md", "out.md.tmp"]

    def test_file_mode(self, temp_dir):
        """新規ファイルは0o644、既存ファイルは元の権限を保つ"""
        new_path = os.path.join(temp_dir, "new.md")
        write_text_file(new_path, "a", "Markdown")
        assert os.stat(new_path).st_mode & 0o777 == 0o644

        old_path = os.path.join(temp_dir, "old.md")
        write_text_file(old_path, "a", "Markdown")
        os.chmod(old_path, 0o664)
        write_text_file(old_path, "b", "Markdown")
        assert os.stat(old_path).st_mode & 0o777 == 0o664


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
