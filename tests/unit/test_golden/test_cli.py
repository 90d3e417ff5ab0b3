"""
test_cli.py - docmatch-diff command line
"""

from docmatch.cli import EXIT_DIFFERENT, EXIT_ERROR, EXIT_MATCH, main


class TestCLI:

    def test_match(self, write_file, capsys):
        expected = write_file("e.json", '{"id": "{{anyString}}"}')
        actual = write_file("a.json", '{"id": "x"}')
        assert main([str(expected), str(actual)]) == EXIT_MATCH
        assert capsys.readouterr().out == ""

    def test_difference(self, write_file, capsys):
        expected = write_file("e.json", '{"name": "Alice"}')
        actual = write_file("a.json", '{"name": "Bob"}')
        assert main([str(expected), str(actual), "--no-color"]) == EXIT_DIFFERENT
        out = capsys.readouterr().out
        assert out.startswith("JSON mismatch at 1 path:\n")
        assert '-   "name": "Alice"' in out
        assert '+   "name": "Bob"' in out

    def test_html_by_suffix(self, write_file, capsys):
        expected = write_file("e.html", "<p>a</p>")
        actual = write_file("a.html", "<p>b</p>")
        assert main([str(expected), str(actual), "--no-color"]) == EXIT_DIFFERENT
        assert capsys.readouterr().out.startswith("HTML mismatch at 1 path:")

    def test_format_override(self, write_file):
        expected = write_file("e.txt", "<p>a</p>")
        actual = write_file("a.txt", "<p>a</p>")
        assert main([str(expected), str(actual), "--format", "html"]) == EXIT_MATCH

    def test_ignore_field(self, write_file):
        expected = write_file("e.json", '{"id": 1, "a": 1}')
        actual = write_file("a.json", '{"id": 2, "a": 1}')
        assert main([str(expected), str(actual), "--ignore-field", "id"]) == EXIT_MATCH

    def test_config_file(self, write_file):
        expected = write_file("e.json", '{"tags": [1, 2]}')
        actual = write_file("a.json", '{"tags": [2, 1]}')
        config = write_file("c.yaml", "json:\n  ignore_array_order_paths: ['$.tags']\n")
        assert main([str(expected), str(actual), "--config", str(config)]) == EXIT_MATCH

    def test_parse_error(self, write_file, capsys):
        expected = write_file("e.json", '{"a": "{{bogus}}"}')
        actual = write_file("a.json", "{}")
        assert main([str(expected), str(actual)]) == EXIT_ERROR
        assert "UNKNOWN_MATCHER" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "x.json"), str(tmp_path / "y.json")]) == EXIT_ERROR
        assert "docmatch-diff:" in capsys.readouterr().err
