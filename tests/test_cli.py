"""
Tests for the command line interface.
"""
import json

from typer.testing import CliRunner

runner = CliRunner()


class TestResolveCommand:

    def test_json_output(self):
        from cli.main import app

        result = runner.invoke(app, ["resolve", "1 John 4:8", "--output", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["book"] == "1 John"
        assert data["testament"] == "new"
        assert data["position"] == 61 / 66

    def test_psalm_spelling(self):
        from cli.main import app

        assert runner.invoke(app, ["resolve", "Psalm 23:1"]).exit_code == 1
        assert runner.invoke(app, ["resolve", "Psalm 23:1", "--psalm-spelling", "Psalm"]).exit_code == 0


class TestTimelineCommand:

    def test_writes_svg(self, tmp_path):
        from cli.main import app

        target = tmp_path / "timeline.svg"
        result = runner.invoke(app, [
            "timeline", "John 3:16", "Genesis 1:1", "Genesis 3:15", "NotABook 1:1", "--svg", str(target),
        ])

        assert result.exit_code == 0
        assert "skipped" in result.stdout
        assert target.read_text(encoding="utf-8").startswith("<svg")

    def test_unresolvable_source(self):
        from cli.main import app

        assert runner.invoke(app, ["timeline", "NotABook 1:1", "Genesis 1:1"]).exit_code == 1


class TestCoverageCommand:

    def test_saves_merged_coverage(self, tmp_path):
        from cli.main import app

        saved = tmp_path / "coverage.json"
        saved.write_text(json.dumps([{"book": "John", "chaptersRead": [1], "lastStudied": None}]), encoding="utf-8")

        result = runner.invoke(app, ["coverage", "John 3:16", "Jude 1:3", "--existing", str(saved), "--save", str(saved)])

        assert result.exit_code == 0
        data = json.loads(saved.read_text(encoding="utf-8"))
        assert [entry["book"] for entry in data] == ["John", "Jude"]
        assert data[0]["chaptersRead"] == [1, 3]

    def test_malformed_existing_file(self, tmp_path):
        from cli.main import app

        saved = tmp_path / "coverage.json"
        saved.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["coverage", "John 3:16", "--existing", str(saved)])

        assert result.exit_code == 1
        assert "Error" in result.stdout
