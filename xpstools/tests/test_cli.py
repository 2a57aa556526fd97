"""
Tests for the command line entry point.

Run with: python -m pytest xpstools/tests/test_cli.py -v
"""

import zipfile

import pytest

from conftest import StubFontProvider
from xpstools import cli
from xpstools.annotation import xps_editor

ANNOTATIONS = """
annotations:
  - text: Hello
    page_number: 0
    position_method: Absolute
    position: [100, 100]
"""


@pytest.fixture(autouse=True)
def stub_fonts(monkeypatch):
    monkeypatch.setattr(xps_editor.FontProvider, "from_settings", lambda settings: StubFontProvider())


@pytest.fixture
def annotation_file(tmp_path):
    path = tmp_path / "annotations.yaml"
    path.write_text(ANNOTATIONS, encoding="utf-8")
    return path


class TestMain:
    """Tests for cli.main."""

    def test_annotate(self, two_page_xps, annotation_file, tmp_path, capsys):
        output = tmp_path / "out.xps"

        code = cli.main(["annotate", str(two_page_xps), str(output), "--annotations", str(annotation_file)])

        assert code == 0
        assert "Annotated pages: 1" in capsys.readouterr().out
        assert zipfile.is_zipfile(output)

    def test_repair(self, two_page_xps, annotation_file, tmp_path, capsys):
        annotated = tmp_path / "annotated.xps"
        repaired = tmp_path / "repaired.xps"
        cli.main(["annotate", str(two_page_xps), str(annotated), "-a", str(annotation_file)])

        code = cli.main(["repair", str(annotated), str(repaired), "--pages", "0"])

        assert code == 0
        assert "Repaired glyph runs: 0" in capsys.readouterr().out
        assert repaired.exists()

    def test_missing_annotation_file(self, two_page_xps, tmp_path):
        code = cli.main([
            "annotate", str(two_page_xps), str(tmp_path / "out.xps"), "-a", str(tmp_path / "missing.yaml"),
        ])
        assert code == 1

    def test_unreadable_annotation_file(self, two_page_xps, tmp_path):
        path = tmp_path / "annotations.yaml"
        path.write_bytes(b"\xff\xfe")

        code = cli.main(["annotate", str(two_page_xps), str(tmp_path / "out.xps"), "-a", str(path)])
        assert code == 1

    def test_output_is_source(self, two_page_xps, annotation_file):
        code = cli.main(["annotate", str(two_page_xps), str(two_page_xps), "-a", str(annotation_file)])

        assert code == 1
        assert two_page_xps.exists()

    def test_repair_page_out_of_range(self, two_page_xps, tmp_path):
        code = cli.main(["repair", str(two_page_xps), str(tmp_path / "out.xps"), "--pages", "5"])
        assert code == 1

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])
