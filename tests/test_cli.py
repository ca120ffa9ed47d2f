"""
Command line tests

End-to-end runs of the argparse pipeline on AST files.
"""

import json
from argparse import Namespace

import pytest

from vaultpress.__main__ import main
from vaultpress.models.state import ProgramState, pipeline


DOCUMENT = {
    "type": "Document",
    "children": [
        {"type": "FrontMatter", "value": "slug: cli-post\ntitle: CLI"},
        {"type": "Paragraph", "children": [{"type": "Text", "value": "Hello"}]},
    ],
}


@pytest.fixture
def ast_file(tmp_path):
    path = tmp_path / "note.json"
    path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
    return path


class TestMain:
    """Pipeline from AST file to output"""

    def test_wechat_to_stdout(self, ast_file, tmp_path, capsys):
        main(["--inputFile", str(ast_file), "--vaultDir", str(tmp_path), "--target", "wechat-post"])
        assert capsys.readouterr().out == "<p>Hello</p>"

    def test_hugo_to_file(self, ast_file, tmp_path):
        out = tmp_path / "index.md"
        main(["--inputFile", str(ast_file), "--vaultDir", str(tmp_path), "--outputFile", str(out)])
        assert out.read_text(encoding="utf-8") == "---\nslug: cli-post\ntitle: CLI\n---\n\nHello\n"

    def test_yaml_input(self, tmp_path, capsys):
        path = tmp_path / "note.yaml"
        path.write_text(
            "type: Document\nchildren:\n  - type: Paragraph\n    children:\n      - type: Text\n        value: Hi\n",
            encoding="utf-8",
        )
        main(["--inputFile", str(path), "--vaultDir", str(tmp_path), "--target", "wechat-post", "--slug", "s"])
        assert capsys.readouterr().out == "<p>Hi</p>"

    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit) as info:
            main(["--inputFile", str(tmp_path / "nope.json"), "--vaultDir", str(tmp_path)])
        assert info.value.code == 1

    def test_invalid_node_type(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"type": "Bogus"}), encoding="utf-8")
        with pytest.raises(SystemExit) as info:
            main(["--inputFile", str(path), "--vaultDir", str(tmp_path)])
        assert info.value.code == 1

    def test_export_failure_exits(self, tmp_path):
        path = tmp_path / "noslug.json"
        path.write_text(json.dumps({"type": "Document", "children": []}), encoding="utf-8")
        with pytest.raises(SystemExit) as info:
            main(["--inputFile", str(path), "--vaultDir", str(tmp_path)])
        assert info.value.code == 1


class TestProgramState:
    """State bus helpers"""

    def test_from_namespace_ignores_unknown(self):
        state = ProgramState.state_createFromNamespace(
            Namespace(inputFile="a.json", target="wechat-post", verbosity=2, unrelated=True)
        )
        assert state.inputFile == "a.json"
        assert state.target == "wechat-post"
        assert not hasattr(state, "unrelated")

    def test_copy_is_independent(self):
        state = ProgramState(inputFile="a")
        copy = state.copy()
        copy.inputFile = "b"
        assert state.inputFile == "a"

    def test_pipeline_order(self):
        def stage(name):
            def run(state):
                state = state.copy()
                state.outputFile += name
                return state
            return run

        assert pipeline(ProgramState(), stage("a"), stage("b"), stage("c")).outputFile == "abc"
