"""Test suite for CLI functionality."""

import json
import logging

import pytest
import yaml

from content_workflows.cli import create_parser, load_document, load_workflow, main

WORKFLOW = {
    "id": "wf-title",
    "name": "Title from AI",
    "steps": [
        {"id": "resolve_taxonomy"},
        {"id": "apply_outputs", "actions": [{"type": "update_post_title", "source": "output.title"}]},
    ],
}

PAYLOAD = {
    "post": {"title": "Hello", "content": "Body"},
    "output": {"title": "Hallo"},
    "taxonomy": {"categories": [{"slug": "news"}], "tags": []},
    "source_language": "en",
    "target_language": "de",
}


@pytest.fixture(autouse=True)
def clean_cli_logger():
    """Remove the console handlers main() attaches to the package logger."""
    yield
    package_logger = logging.getLogger("content_workflows")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def workflow_file(tmp_path):
    path = tmp_path / "workflow.json"
    path.write_text(json.dumps(WORKFLOW))
    return path


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "payload.yaml"
    path.write_text(yaml.safe_dump(PAYLOAD))
    return path


def _json_documents(output):
    return [json.loads(line) for line in output.splitlines() if line.strip()]


class TestCLIParser:
    """Test CLI argument parsing."""

    def test_parser_creation(self):
        parser = create_parser()
        assert parser.prog == "content-workflows"

    def test_version_argument(self):
        parser = create_parser()

        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])

        assert exc_info.value.code == 0

    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_run_command_parsing(self):
        args = create_parser().parse_args(
            ["run", "wf.yaml", "payload.json", "-o", "out.json", "--target-language", "fr", "--stop-on-error"]
        )

        assert args.command == "run"
        assert args.workflow == "wf.yaml"
        assert args.payload == "payload.json"
        assert args.output == "out.json"
        assert args.target_language == "fr"
        assert args.source_language is None
        assert args.stop_on_error is True
        assert args.strict is False

    def test_global_options(self):
        args = create_parser().parse_args(["--verbose", "--json-output", "steps", "--external-only"])

        assert args.verbose is True
        assert args.json_output is True
        assert args.external_only is True


class TestLoading:
    """Test workflow and payload loading."""

    def test_load_yaml_and_json(self, workflow_file, payload_file):
        assert load_document(workflow_file) == WORKFLOW
        assert load_document(payload_file) == PAYLOAD

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ValueError, match="Cannot parse"):
            load_document(path)

    def test_load_workflow_validates(self, tmp_path):
        path = tmp_path / "wf.json"
        path.write_text(json.dumps({"steps": ["not an object"]}))

        with pytest.raises(ValueError, match="Invalid workflow"):
            load_workflow(path)

    def test_load_workflow_requires_object(self, tmp_path):
        path = tmp_path / "wf.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="must contain a workflow object"):
            load_workflow(path)


class TestCommands:
    """Test the CLI subcommands end to end."""

    def test_steps(self, capsys):
        assert main(["--json-output", "steps"]) == 0

        documents = _json_documents(capsys.readouterr().out)
        assert {s["id"] for s in documents[0]["data"]} == {"resolve_taxonomy", "apply_outputs"}

    def test_validate_valid(self, workflow_file, capsys):
        assert main(["--json-output", "validate", str(workflow_file), "--virtual"]) == 0

        documents = _json_documents(capsys.readouterr().out)
        assert documents[0]["data"] == {"valid": True, "errors": []}

    def test_validate_invalid(self, tmp_path, capsys):
        path = tmp_path / "wf.json"
        path.write_text(json.dumps({"steps": [{"id": "ghost"}]}))

        assert main(["--json-output", "validate", str(path)]) == 1

        documents = _json_documents(capsys.readouterr().out)
        assert documents[0]["data"]["errors"] == ["Step 0: Unknown step type 'ghost'"]

    def test_check(self, workflow_file, capsys):
        assert main(["--json-output", "check", str(workflow_file)]) == 0

        documents = _json_documents(capsys.readouterr().out)
        assert documents[0]["data"] == {"compatible": True, "incompatible_steps": []}

    def test_run_writes_payload(self, workflow_file, payload_file, tmp_path, capsys):
        output = tmp_path / "out" / "result.json"

        assert main(["--json-output", "run", str(workflow_file), str(payload_file), "-o", str(output)]) == 0

        result = json.loads(output.read_text())
        assert result["post"]["title"] == "Hallo"
        # No term backend: the resolver is unavailable and terms are left alone
        assert result["taxonomy"]["categories"] == [{"slug": "news"}]

        documents = {d["type"]: d["data"] for d in _json_documents(capsys.readouterr().out)}
        assert documents["report"]["stats"] == {"executed": 2, "skipped": 0, "errors": 0}
        assert documents["changes"]["post"] == {"title": "Hallo"}

    def test_run_failure_exit_code(self, tmp_path, payload_file):
        path = tmp_path / "wf.json"
        path.write_text(json.dumps({"steps": [{"id": "apply_outputs", "actions": [{"type": "update_post_title", "source": "output.none"}]}]}))

        assert main(["--json-output", "run", str(path), str(payload_file)]) == 1

    def test_run_language_override(self, tmp_path, workflow_file, payload_file):
        output = tmp_path / "result.json"

        main(["--json-output", "run", str(workflow_file), str(payload_file), "-o", str(output), "--target-language", "fr"])

        assert json.loads(output.read_text())["target_language"] == "fr"

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--json-output", "validate", str(tmp_path / "absent.json")]) == 1

        error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert error["type"] == "error"

    def test_rich_output(self, workflow_file, payload_file, capsys):
        assert main(["run", str(workflow_file), str(payload_file)]) == 0

        err = capsys.readouterr().err
        assert "2 of 2 steps completed, 0 skipped, 0 failed" in err
