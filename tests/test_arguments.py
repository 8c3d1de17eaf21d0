"""Tests for ima2dicom/arguments.py."""

import os

import pytest

from ima2dicom.arguments import (
    Argument,
    ResolvedRequest,
    collect_arguments,
    interpret_arguments,
    resolve_output_directory,
    resolve_request,
)
from ima2dicom.errors import (
    ArgumentFormatError,
    ConfigNotFoundError,
    ConfigParseError,
    DirectoryCreateError,
    DirectoryNotFoundError,
)
from ima2dicom.loader import load_default_parameters


class TestArgumentNames:
    def test_cli_strings(self):
        assert Argument.IN.cli == "--in"
        assert Argument.OUT.cli == "--out"
        assert Argument.CONFIG.cli == "--config"
        assert Argument.GENCONF.cli == "--genconf"
        assert Argument.HELP.cli == "--help"


class TestCollectArguments:
    def test_no_arguments(self):
        assert collect_arguments([]) == {}

    def test_name_value_pairs(self):
        lookup = collect_arguments(["--in=/input", "--out=/output", "--config=/c.json"])
        assert lookup == {"in": "/input", "out": "/output", "config": "/c.json"}

    def test_bare_flag_maps_to_empty_string(self):
        assert collect_arguments(["--genconf"]) == {"genconf": ""}

    def test_empty_value(self):
        assert collect_arguments(["--out="]) == {"out": ""}

    def test_value_may_contain_equals(self):
        lookup = collect_arguments(["--config=/path/with=equals/config.json"])
        assert lookup["config"] == "/path/with=equals/config.json"

    def test_flags_mixed_with_values(self):
        lookup = collect_arguments(["--in=/some/path", "--genconf", "--out=/other/path", "--help"])
        assert set(lookup) == {"in", "genconf", "out", "help"}

    @pytest.mark.parametrize("token", ["---in=/input", "----in=/input"])
    def test_extra_leading_dashes_dropped(self, token):
        assert collect_arguments([token]) == {"in": "/input"}

    def test_extra_dashes_count_as_the_same_flag(self):
        with pytest.raises(ArgumentFormatError, match="more than once"):
            collect_arguments(["--in=/a", "---in=/b"])

    @pytest.mark.parametrize(
        "token", ["in=/input", "-in=/input", "/input", "--", "---", "--=value", "---=value", ""]
    )
    def test_malformed_token(self, token):
        with pytest.raises(ArgumentFormatError) as excinfo:
            collect_arguments([token])
        assert excinfo.value.token == token

    def test_error_names_the_bad_token(self):
        with pytest.raises(ArgumentFormatError, match="Invalid argument format: oops"):
            collect_arguments(["--in=/a", "oops", "--out=/b"])

    def test_repeated_flag_rejected(self):
        with pytest.raises(ArgumentFormatError, match="more than once"):
            collect_arguments(["--in=/a", "--in=/b"])


class TestInterpretArguments:
    def test_defaults_to_working_directory(self, tmp_path):
        request = interpret_arguments({}, cwd=str(tmp_path))
        assert isinstance(request, ResolvedRequest)
        assert request.input_dir == tmp_path
        assert request.output_dir == tmp_path

    def test_defaults_to_process_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        request = interpret_arguments({})
        assert os.path.samefile(request.input_dir, tmp_path)
        assert os.path.samefile(request.output_dir, tmp_path)

    def test_no_config_uses_bundled_default(self, tmp_path):
        request = interpret_arguments({}, cwd=str(tmp_path))
        assert request.parameters == load_default_parameters()

    def test_bare_config_flag_uses_bundled_default(self, tmp_path):
        request = interpret_arguments({"config": ""}, cwd=str(tmp_path))
        assert request.parameters == load_default_parameters()

    def test_explicit_directories(self, tmp_path):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        in_dir.mkdir()
        out_dir.mkdir()
        request = interpret_arguments({"in": str(in_dir), "out": str(out_dir)})
        assert request.input_dir == in_dir
        assert request.output_dir == out_dir

    def test_existing_output_used_as_is(self, tmp_path):
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        (out_dir / "keep.dcm").write_bytes(b"x")
        request = interpret_arguments({"in": str(tmp_path), "out": str(out_dir)})
        assert request.output_dir == out_dir
        assert (out_dir / "keep.dcm").exists()

    def test_missing_input_directory(self, tmp_path):
        missing = tmp_path / "missing"
        with pytest.raises(DirectoryNotFoundError, match="missing"):
            interpret_arguments({"in": str(missing)})

    def test_input_that_is_a_file(self, tmp_path):
        not_a_dir = tmp_path / "file.ima"
        not_a_dir.write_bytes(b"")
        with pytest.raises(DirectoryNotFoundError):
            interpret_arguments({"in": str(not_a_dir)})

    def test_input_failure_stops_before_output(self, tmp_path):
        out_dir = tmp_path / "never_created"
        with pytest.raises(DirectoryNotFoundError):
            interpret_arguments({"in": str(tmp_path / "missing"), "out": str(out_dir)})
        assert not out_dir.exists()

    def test_missing_output_directory_created(self, tmp_path):
        new_dir = tmp_path / "new_dir"
        request = interpret_arguments({"in": str(tmp_path), "out": str(new_dir)})
        assert new_dir.is_dir()
        assert request.output_dir == new_dir

    def test_nested_output_directory_created(self, tmp_path):
        nested = tmp_path / "level1" / "level2" / "level3"
        request = interpret_arguments({"in": str(tmp_path), "out": str(nested)})
        assert nested.is_dir()
        assert request.output_dir == nested

    def test_custom_config(self, tmp_path):
        config = tmp_path / "custom.json"
        config.write_text('{"Rows": 256, "Modality": "CT"}')
        request = interpret_arguments({"in": str(tmp_path), "out": str(tmp_path), "config": str(config)})
        assert request.parameters.present() == {"Rows": 256, "Modality": "CT"}

    def test_missing_config(self, tmp_path):
        with pytest.raises(ConfigNotFoundError, match="/missing.json"):
            interpret_arguments({"in": str(tmp_path), "out": str(tmp_path), "config": "/missing.json"})

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "bad.json"
        config.write_text("{ not json at all")
        with pytest.raises(ConfigParseError, match="Failed to load config"):
            interpret_arguments({"in": str(tmp_path), "out": str(tmp_path), "config": str(config)})

    def test_unknown_arguments_ignored(self, tmp_path):
        request = interpret_arguments({"in": str(tmp_path), "out": str(tmp_path), "shiny": "yes"})
        assert request.input_dir == tmp_path


class TestResolveOutputDirectory:
    def test_invalid_characters(self, tmp_path):
        bad = str(tmp_path / "invalid\0path")
        with pytest.raises(DirectoryCreateError, match="output directory .*invalid characters"):
            resolve_output_directory({"out": bad})

    def test_path_is_an_existing_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(DirectoryCreateError, match="output directory .*a file is in the way"):
            resolve_output_directory({"out": str(blocker)})

    def test_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(DirectoryCreateError, match="output directory"):
            resolve_output_directory({"out": str(blocker / "child")})

    def test_name_too_long(self, tmp_path):
        with pytest.raises(DirectoryCreateError, match="output directory .*too long"):
            resolve_output_directory({"out": str(tmp_path / ("x" * 5000))})


class TestResolveRequest:
    def test_collects_then_interprets(self, tmp_path):
        out_dir = tmp_path / "out"
        request = resolve_request([f"--in={tmp_path}", f"--out={out_dir}"])
        assert request.input_dir == tmp_path
        assert out_dir.is_dir()

    def test_malformed_token_stops_everything(self, tmp_path):
        out_dir = tmp_path / "out"
        with pytest.raises(ArgumentFormatError):
            resolve_request([f"--out={out_dir}", "bogus"])
        assert not out_dir.exists()
