import pytest

from kubequota.cli.main import EXIT_INVALID, EXIT_OK, EXIT_USAGE, KubeQuotaCLI, main

from templates import INVERTED_YAML, VALID_YAML


@pytest.fixture
def cli():
    return KubeQuotaCLI()


def test_validate_single_valid_file(cli, tmp_path, schema_dir):
    target = tmp_path / "values.yaml"
    target.write_text(VALID_YAML, encoding="utf-8")
    code = cli.run(["validate", str(target), "--schema", "deployment", "--schema-dir", str(schema_dir)])
    assert code == EXIT_OK


def test_validate_directory_with_failures(cli, tmp_path, schema_dir, capsys):
    (tmp_path / "ok.yaml").write_text(VALID_YAML, encoding="utf-8")
    (tmp_path / "bad.yaml").write_text(INVERTED_YAML, encoding="utf-8")

    code = cli.run(["validate", str(tmp_path), "--schema", "deployment", "--schema-dir", str(schema_dir)])

    assert code == EXIT_INVALID
    out = capsys.readouterr().out
    assert "INVALID" in out
    assert "bad.yaml" in out


def test_validate_missing_path(cli, tmp_path):
    code = cli.run(["validate", str(tmp_path / "nowhere"), "--schema", "deployment"])
    assert code == EXIT_USAGE


def test_unknown_schema_passes(cli, tmp_path, schema_dir):
    target = tmp_path / "values.yaml"
    target.write_text("resources: nonsense\n", encoding="utf-8")
    code = cli.run(["validate", str(target), "--schema", "other", "--schema-dir", str(schema_dir)])
    assert code == EXIT_OK


def test_quantity_command(cli, capsys):
    assert cli.run(["quantity", "1Gi", "--family", "memory"]) == EXIT_OK
    assert "1.07374e+09" in capsys.readouterr().out

    assert cli.run(["quantity", "1Gx", "--family", "memory"]) == EXIT_INVALID


def test_schemas_command(cli, schema_dir, capsys):
    assert cli.run(["schemas", "--schema-dir", str(schema_dir)]) == EXIT_OK
    assert "deployment" in capsys.readouterr().out


def test_no_arguments_prints_help(cli):
    assert cli.run([]) == EXIT_OK


def test_main_exits_with_code(tmp_path, schema_dir):
    target = tmp_path / "values.yaml"
    target.write_text(INVERTED_YAML, encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["validate", str(target), "--schema", "deployment", "--schema-dir", str(schema_dir)])
    assert exc.value.code == EXIT_INVALID
