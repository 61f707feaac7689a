import json

import pytest

from apptopology import cli

FRONTEND_VARS = """
app_name     = "Shop.Front"
project_type = "frontend"
backend_urls = "https://a,https://b"
"""


@pytest.fixture
def vars_file(tmp_path):
    path = tmp_path / "frontend.tfvars"
    path.write_text(FRONTEND_VARS, encoding="utf-8")
    return path


def test_plan_command(vars_file, capsys):
    cli.main(["plan", "--vars-file", str(vars_file)])
    data = json.loads(capsys.readouterr().out)
    assert data["prefix"] == "shop-front"
    assert [r["id"] for r in data["resources"]] == [
        "resource_group",
        "static_webapp",
        "gateway_plan",
        "gateway_webapp",
    ]
    assert data["outputs"]["static_webapp_api_key"]["value"] == "(sensitive)"


def test_outputs_command(vars_file, capsys):
    cli.main(["outputs", "--vars-file", str(vars_file), "--show-sensitive"])
    outputs = json.loads(capsys.readouterr().out)
    assert outputs["gateway_webapp_name"]["value"] == "shop-front-gateway"
    assert outputs["static_webapp_api_key"]["value"] == "${static_webapp.api_key}"


def test_order_command(vars_file, capsys):
    cli.main(["order", "--vars-file", str(vars_file)])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "azurerm_resource_group resource_group"
    assert lines.index("azurerm_static_web_app static_webapp") < lines.index(
        "azurerm_linux_web_app gateway_webapp"
    )


def test_bad_input_exits_with_error(tmp_path, capsys):
    path = tmp_path / "bad.tfvars"
    path.write_text('project_type = "backend"\n', encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        cli.main(["plan", "--vars-file", str(path)])
    assert exc.value.code == 1
    assert "app_name" in capsys.readouterr().err


def test_deploy_requires_project_dir(tmp_path, vars_file, capsys):
    with pytest.raises(SystemExit):
        cli.main(
            [
                "infra-deploy",
                "--project-dir",
                str(tmp_path / "missing"),
                "--vars-file",
                str(vars_file),
            ]
        )
    assert "Project directory not found" in capsys.readouterr().err


def test_deploy_runs_cdktf_steps(tmp_path, vars_file, monkeypatch):
    calls = []

    def fake_cdktf(project_dir, args, env=None):
        calls.append((args, env["TFVARS_FILE"]))
        return ""

    monkeypatch.setattr(cli, "cdktf", fake_cdktf)
    cli.main(
        ["infra-deploy", "--project-dir", str(tmp_path), "--vars-file", str(vars_file)]
    )
    assert [c[0] for c in calls] == [["get"], ["synth"], ["deploy", "--auto-approve"]]
    assert calls[0][1] == str(vars_file.resolve())


def test_deploy_reads_vars_from_project_dir(tmp_path, monkeypatch):
    project = tmp_path / "project"
    (project / "vars").mkdir(parents=True)
    (project / "vars" / "dev.tfvars").write_text(FRONTEND_VARS, encoding="utf-8")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    monkeypatch.delenv("TFVARS_FILE", raising=False)

    calls = []
    monkeypatch.setattr(cli, "cdktf", lambda project_dir, args, env=None: calls.append(args))
    cli.main(["infra-deploy", "--project-dir", str(project)])
    assert calls[-1] == ["deploy", "--auto-approve"]


def test_relative_vars_file_resolves_against_cwd(tmp_path, vars_file, monkeypatch):
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(vars_file.parent)

    envs = []
    monkeypatch.setattr(
        cli, "cdktf", lambda project_dir, args, env=None: envs.append(env["TFVARS_FILE"])
    )
    cli.main(["infra-deploy", "--project-dir", str(project), "--vars-file", vars_file.name])
    assert envs == [str(vars_file.resolve())] * 3
