import json

from apptopology.iac_types import InputParameters
from apptopology.resolver import resolve
from apptopology.stacks.azure_stack import REDACTED, synth_outputs_json, synth_plan_json


def backend_plan():
    return resolve(
        InputParameters(
            app_name="svc",
            project_type="backend",
            runtime_stack="python",
            database_type="sqlserver",
            sql_admin_password="hunter2",
        )
    )


def test_plan_json_redacts_secrets():
    data = synth_plan_json(backend_plan())
    text = json.dumps(data)
    assert "hunter2" not in text

    server = next(r for r in data["resources"] if r["id"] == "db_server")
    assert server["attributes"]["administrator_login_password"] == REDACTED
    webapp = next(r for r in data["resources"] if r["id"] == "webapp")
    assert webapp["attributes"]["connection_string"][0]["value"] == REDACTED
    assert webapp["attributes"]["service_plan_id"] == "${service_plan.id}"
    assert webapp["depends_on"] == ["resource_group", "service_plan", "db_server", "db"]


def test_plan_json_can_show_secrets():
    data = synth_plan_json(backend_plan(), redact=False)
    webapp = next(r for r in data["resources"] if r["id"] == "webapp")
    assert webapp["attributes"]["connection_string"][0]["value"] == (
        "Server=tcp:${db_server.fully_qualified_domain_name},1433;"
        "Initial Catalog=svc-db;User ID=sqladmin;Password=hunter2;"
        "Encrypt=true;TrustServerCertificate=false;"
    )


def test_outputs_json_keeps_empty_sensitive_values_visible():
    outputs = synth_outputs_json(resolve(InputParameters(app_name="svc", project_type="backend")))
    assert outputs["db_name"] == {"value": "", "sensitive": True}
    assert outputs["webapp_url"]["value"] == "https://${webapp.default_hostname}"

    outputs = synth_outputs_json(backend_plan())
    assert outputs["db_name"]["value"] == REDACTED
    assert synth_outputs_json(backend_plan(), redact=False)["db_name"]["value"] == "svc-db"
