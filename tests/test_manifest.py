"""Tests for the manifest module and the command-line entry point."""

import json

from contractgen.__main__ import main
from contractgen.config import OUTPUT_PATH, SPEC_PATH, load_settings
from contractgen.contract_builder import build_contracts
from contractgen.manifest import build_manifest, contract_to_dict, write_manifest
from contractgen.models import ContractKind, ContractType, Field
from contractgen.registry import SchemaRegistry
from contractgen.schema_parser import resolve_registry

from conftest import SAMPLE_SPEC_PATH


class TestContractToDict:
    def test_omits_empty_attributes(self):
        assert contract_to_dict(ContractType(ContractKind.STRING)) == {"kind": "string"}

    def test_nested(self):
        contract = ContractType(
            ContractKind.OBJECT,
            name="Thing",
            fields=(Field("tags", ContractType(ContractKind.ARRAY, item=ContractType(ContractKind.STRING))),),
            bases=("Base",),
        )
        assert contract_to_dict(contract) == {
            "kind": "object",
            "name": "Thing",
            "bases": ["Base"],
            "fields": [{
                "name": "tags",
                "required": False,
                "type": {"kind": "array", "item": {"kind": "string"}},
            }],
        }


class TestBuildManifest:
    def test_sample_manifest(self, sample_spec):
        outcomes = build_contracts(sample_spec)
        schemas = resolve_registry(SchemaRegistry.from_spec(sample_spec))
        manifest = build_manifest(outcomes, schemas, version="1.2.0")

        assert manifest["version"] == "1.2.0"
        assert len(manifest["endpoints"]) == 4
        assert manifest["failures"] == []
        assert set(manifest["schemas"]) == {
            "BaseEntity", "LineItem", "NewUser", "Order", "User", "UserStatus",
        }
        assert manifest["schemas"]["User"]["type"]["bases"] == ["BaseEntity", "NewUser"]

        users = next(e for e in manifest["endpoints"] if e["path"] == "/users")
        post = users["operations"]["post"]
        assert post["methodName"] == "createUser"
        assert post["requestTypeName"] == "CreateUserRequest"
        assert post["queryParamsTypeName"] is None
        assert users["operations"]["get"]["queryParamsTypeName"] == "ReadUserQueryParams"
        assert manifest["referencedSchemaNames"] == sorted(set(manifest["referencedSchemaNames"]))

    def test_failures_listed(self):
        spec = {
            "paths": {"/a": {"get": {"responses": {}}, "read": {"responses": {}}}},
        }
        manifest = build_manifest(build_contracts(spec), {})
        assert manifest["endpoints"] == []
        assert manifest["failures"][0]["code"] == "NamingCollision"
        assert manifest["failures"][0]["path"] == "/a"

    def test_write_manifest(self, tmp_path):
        target = tmp_path / "out" / "contracts.json"
        write_manifest({"endpoints": [], "version": "x"}, target)
        assert json.loads(target.read_text()) == {"endpoints": [], "version": "x"}


class TestConfig:
    def test_defaults(self, monkeypatch):
        for var in ("CONTRACTGEN_SPEC", "CONTRACTGEN_OUTPUT", "CONTRACTGEN_LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        settings = load_settings()
        assert settings.spec_path == SPEC_PATH
        assert settings.output_path == OUTPUT_PATH
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CONTRACTGEN_SPEC", str(tmp_path / "api.yaml"))
        monkeypatch.setenv("CONTRACTGEN_LOG_LEVEL", "debug")
        settings = load_settings()
        assert settings.spec_path == tmp_path / "api.yaml"
        assert settings.log_level == "DEBUG"


class TestMain:
    def test_generates_manifest(self, tmp_path, capsys):
        out = tmp_path / "contracts.json"
        assert main([str(SAMPLE_SPEC_PATH), "-o", str(out)]) == 0
        manifest = json.loads(out.read_text())
        assert len(manifest["endpoints"]) == 4
        assert "4 endpoints" in capsys.readouterr().out

    def test_load_error_exit_code(self, tmp_path):
        assert main([str(tmp_path / "missing.yaml"), "-o", str(tmp_path / "x.json")]) == 2

    def test_strict_fails_on_collision(self, tmp_path):
        spec_file = tmp_path / "api.json"
        spec_file.write_text(json.dumps({
            "paths": {"/a": {"get": {"responses": {}}, "read": {"responses": {}}}},
        }))
        out = tmp_path / "contracts.json"
        assert main([str(spec_file), "-o", str(out)]) == 0
        assert main([str(spec_file), "-o", str(out), "--strict"]) == 1
