import pytest

from settle.domain import Request
from settle.errors import AbsentValueError
from settle.path import Element, Path
from settle.provider import FunctionProvider
from settle.providers import EnvironmentQualifiersProvider, EnvironmentVariableProvider, MappingProvider
from settle.qualifiers import Qualifiers

PROD = Qualifiers.of(stage="prod")
DEV = Qualifiers.of(stage="dev")

DOCUMENT = {"db": {"host": "db.internal", "port": 5432}, "env": "production"}


def request_for(*names, type=object, qualifiers=PROD):
    return Request(qualifiers, Path.absolute(*names, type=type))


class TestMappingProvider:
    def test_nested_lookup(self):
        provider = MappingProvider(DOCUMENT, PROD)
        request = request_for("db", "port", type=int)

        assert provider.is_selectable(request)
        value = provider.get(request)
        assert value.get() == 5432
        assert value.qualifiers == PROD
        assert value.path == Path.named("db", "port", type=int)

    def test_missing_key(self):
        provider = MappingProvider(DOCUMENT)
        request = request_for("db", "user", type=str)
        assert not provider.is_selectable(request)
        assert provider.get(request) is None

    def test_payload_of_the_wrong_type_is_not_offered(self):
        assert MappingProvider(DOCUMENT).get(request_for("db", "port", type=str)) is None

    def test_sections_are_served_as_mappings(self):
        value = MappingProvider(DOCUMENT).get(request_for("db", type=dict))
        assert value.get() == {"host": "db.internal", "port": 5432}

    def test_cannot_descend_into_a_scalar(self):
        assert MappingProvider(DOCUMENT).get(request_for("env", "name", type=str)) is None

    def test_conflicting_qualifiers_are_not_selectable(self):
        provider = MappingProvider(DOCUMENT, DEV)
        assert not provider.is_selectable(request_for("env", type=str, qualifiers=PROD))
        assert provider.is_selectable(request_for("env", type=str, qualifiers=Qualifiers.empty()))

    def test_root_is_never_served(self):
        provider = MappingProvider(DOCUMENT)
        assert not provider.is_selectable(Request(Qualifiers.empty(), Path.root()))


class TestEnvironmentVariableProvider:
    def test_reads_the_variable_named_by_the_last_element(self):
        provider = EnvironmentVariableProvider("app_", environ={"APP_HOST": "localhost"})
        request = request_for("db", "host", type=str)

        assert provider.is_selectable(request)
        value = provider.get(request)
        assert value.get() == "localhost"
        assert value.path == Path.named("host", type=str)
        assert value.qualifiers.is_empty()

    def test_case_is_kept_when_not_uppercasing(self):
        provider = EnvironmentVariableProvider(uppercase=False, environ={"host": "localhost"})
        assert provider.variable_name(Element("host", str)) == "host"
        assert provider.get(request_for("host", type=str)).get() == "localhost"

    def test_unset_variable(self):
        provider = EnvironmentVariableProvider(environ={})
        request = request_for("host", type=str)
        assert not provider.is_selectable(request)
        assert provider.get(request) is None

    def test_parameterised_elements_are_not_served(self):
        provider = EnvironmentVariableProvider(environ={"GET": "x"})
        request = Request(PROD, Path.root().plus(Element("get", str, (str,), ("HOME",))))
        assert not provider.is_selectable(request)

    def test_variable_removed_after_resolution_is_absent(self):
        environ = {"HOST": "localhost"}
        value = EnvironmentVariableProvider(environ=environ).get(request_for("host", type=str))
        del environ["HOST"]
        with pytest.raises(AbsentValueError, match="HOST is no longer set"):
            value.get()

    def test_upper_bound_is_str(self):
        assert EnvironmentVariableProvider(environ={}).upper_bound is str


class TestEnvironmentQualifiersProvider:
    def test_collects_prefixed_variables(self):
        provider = EnvironmentQualifiersProvider(
            environ={"SETTLE_QUALIFIER_STAGE": "prod", "SETTLE_QUALIFIER_REGION": "eu", "HOME": "/root"}
        )
        request = Request(Qualifiers.empty(), Path.root().plus(Element("", Qualifiers)))

        assert provider.is_selectable(request)
        assert provider.get(request).get() == Qualifiers.of(stage="prod", region="eu")

    def test_nothing_to_offer_without_variables(self):
        provider = EnvironmentQualifiersProvider(environ={"SETTLE_QUALIFIER_": "ignored"})
        assert provider.get(Request(Qualifiers.empty(), Path.root().plus(Element("", Qualifiers)))) is None

    def test_only_serves_qualifiers(self):
        provider = EnvironmentQualifiersProvider(environ={"SETTLE_QUALIFIER_STAGE": "prod"})
        assert not provider.is_selectable(request_for("stage", type=str))


class TestFunctionProvider:
    def test_payload_is_wrapped_for_the_requested_element(self):
        provider = FunctionProvider(lambda: "production", str, PROD)
        value = provider.get(request_for("env", type=str))
        assert value.get() == "production"
        assert value.qualifiers == PROD
        assert value.path == Path.named("env", type=str)

    def test_request_is_passed_when_accepted(self):
        provider = FunctionProvider(lambda request: request.path.last().name)
        assert provider.get(request_for("region", type=str)).get() == "region"

    def test_values_and_none_pass_through(self):
        assert FunctionProvider(lambda: None).get(request_for("env", type=str)) is None

    def test_path_filter(self):
        provider = FunctionProvider(lambda: 5432, int, path=Path.named("db", "port", type=int))
        assert provider.is_selectable(request_for("db", "port", type=int))
        assert not provider.is_selectable(request_for("cache", "port", type=int))

    def test_qualifier_filter(self):
        provider = FunctionProvider(lambda: "x", str, DEV)
        assert not provider.is_selectable(request_for("env", type=str, qualifiers=PROD))
        assert provider.is_selectable(request_for("env", type=str, qualifiers=DEV))
