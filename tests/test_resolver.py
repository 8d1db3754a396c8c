import pytest

from settle.disambiguation import AmbiguityPolicy, Disambiguator
from settle.domain import Request
from settle.errors import PathError
from settle.listeners import ResolutionListener
from settle.path import Element, Path
from settle.provider import Provider
from settle.qualifiers import Qualifiers
from settle.resolver import UNUSABLE_PATH_SCORE, Resolver, path_score
from settle.value import Value

PROD = Qualifiers.of(stage="prod")
DEV = Qualifiers.of(stage="dev")
NONE = Qualifiers.empty()
ENV = Path.named("env", type=str)


class StubProvider(Provider):
    def __init__(self, value=None, upper_bound=object, selectable=True, error=None):
        super().__init__(upper_bound)
        self.value = value
        self.selectable = selectable
        self.error = error
        self.selectable_calls = 0
        self.get_calls = 0

    def is_selectable(self, request):
        self.selectable_calls += 1
        return self.selectable

    def get(self, request):
        self.get_calls += 1
        if self.error is not None:
            raise self.error
        return self.value


class RecordingListener(ResolutionListener):
    def __init__(self):
        self.rejected_providers = []
        self.rejected_values = []
        self.ambiguous_values = []

    def provider_rejected(self, request, provider):
        self.rejected_providers.append(provider)

    def value_rejected(self, request, provider, value):
        self.rejected_values.append(value)

    def value_ambiguous(self, request, provider, value):
        self.ambiguous_values.append(value)


class PickFirst(Disambiguator):
    def disambiguate(self, request, first_provider, first_value, second_provider, second_value):
        return first_value


class PickSecond(Disambiguator):
    def disambiguate(self, request, first_provider, first_value, second_provider, second_value):
        return second_value


class OfferInstead(Disambiguator):
    def __init__(self, replacement):
        self.replacement = replacement
        self.calls = 0

    def disambiguate(self, request, first_provider, first_value, second_provider, second_value):
        self.calls += 1
        return self.replacement


@pytest.fixture
def listener():
    return RecordingListener()


def env_request(qualifiers=PROD):
    return Request(qualifiers, Path.absolute("env", type=str))


def test_no_providers_resolve_nothing():
    assert Resolver().resolve([], env_request()) is None


def test_single_selectable_provider(listener):
    value = Value.of(NONE, ENV, "development")
    assert Resolver(listener=listener).resolve([StubProvider(value)], env_request()) is value
    assert listener.rejected_providers == []


def test_single_unselectable_provider_is_rejected(listener):
    provider = StubProvider(Value.of(NONE, ENV, "x"), selectable=False)
    assert Resolver(listener=listener).resolve([provider], env_request()) is None
    assert listener.rejected_providers == [provider]
    assert provider.get_calls == 0


def test_provider_offering_nothing_is_rejected(listener):
    provider = StubProvider(None)
    assert Resolver(listener=listener).resolve([provider], env_request()) is None
    assert listener.rejected_providers == [provider]


def test_value_for_another_path_is_rejected(listener):
    value = Value.of(NONE, Path.named("region", type=str), "eu")
    assert Resolver(listener=listener).resolve([StubProvider(value)], env_request()) is None
    assert listener.rejected_values == [value]


def test_upper_bound_filters_before_asking_the_provider(listener):
    provider = StubProvider(Value.of(NONE, ENV, "x"), upper_bound=int)
    assert Resolver(listener=listener).resolve([provider], env_request()) is None
    assert provider.selectable_calls == 0
    assert provider.get_calls == 0
    assert listener.rejected_providers == [provider]


def test_conflicting_qualifiers_are_rejected(listener):
    value = Value.of(DEV, ENV, "development")
    assert Resolver(listener=listener).resolve([StubProvider(value)], env_request(PROD)) is None
    assert listener.rejected_values == [value]


@pytest.mark.parametrize("reverse", [False, True])
def test_matching_qualifiers_beat_unqualified_value(reverse):
    general = StubProvider(Value.of(NONE, ENV, "development"))
    specific = StubProvider(Value.of(PROD, ENV, "production"))
    providers = [general, specific]
    if reverse:
        providers.reverse()

    value = Resolver().resolve(providers, env_request())
    assert value.get() == "production"


@pytest.mark.parametrize("reverse", [False, True])
def test_more_specific_path_wins(reverse):
    short = StubProvider(Value.of(NONE, ENV, "short"))
    long = StubProvider(Value.of(NONE, Path.named("app", "env", type=str), "long"))
    providers = [short, long]
    if reverse:
        providers.reverse()

    request = Request(NONE, Path.absolute("app", "env", type=str))
    assert Resolver().resolve(providers, request).get() == "long"


def test_exact_type_beats_subtype():
    port = Path.named("port", type=int)
    exact = StubProvider(Value.of(NONE, port, 8080))
    covariant = StubProvider(Value.of(NONE, Path.named("port", type=bool), True))

    request = Request(NONE, Path.absolute("port", type=int))
    assert Resolver().resolve([covariant, exact], request).get() == 8080
    assert Resolver().resolve([exact, covariant], request).get() == 8080


def test_unbroken_tie_resolves_nothing(listener):
    first = Value.of(NONE, ENV, "one")
    second = Value.of(NONE, ENV, "two")
    resolver = Resolver(listener=listener)

    assert resolver.resolve([StubProvider(first), StubProvider(second)], env_request()) is None
    assert listener.ambiguous_values == [first, second]


def test_keep_previous_policy_keeps_the_earlier_value(listener):
    first = Value.of(NONE, ENV, "one")
    second = Value.of(NONE, ENV, "two")
    resolver = Resolver(listener=listener, ambiguity_policy=AmbiguityPolicy.KEEP_PREVIOUS)

    assert resolver.resolve([StubProvider(first), StubProvider(second)], env_request()) is first
    assert listener.ambiguous_values == [first, second]


def test_later_value_is_adopted_after_a_discarded_tie():
    tied = [StubProvider(Value.of(NONE, ENV, "one")), StubProvider(Value.of(NONE, ENV, "two"))]
    late = Value.of(NONE, ENV, "three")

    assert Resolver().resolve(tied + [StubProvider(late)], env_request()) is late


def test_disambiguator_can_pick_the_first_value(listener):
    first = Value.of(NONE, ENV, "one")
    second = Value.of(NONE, ENV, "two")
    resolver = Resolver(PickFirst(), listener)

    value = resolver.resolve([StubProvider(first), StubProvider(second)], env_request())
    assert value.get() == "one"
    assert value.fallback is second
    assert listener.rejected_values == [second]


def test_disambiguator_can_pick_the_second_value(listener):
    first = Value.of(NONE, ENV, "one")
    second = Value.of(NONE, ENV, "two")
    resolver = Resolver(PickSecond(), listener)

    value = resolver.resolve([StubProvider(first), StubProvider(second)], env_request())
    assert value.get() == "two"
    assert value.fallback is first
    assert listener.rejected_values == [first]


def test_value_offered_by_disambiguator_replaces_both():
    first = Value.of(NONE, ENV, "one")
    second = Value.of(NONE, ENV, "two")
    third = Value.of(NONE, ENV, "three")
    disambiguator = OfferInstead(third)

    value = Resolver(disambiguator).resolve([StubProvider(first), StubProvider(second)], env_request())

    assert value is third
    assert disambiguator.calls == 1


def test_offered_value_that_cannot_answer_leaves_nothing(listener):
    first = Value.of(NONE, ENV, "one")
    second = Value.of(NONE, ENV, "two")
    unusable = Value.of(DEV, ENV, "dev")
    resolver = Resolver(OfferInstead(unusable), listener)

    assert resolver.resolve([StubProvider(first), StubProvider(second)], env_request(PROD)) is None
    assert listener.rejected_values == [first, second, unusable]


def test_later_value_is_adopted_after_an_unusable_offer():
    tied = [StubProvider(Value.of(NONE, ENV, "one")), StubProvider(Value.of(NONE, ENV, "two"))]
    late = Value.of(NONE, ENV, "three")
    resolver = Resolver(OfferInstead(Value.of(DEV, ENV, "dev")))

    assert resolver.resolve(tied + [StubProvider(late)], env_request(PROD)) is late


def test_lower_scoring_value_is_rejected(listener):
    specific = Value.of(PROD, ENV, "production")
    general = Value.of(NONE, ENV, "development")
    resolver = Resolver(listener=listener)

    value = resolver.resolve([StubProvider(specific), StubProvider(general)], env_request())
    assert value.get() == "production"
    assert listener.rejected_values == [general]


@pytest.mark.parametrize("reverse", [False, True])
def test_absent_winner_falls_back_to_the_loser(reverse):
    providers = [
        StubProvider(Value.absent(PROD, ENV)),
        StubProvider(Value.of(NONE, ENV, "general")),
    ]
    if reverse:
        providers.reverse()

    assert Resolver().resolve(providers, env_request()).get() == "general"


def test_fallbacks_follow_the_order_of_defeat():
    values = [
        Value.absent(PROD, Path.named("app", "env", type=str)),
        Value.absent(PROD, ENV),
        Value.of(NONE, ENV, "general"),
    ]
    request = Request(PROD, Path.absolute("app", "env", type=str))

    value = Resolver().resolve([StubProvider(v) for v in reversed(values)], request)
    assert value.get() == "general"
    assert value.fallback.fallback is values[2]


def test_provider_errors_propagate():
    providers = [StubProvider(Value.of(NONE, ENV, "x")), StubProvider(error=RuntimeError("source down"))]
    with pytest.raises(RuntimeError, match="source down"):
        Resolver().resolve(providers, env_request())


def test_value_errors_surface_only_on_get():
    def broken():
        raise RuntimeError("broken payload")

    value = Resolver().resolve([StubProvider(Value(NONE, ENV, broken))], env_request())
    with pytest.raises(RuntimeError, match="broken payload"):
        value.get()


def test_resolution_does_not_evaluate_values():
    calls = []
    value = Value(PROD, ENV, lambda: calls.append(1))
    Resolver().resolve([StubProvider(value), StubProvider(Value.of(NONE, ENV, "x"))], env_request())
    assert calls == []


def test_path_score_counts_matches_and_exact_types():
    reference = Path.absolute("app", "env", type=str)
    assert path_score(reference, Path.named("env", type=str)) == 2
    assert path_score(Path.absolute("port", type=int), Path.named("port", type=bool)) == 1
    assert path_score(reference, Path.named("app", "env", type=str)) == 3


def test_path_score_arguments():
    get = Element("get", str, (str,), ("HOME",))
    reference = Path.root().plus(get)

    assert path_score(reference, Path.of(get)) == 3
    assert path_score(reference, Path.of(Element("get", str, (str,)))) == 2
    assert path_score(reference, Path.of(Element("get", str, (str,), ("PATH",)))) == UNUSABLE_PATH_SCORE


def test_path_score_requires_an_absolute_reference():
    with pytest.raises(PathError, match="is not absolute"):
        path_score(Path.named("env", type=str), ENV)


def test_path_score_requires_a_suffix_match():
    with pytest.raises(PathError, match="does not end with"):
        path_score(Path.absolute("env", type=str), Path.named("region", type=str))


def test_requests_require_absolute_paths():
    with pytest.raises(PathError, match="absolute paths"):
        Request(PROD, ENV)


@pytest.mark.parametrize("reverse", [False, True])
def test_production_value_wins_for_prod_requestor(reverse):
    production = StubProvider(Value.of(PROD, ENV, "production"))
    unknown = StubProvider(Value.of(NONE, ENV, "unknown"))
    providers = [production, unknown]
    if reverse:
        providers.reverse()

    request = Request(PROD, Path.absolute("app", "env", type=str))
    assert Resolver().resolve(providers, request).get() == "production"
