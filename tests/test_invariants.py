import pytest

from kubequota.core.models import FailureKind
from kubequota.rules.invariants import ResourceInvariantChecker


@pytest.fixture
def checker():
    return ResourceInvariantChecker()


def test_disabled_autoscaling_skips_everything(checker):
    outcome = checker.check({"resources": "not even a map"}, autoscaling_enabled=False)
    assert outcome.valid
    assert outcome.errors == []

    outcome = checker.check({}, autoscaling_enabled=False)
    assert outcome


def test_consistent_template_passes(checker, template):
    outcome = checker.check(template, autoscaling_enabled=True)
    assert outcome.valid, outcome.message


def test_equal_limit_and_request_is_inclusive(checker, template):
    template["resources"]["limits"]["cpu"] = "500m"
    template["resources"]["requests"]["cpu"] = "500m"
    assert checker.check(template, True).valid


def test_equal_values_across_notations(checker, template):
    template["resources"]["limits"]["cpu"] = "1"
    template["resources"]["requests"]["cpu"] = "1000m"
    template["resources"]["limits"]["memory"] = "1Gi"
    template["resources"]["requests"]["memory"] = "1024Mi"
    assert checker.check(template, True).valid


def test_memory_request_above_limit_fails(checker, template):
    template["resources"]["limits"]["memory"] = "1Gi"
    template["resources"]["requests"]["memory"] = "2Gi"

    outcome = checker.check(template, True)

    assert not outcome.valid
    assert outcome.kind is FailureKind.INVARIANT_VIOLATION
    assert outcome.message.startswith("requests is greater than limits")
    assert "resources memory (limit 1Gi < request 2Gi)" in outcome.message


def test_sidecar_violation_is_named(checker, template):
    template["envoyproxy"]["resources"]["requests"]["cpu"] = "100m"

    outcome = checker.check(template, True)

    assert outcome.kind is FailureKind.INVARIANT_VIOLATION
    assert "envoyproxy cpu (limit 50m < request 100m)" in outcome.message


def test_all_violations_are_reported_together(checker, template):
    template["resources"]["requests"]["cpu"] = "2"
    template["envoyproxy"]["resources"]["requests"]["memory"] = "1Gi"

    outcome = checker.check(template, True)

    assert len(outcome.errors) == 1
    assert "resources cpu" in outcome.message
    assert "envoyproxy memory" in outcome.message


@pytest.mark.parametrize("path, expected", [
    (("resources", "limits", "cpu"), "CPU limit is required"),
    (("resources", "limits", "memory"), "Memory limit is required"),
    (("resources", "requests", "cpu"), "CPU requests is required"),
    (("resources", "requests", "memory"), "Memory requests is required"),
    (("envoyproxy", "resources", "limits", "cpu"), "Envoyproxy CPU limit is required"),
    (("envoyproxy", "resources", "limits", "memory"), "Envoyproxy Memory limit is required"),
    (("envoyproxy", "resources", "requests", "cpu"), "Envoyproxy CPU requests is required"),
    (("envoyproxy", "resources", "requests", "memory"), "Envoyproxy Memory requests is required"),
])
def test_each_missing_field_is_named(checker, template, path, expected):
    node = template
    for key in path[:-1]:
        node = node[key]
    del node[path[-1]]

    outcome = checker.check(template, True)

    assert not outcome.valid
    assert outcome.kind is FailureKind.MISSING_FIELD
    assert outcome.errors == [expected]


def test_first_missing_field_short_circuits(checker, template):
    del template["resources"]["requests"]["memory"]
    del template["envoyproxy"]["resources"]["limits"]["cpu"]
    # Also broken, but never reached
    template["resources"]["limits"]["cpu"] = "nonsense"

    outcome = checker.check(template, True)
    assert outcome.errors == ["Memory requests is required"]


def test_missing_sidecar_block_reports_first_sidecar_field(checker, template):
    del template["envoyproxy"]
    outcome = checker.check(template, True)
    assert outcome.errors == ["Envoyproxy CPU limit is required"]


def test_malformed_quantity_is_not_treated_as_zero(checker, template):
    # A malformed request would have parsed as 0 and passed vacuously
    template["resources"]["limits"]["memory"] = "lots"

    outcome = checker.check(template, True)

    assert not outcome.valid
    assert outcome.kind is FailureKind.MALFORMED_QUANTITY
    assert outcome.message.startswith("resources.limits.memory: invalid memory quantity 'lots'")


def test_sidecar_malformed_quantity_names_the_path(checker, template):
    template["envoyproxy"]["resources"]["requests"]["cpu"] = "5 cores"
    outcome = checker.check(template, True)
    assert outcome.kind is FailureKind.MALFORMED_QUANTITY
    assert outcome.message.startswith("envoyproxy.resources.requests.cpu:")


def test_wrong_shape_fails_fast(checker, template):
    template["resources"]["limits"] = ["1", "1Gi"]
    outcome = checker.check(template, True)
    assert outcome.kind is FailureKind.DOCUMENT_SHAPE
    assert outcome.errors == ["'resources.limits' must be a map/object."]


def test_numeric_quantities_are_accepted(checker, template):
    template["resources"]["limits"]["cpu"] = 2
    template["resources"]["requests"]["cpu"] = 1
    assert checker.check(template, True).valid


def test_check_document_reads_flag(checker, template):
    template["resources"]["requests"]["memory"] = "1Gi"
    assert not checker.check_document(template).valid

    template["autoscaling"]["enabled"] = False
    assert checker.check_document(template).valid

    del template["autoscaling"]
    assert checker.check_document(template).valid


def test_document_is_not_mutated(checker, template):
    import copy
    before = copy.deepcopy(template)
    checker.check(template, True)
    assert template == before


def test_one_byte_below_request_is_a_violation(checker, template):
    template["resources"]["limits"]["memory"] = "1073741823"
    template["resources"]["requests"]["memory"] = "1Gi"

    outcome = checker.check(template, True)

    assert outcome.kind is FailureKind.INVARIANT_VIOLATION
    assert "resources memory (limit 1073741823 < request 1Gi)" in outcome.message


def test_one_byte_below_request_in_sidecar(checker, template):
    template["envoyproxy"]["resources"]["limits"]["memory"] = "52428799"
    template["envoyproxy"]["resources"]["requests"]["memory"] = "50Mi"
    assert not checker.check(template, True).valid
