"""
Identifier quoting and name derivation.
"""

import pytest

from core.logic.naming import (
    default_namespace,
    default_role_name,
    derive_lambda_arn,
    derive_trigger_name,
    lambda_name_from_arn,
    normalize_logical_name,
    partition_from_region,
    quote_identifier,
    slugify,
    split_qualified_name,
)
from exceptions import ConfigurationError


def _unquote(quoted: str) -> str:
    """Parse a quoted identifier the way PostgreSQL does."""
    assert quoted.startswith('"') and quoted.endswith('"')
    return quoted[1:-1].replace('""', '"')


class TestQuoteIdentifier:
    def test_plain_identifier(self):
        assert quote_identifier("events") == '"events"'

    def test_embedded_quotes_are_doubled(self):
        assert quote_identifier('my "table"') == '"my ""table"""'

    @pytest.mark.parametrize("raw", ['a"b', '""', 'x"; DROP TABLE t; --', 'Mixed Case "q"'])
    def test_round_trips_through_parser(self, raw):
        assert _unquote(quote_identifier(raw)) == raw


class TestSplitQualifiedName:
    def test_bare_name_defaults_to_public(self):
        assert split_qualified_name("events") == ("public", "events")

    def test_qualified_name(self):
        qualified = split_qualified_name("a.b")
        assert qualified.schema == "a"
        assert qualified.name == "b"

    def test_splits_on_first_dot_only(self):
        assert split_qualified_name("audit.events.v2") == ("audit", "events.v2")

    @pytest.mark.parametrize("bad", ["a.", ".b", "."])
    def test_empty_side_rejected(self, bad):
        with pytest.raises(ConfigurationError, match="Invalid table qualified name"):
            split_qualified_name(bad)


class TestDeriveTriggerName:
    def test_joins_namespace_and_key(self):
        assert derive_trigger_name("acct_svc_dev", "onEvent") == "acct_svc_dev_onEvent"

    def test_is_deterministic(self):
        assert derive_trigger_name("ns", "fn") == derive_trigger_name("ns", "fn")

    def test_distinct_keys_give_distinct_names(self):
        keys = ["a", "b", "onEvent", "on_event", "onEvent2"]
        names = {derive_trigger_name("ns", key) for key in keys}
        assert len(names) == len(keys)


class TestSlugAndDefaults:
    def test_slugify(self):
        assert slugify("sls_My-Service_dev") == "sls_my_service_dev"

    def test_slugify_collapses_and_strips(self):
        assert slugify("--Acct..Svc__dev--") == "acct_svc_dev"

    def test_default_namespace(self):
        assert default_namespace("Acct-Svc", "dev") == "sls_acct_svc_dev"

    def test_default_role_name(self):
        assert default_role_name("acct_svc_dev") == "acct_svc_dev_lambda_invoker"


class TestArns:
    def test_lambda_name_from_arn(self):
        arn = "arn:aws:lambda:us-east-1:123456789012:function:svc-dev-onEvent"
        assert lambda_name_from_arn(arn) == "svc-dev-onEvent"

    def test_lambda_name_falls_back_to_last_segment(self):
        assert lambda_name_from_arn("arn:aws:lambda:us-east-1:123:thing") == "thing"

    def test_lambda_name_falls_back_to_lambda(self):
        assert lambda_name_from_arn("") == "lambda"

    @pytest.mark.parametrize("region,partition", [
        ("us-east-1", "aws"),
        ("eu-west-2", "aws"),
        ("cn-north-1", "aws-cn"),
        ("us-gov-west-1", "aws-us-gov"),
    ])
    def test_partition_from_region(self, region, partition):
        assert partition_from_region(region) == partition

    def test_derive_lambda_arn(self):
        assert derive_lambda_arn("aws-cn", "cn-north-1", "111", "fn") == \
            "arn:aws-cn:lambda:cn-north-1:111:function:fn"


class TestNormalizeLogicalName:
    def test_uppercases_first_letter(self):
        assert normalize_logical_name("onEvent") == "OnEvent"

    def test_replaces_dash_and_underscore(self):
        assert normalize_logical_name("my-func_name") == "MyDashfuncUnderscorename"
