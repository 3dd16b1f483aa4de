"""
Unit tests for request options and header composition.
"""

import pytest
from pydantic import ValidationError

from documentdb.constants import HttpHeaders, OperationType
from documentdb.options import (
    AccessCondition,
    AccessConditionType,
    ConsistencyLevel,
    FeedOptions,
    IndexingDirective,
    RequestOptions,
    compose_feed_headers,
    compose_headers,
)


class TestRequestOptions:
    """Tests for the RequestOptions model."""

    def test_accepts_wire_aliases(self):
        """Test construction from camelCase option names."""
        options = RequestOptions(
            preTriggerInclude="validate",
            consistencyLevel="Session",
            disableAutomaticIdGeneration=True,
        )
        assert options.pre_trigger_include == "validate"
        assert options.consistency_level == ConsistencyLevel.SESSION
        assert options.disable_automatic_id_generation is True

    def test_rejects_unknown_consistency(self):
        """Test that an unknown consistency level is rejected."""
        with pytest.raises(ValidationError):
            RequestOptions(consistency_level="Linearizable")

    def test_rejects_non_positive_expiry(self):
        """Test that token expiry must be positive."""
        with pytest.raises(ValidationError):
            RequestOptions(resource_token_expiry_seconds=0)

    def test_if_match_helper(self):
        """Test the If-Match convenience constructor."""
        options = RequestOptions.if_match('"etag-1"')
        assert options.access_condition.type == AccessConditionType.IF_MATCH
        assert options.access_condition.condition == '"etag-1"'

    def test_feed_options_page_size(self):
        """Test page size validation."""
        assert FeedOptions(max_item_count=-1).max_item_count == -1
        assert FeedOptions(maxItemCount=10).max_item_count == 10
        with pytest.raises(ValidationError):
            FeedOptions(max_item_count=0)


class TestComposeHeaders:
    """Tests for compose_headers."""

    def test_no_options_no_default(self):
        """Test that nothing is emitted without options or defaults."""
        assert compose_headers(None, None, OperationType.READ) == {}

    def test_default_consistency_applies(self):
        """Test that the client default fills in when the call sets none."""
        headers = compose_headers(ConsistencyLevel.EVENTUAL, None, OperationType.READ)
        assert headers[HttpHeaders.CONSISTENCY_LEVEL] == "Eventual"

    def test_per_call_consistency_overrides_default(self):
        """Test that per-call consistency wins over the client default."""
        options = RequestOptions(consistency_level=ConsistencyLevel.STRONG)
        headers = compose_headers(ConsistencyLevel.EVENTUAL, options, OperationType.READ)
        assert headers[HttpHeaders.CONSISTENCY_LEVEL] == "Strong"

    def test_tracked_session_token_on_session_reads(self):
        """Test that session reads replay the tracked token."""
        headers = compose_headers(ConsistencyLevel.SESSION, None, OperationType.READ, "0:42")
        assert headers[HttpHeaders.SESSION_TOKEN] == "0:42"

    def test_tracked_session_token_not_sent_on_writes(self):
        """Test that writes never replay the tracked token."""
        headers = compose_headers(ConsistencyLevel.SESSION, None, OperationType.REPLACE, "0:42")
        assert HttpHeaders.SESSION_TOKEN not in headers

    def test_tracked_session_token_ignored_under_other_levels(self):
        """Test that non-session reads do not carry the tracked token."""
        headers = compose_headers(ConsistencyLevel.EVENTUAL, None, OperationType.READ, "0:42")
        assert HttpHeaders.SESSION_TOKEN not in headers

    def test_per_call_session_level_enables_replay(self):
        """Test that a per-call Session level replays even with another default."""
        options = RequestOptions(consistency_level=ConsistencyLevel.SESSION)
        headers = compose_headers(ConsistencyLevel.EVENTUAL, options, OperationType.QUERY, "0:7")
        assert headers[HttpHeaders.SESSION_TOKEN] == "0:7"

    def test_explicit_session_token_wins(self):
        """Test that an explicit token is sent regardless of tracking."""
        options = RequestOptions(session_token="0:99")
        headers = compose_headers(ConsistencyLevel.SESSION, options, OperationType.READ, "0:42")
        assert headers[HttpHeaders.SESSION_TOKEN] == "0:99"

    def test_access_conditions(self):
        """Test If-Match and If-None-Match headers."""
        headers = compose_headers(None, RequestOptions.if_match('"e1"'), OperationType.REPLACE)
        assert headers[HttpHeaders.IF_MATCH] == '"e1"'

        none_match = RequestOptions(
            access_condition=AccessCondition(type=AccessConditionType.IF_NONE_MATCH, condition='"e2"')
        )
        headers = compose_headers(None, none_match, OperationType.READ)
        assert headers[HttpHeaders.IF_NONE_MATCH] == '"e2"'
        assert HttpHeaders.IF_MATCH not in headers

    def test_trigger_lists_are_comma_joined(self):
        """Test that trigger name lists become comma-separated headers."""
        options = RequestOptions(pre_trigger_include=["a", "b"], post_trigger_include="c")
        headers = compose_headers(None, options, OperationType.CREATE)
        assert headers[HttpHeaders.PRE_TRIGGER_INCLUDE] == "a,b"
        assert headers[HttpHeaders.POST_TRIGGER_INCLUDE] == "c"

    def test_indexing_and_expiry(self):
        """Test indexing directive and token expiry headers."""
        options = RequestOptions(
            indexing_directive=IndexingDirective.EXCLUDE,
            resource_token_expiry_seconds=600,
        )
        headers = compose_headers(None, options, OperationType.CREATE)
        assert headers[HttpHeaders.INDEXING_DIRECTIVE] == "Exclude"
        assert headers[HttpHeaders.RESOURCE_TOKEN_EXPIRY] == "600"


class TestComposeFeedHeaders:
    """Tests for compose_feed_headers."""

    def test_first_page(self):
        """Test that the first page carries page size but no continuation."""
        headers = compose_feed_headers(None, FeedOptions(max_item_count=5), None)
        assert headers == {HttpHeaders.MAX_ITEM_COUNT: "5"}

    def test_continuation_is_sent_verbatim(self):
        """Test that the continuation token is not altered."""
        token = '{"token":"+RID:abc==#RT:1","range":{"min":"","max":"FF"}}'
        headers = compose_feed_headers(None, None, token)
        assert headers[HttpHeaders.CONTINUATION] == token

    def test_session_replay_for_session_default(self):
        """Test that feed reads under Session replay the tracked token."""
        headers = compose_feed_headers(ConsistencyLevel.SESSION, None, None, "0:3")
        assert headers[HttpHeaders.SESSION_TOKEN] == "0:3"
        assert headers[HttpHeaders.CONSISTENCY_LEVEL] == "Session"
