"""
Property-based tests for keeping params in sync with the URL.
"""

from hypothesis import given, strategies as st, settings

from api_workbench.schemas.request import RequestParam
from api_workbench.services.url_params import parse_url_params, sync_params


path_name_strategy = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=10)


class TestPathParamInvariant:
    """
    Property: every :name token in the URL has exactly one path param.
    """

    @given(names=st.lists(path_name_strategy, min_size=0, max_size=5))
    @settings(max_examples=100)
    def test_one_path_param_per_token(self, names: list[str]):
        """
        Property: For any URL, the synced path params are the distinct tokens in order.
        """
        url = "https://api.example.com/" + "/".join(f"x/:{name}" for name in names)
        params = sync_params(url, [])
        path_keys = [p.key for p in params if p.type == "path"]
        assert path_keys == list(dict.fromkeys(names))

    def test_host_port_is_not_a_path_param(self):
        assert parse_url_params("http://localhost:8080/users/:id") == [
            RequestParam(key="id", value="", type="path"),
        ]

    def test_path_values_survive_url_edits(self):
        existing = [RequestParam(key="id", value="42", type="path")]
        params = sync_params("http://x/users/:id/posts/:post", existing)
        assert params == [
            RequestParam(key="id", value="42", type="path"),
            RequestParam(key="post", value="", type="path"),
        ]

    def test_removed_tokens_drop_their_params(self):
        existing = [
            RequestParam(key="id", value="42", type="path"),
            RequestParam(key="old", value="x", type="path"),
        ]
        assert sync_params("http://x/users/:id", existing) == [RequestParam(key="id", value="42", type="path")]


class TestQueryParamSync:

    def test_literal_query_is_detected(self):
        assert sync_params("http://x/items?page=2&sort=", []) == [
            RequestParam(key="page", value="2", type="query"),
            RequestParam(key="sort", value="", type="query"),
        ]

    def test_url_value_wins_when_non_empty(self):
        existing = [RequestParam(key="page", value="1", type="query")]
        assert sync_params("http://x/items?page=3", existing) == [RequestParam(key="page", value="3", type="query")]

    def test_empty_url_value_keeps_existing(self):
        existing = [RequestParam(key="page", value="1", type="query")]
        assert sync_params("http://x/items?page=", existing) == [RequestParam(key="page", value="1", type="query")]

    def test_manual_query_params_are_kept_last(self):
        existing = [RequestParam(key="token", value="t", type="query")]
        params = sync_params("http://x/items/:id?page=1", existing)
        assert params == [
            RequestParam(key="id", value="", type="path"),
            RequestParam(key="page", value="1", type="query"),
            RequestParam(key="token", value="t", type="query"),
        ]
