import pytest

from vcav_client.urls import append_filters, build_url, encode_filters


def test_build_url_without_filter():
    assert build_url("vcav.example.com", "sites") == "https://vcav.example.com/sites"
    assert build_url("vcav.example.com", "sites", {}) == "https://vcav.example.com/sites"
    assert build_url("vcav.example.com", "sites", None) == "https://vcav.example.com/sites"


def test_build_url_strips_leading_slash():
    assert build_url("vcav.example.com", "/vm-replications") == "https://vcav.example.com/vm-replications"


def test_build_url_filters_in_insertion_order():
    url = build_url("h", "vm-replications", {"site": "a", "offset": 0, "limit": 100})
    assert url == "https://h/vm-replications?site=a&offset=0&limit=100"
    assert url.count("?") == 1
    assert url.split("?")[1].split("&") == ["site=a", "offset=0", "limit=100"]


def test_build_url_reversed_insertion_order():
    url = build_url("h", "p", {"limit": 100, "offset": 0})
    assert url == "https://h/p?limit=100&offset=0"


def test_build_url_does_not_escape():
    assert build_url("h", "p", {"name": "a b/c"}) == "https://h/p?name=a b/c"


def test_build_url_booleans_lowercase():
    assert build_url("h", "p", {"isPaused": True}) == "https://h/p?isPaused=true"


def test_build_url_is_idempotent():
    filters = {"a": 1, "b": "x"}
    assert build_url("h", "p", filters) == build_url("h", "p", filters)
    assert filters == {"a": 1, "b": "x"}


@pytest.mark.parametrize("host,path", [("", "sites"), ("h", ""), ("  ", "sites"), ("h", "/")])
def test_build_url_requires_host_and_path(host, path):
    with pytest.raises(ValueError):
        build_url(host, path)


def test_append_filters_to_existing_query():
    assert append_filters("https://h/p?x=1", {"y": 2}) == "https://h/p?x=1&y=2"
    assert append_filters("https://h/p", {"y": 2}) == "https://h/p?y=2"
    assert append_filters("https://h/p", None) == "https://h/p"


def test_encode_filters_empty():
    assert encode_filters({}) == ""
    assert encode_filters(None) == ""
