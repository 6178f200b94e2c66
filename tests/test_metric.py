from landed.metric import _normalize_api_endpoint, api_call_count, record_api_call


def test_record_api_call_tracks_endpoint_label():
    before = api_call_count.labels(endpoint="pulls")._value.get()
    record_api_call(endpoint="/repos/org/repo/pulls/42")
    after = api_call_count.labels(endpoint="pulls")._value.get()
    assert after == before + 1


def test_normalize_api_endpoint_examples():
    assert _normalize_api_endpoint("/repos/org/repo/pulls/123") == "pulls"
    assert _normalize_api_endpoint("/repos/org/repo/git/ref/heads/dev") == "ref/heads"
    assert _normalize_api_endpoint("/repos/org/repo/git/ref/tags/2026.2.0") == (
        "ref/tags"
    )
    assert _normalize_api_endpoint("/repos/org/repo/git/tags/" + "d" * 40) == "tags"
    assert (
        _normalize_api_endpoint("/repos/org/repo/compare/" + "a" * 40 + "..." + "b" * 40)
        == "compare"
    )
    assert _normalize_api_endpoint("/rate_limit") == "other"
